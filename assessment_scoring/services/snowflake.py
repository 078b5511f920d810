"""
Snowflake Connection Factory
assessment_scoring/services/snowflake.py

Used by repositories via BaseRepository.get_connection().
"""

import snowflake.connector

from assessment_scoring.config import settings


def get_snowflake_connection():
    """Open a new Snowflake connection from application settings."""
    return snowflake.connector.connect(
        account=settings.SNOWFLAKE_ACCOUNT,
        user=settings.SNOWFLAKE_USER,
        password=settings.SNOWFLAKE_PASSWORD.get_secret_value(),
        warehouse=settings.SNOWFLAKE_WAREHOUSE,
        database=settings.SNOWFLAKE_DATABASE,
        schema=settings.SNOWFLAKE_SCHEMA,
        role=settings.SNOWFLAKE_ROLE,
    )
