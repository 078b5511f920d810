"""
Services module for the Assessment Scoring Engine.
"""

from assessment_scoring.services.dispatch_queue import DispatchQueue, get_dispatch_queue
from assessment_scoring.services.snowflake import get_snowflake_connection

__all__ = [
    "DispatchQueue",
    "get_dispatch_queue",
    "get_snowflake_connection",
]
