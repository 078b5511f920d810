"""
Recalculate stored scores for every completed lead of an assessment.
Use after option points, category inclusion or tiers were edited.

Usage:
    python -m assessment_scoring.scripts.recalculate_scores <assessment_id> --dry-run   # compute only
    python -m assessment_scoring.scripts.recalculate_scores <assessment_id>             # compute and persist
"""

import argparse
import asyncio
import logging
import sys

from assessment_scoring.core.logging import configure_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Recalculate scores for an assessment")
    parser.add_argument("assessment_id", help="Assessment whose completed leads are re-scored")
    parser.add_argument("--dry-run", action="store_true", help="Compute without writing to Snowflake")
    args = parser.parse_args(argv)

    configure_logging(fmt="console")

    from assessment_scoring.scoring.engine import ScoringEngine

    engine = ScoringEngine()
    result = asyncio.run(engine.recalculate_assessment(args.assessment_id, dry_run=args.dry_run))

    logger.info(f"Assessment:  {result.assessment_id}")
    logger.info(f"Leads:       {result.leads_total}")
    logger.info(f"Scored:      {result.leads_scored}")
    logger.info(f"Failed:      {result.leads_failed}")
    for lead_id, error in result.failures.items():
        logger.error(f"  {lead_id}: {error}")
    if args.dry_run:
        logger.info("DRY RUN: nothing was written")

    return 1 if result.leads_failed else 0


if __name__ == "__main__":
    sys.exit(main())
