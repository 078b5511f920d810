"""
Tier Classifier
assessment_scoring/scoring/tier_classifier.py

Maps a percentage onto the assessment's labelled score bands.

Rule:
    Tiers are ordered by (min_pct, sort_order). The first tier with
    min_pct <= percentage <= max_pct wins; None when nothing matches or the
    percentage itself is None.

Tiers are expected to partition [0, 100] without gaps or overlaps. That is
not enforced; ``find_partition_issues`` reports violations so callers can log
them, and the first-match order above stays authoritative when bands overlap.
"""

from typing import List, Optional, Sequence

from assessment_scoring.models.assessment import ScoreTier


class TierClassifier:
    """Classify percentages against an ordered set of score tiers."""

    def __init__(self, tiers: Sequence[ScoreTier]):
        self.tiers: List[ScoreTier] = sorted(tiers, key=lambda t: (t.min_pct, t.sort_order))

    def classify(self, percentage: Optional[int]) -> Optional[ScoreTier]:
        if percentage is None:
            return None
        for tier in self.tiers:
            if tier.min_pct <= percentage <= tier.max_pct:
                return tier
        return None


def find_partition_issues(tiers: Sequence[ScoreTier]) -> List[str]:
    """
    Check that tiers cover [0, 100] exactly once.

    Bands are inclusive integer ranges, so [0, 39] followed by [40, 69] is
    contiguous.

    Returns:
        Human-readable issues; empty when the tiers form a partition.
    """
    ordered = sorted(tiers, key=lambda t: (t.min_pct, t.sort_order))
    issues: List[str] = []

    if not ordered:
        return ["no tiers configured"]

    for tier in ordered:
        if tier.min_pct > tier.max_pct:
            issues.append(f"tier '{tier.label}' has min_pct {tier.min_pct} > max_pct {tier.max_pct}")

    if ordered[0].min_pct > 0:
        issues.append(f"gap: 0-{ordered[0].min_pct - 1} not covered")

    covered_to = ordered[0].max_pct
    for tier in ordered[1:]:
        if tier.min_pct <= covered_to:
            issues.append(f"overlap: tier '{tier.label}' starts at {tier.min_pct}, "
                          f"already covered to {covered_to}")
        elif tier.min_pct > covered_to + 1:
            issues.append(f"gap: {covered_to + 1}-{tier.min_pct - 1} not covered")
        covered_to = max(covered_to, tier.max_pct)

    if covered_to < 100:
        issues.append(f"gap: {covered_to + 1}-100 not covered")

    return issues
