"""
Assessment Scoring Engine

Turns a lead's answers into per-category and overall scores and tiers.
"""

__version__ = "1.0.0"
