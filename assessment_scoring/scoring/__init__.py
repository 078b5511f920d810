"""
scoring/: Assessment Scoring Engine

Modules:
    utils.py                  - Integer parsing and percentage rounding
    question_resolver.py      - Per-question (points, possible) by question type
    aggregation.py            - Category and overall aggregation
    tier_classifier.py        - Percentage → score tier
    calculator.py             - Pure pipeline over loaded inputs
    engine.py                 - ComputeScore + recalculation (I/O, persistence, dispatch)
"""
