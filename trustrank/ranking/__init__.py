"""
Restaurant-level ranking views.

Responsibilities:
- Classify other people's recommendations (flat flags or legacy tiers).
- Aggregate nested dish ratings into a ranked dish summary.
"""
