"""
Per-recommendation and per-author scoring.

Responsibilities:
- Personalize a recommendation's trust score by social distance and engagement.
- Summarize an author's history into a credibility snapshot.
"""
