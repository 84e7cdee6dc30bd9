"""
Recommendation and credibility reads.

Responsibilities:
- Fetch a restaurant's recommendations (newest first) with nested dishes.
- Fetch single recommendations and an author's authored history.
- Validate raw rows into typed records at the boundary.
"""
