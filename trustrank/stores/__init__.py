"""
Read contracts for the stores the engine depends on.

Responsibilities:
- Define the async read interfaces for social graph, taste alignment,
  recommendation and credibility data.
- Provide pandas-backed reference stores loaded from processed CSV files.
"""
