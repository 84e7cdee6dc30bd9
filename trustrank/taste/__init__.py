"""
Read-only access to the precomputed taste-alignment matrix.

Responsibilities:
- Return a viewer's similarity to other users as a validated mapping.
- Keep "no signal" (missing key) distinct from a known zero.
"""
