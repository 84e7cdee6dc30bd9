"""
Read-only social graph access.

Responsibilities:
- Derive following / followers / mutual sets for a user.
- Look up direct connection rows and friend-of-friend paths.
- Degrade every failed read to an empty result.
"""
