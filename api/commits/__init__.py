"""
Commit listing feature: `GET /api/commits`.
"""
