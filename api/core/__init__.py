"""
Process-wide plumbing: settings, logging setup and the asyncpg pool helpers.
"""
