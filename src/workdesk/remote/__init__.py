"""
Backend access.

Components:
- client.py: async HTTP client, one method per endpoint
- models.py: User / Task / Note wire records
- errors.py: typed errors + user-facing messages
"""
