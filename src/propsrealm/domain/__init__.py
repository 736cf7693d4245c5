"""Domain layer — accounts, credentials, line decoding and role rules.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
