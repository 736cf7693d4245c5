"""Infrastructure layer — stream loading, live store, hashing, realm facade.

This layer bridges raw accounts/groups streams and the pure domain types.
It must never import from services, commands, or output.
"""
