"""Site pairing engine.

Configures and verifies bidirectional site associations between
independent installations of a multi-tenant cloud platform through its
REST+XML API: request dispatch, async task polling, association access,
pairing and removal.
"""

__version__ = "0.1.0"
