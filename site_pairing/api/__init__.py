"""Site API access.

- Session / SessionRegistry: externally acquired sessions keyed by host
- RequestDispatcher: one authenticated request, parsed XML response
"""

from site_pairing.api.dispatcher import RequestDispatcher, TransportError
from site_pairing.api.session import AuthenticationMissing, Session, SessionRegistry

__all__ = [
    "AuthenticationMissing",
    "RequestDispatcher",
    "Session",
    "SessionRegistry",
    "TransportError",
]
