"""Authenticated API sessions, keyed by target host.

Acquiring a session (logging in, refreshing tokens) happens outside this
package.  Callers build ``Session`` values, register them in a
``SessionRegistry`` and hand the registry to the ``RequestDispatcher``;
there is no process-wide connection state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from site_pairing.core.constants import BEARER_AUTH_HEADER, VCLOUD_AUTH_HEADER
from site_pairing.core.exceptions import PermanentError
from site_pairing.utils.helpers import host_of

if TYPE_CHECKING:
    from collections.abc import Iterable


class AuthenticationMissing(PermanentError):
    """No active session exists for the target host. Fatal, never retried."""

    default_stage = "dispatch"
    default_code = "AUTH_SESSION_MISSING"

    def __init__(self, host: str) -> None:
        self.host = host
        super().__init__(f"No active session for host {host!r}", site=host)


@dataclass(frozen=True, slots=True)
class Session:
    """An existing authenticated session against one site.

    Attributes:
        host: Hostname the session was opened against.
        token: Session token or access token.
        bearer: Send ``Authorization: Bearer <token>`` instead of the
            legacy ``x-vcloud-authorization`` header.
    """

    host: str
    token: str = field(repr=False)
    bearer: bool = False

    def auth_headers(self) -> dict[str, str]:
        if self.bearer:
            return {BEARER_AUTH_HEADER: f"Bearer {self.token}"}
        return {VCLOUD_AUTH_HEADER: self.token}


class SessionRegistry:
    """Sessions indexed by lower-cased hostname."""

    def __init__(self, sessions: Iterable[Session] = ()) -> None:
        self._sessions: dict[str, Session] = {}
        for session in sessions:
            self.add(session)

    def add(self, session: Session) -> None:
        self._sessions[session.host.lower()] = session

    def get(self, host: str) -> Session | None:
        return self._sessions.get(host.lower())

    def resolve(self, uri: str) -> Session:
        """Return the session for the host of *uri*.

        Raises:
            AuthenticationMissing: When no session is registered for that host.
        """
        host = host_of(uri)
        session = self.get(host)
        if session is None:
            raise AuthenticationMissing(host)
        return session
