"""In-memory bearer session registry.

Maps opaque bearer tokens to user IDs for the lifetime of the process.

Sessions do not survive a restart.

One registry is created per application in create_app() and stored on
app.state. Handlers reach it through the get_session_registry dependency.
"""

import secrets
import threading

# 24 random bytes -> 48 hex characters
TOKEN_BYTES = 24


class SessionRegistry:
    """Token -> user ID mapping with issuance and revocation.

    Mutations are serialized by a lock so concurrent issue/revoke calls
    (including ones from threadpool-run sync endpoints) never interleave.
    resolve() is a plain dict read and takes no lock.

    No expiry policy: a token lives until revoked or until the process exits.
    A user may hold any number of tokens at once.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, int] = {}
        self._lock = threading.Lock()

    def issue(self, user_id: int) -> str:
        """Create a new session for user_id.

        Collisions between 192-bit random tokens are treated as impossible,
        so no uniqueness check is made.

        Args:
            user_id: Authenticated user's primary key.

        Returns:
            New bearer token.
        """
        token = secrets.token_hex(TOKEN_BYTES)
        with self._lock:
            self._sessions[token] = user_id
        return token

    def resolve(self, token: str | None) -> int | None:
        """Look up the user for a bearer token.

        Args:
            token: Bearer token from the Authorization header.

        Returns:
            User ID, or None when the token is empty or unknown.
        """
        if not token:
            return None
        return self._sessions.get(token)

    def revoke(self, token: str | None) -> None:
        """End a session. Unknown or empty tokens are ignored."""
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def revoke_user(self, user_id: int) -> int:
        """End every session belonging to user_id.

        Args:
            user_id: User whose sessions should be dropped.

        Returns:
            Number of sessions removed.
        """
        with self._lock:
            tokens = [t for t, uid in self._sessions.items() if uid == user_id]
            for token in tokens:
                del self._sessions[token]
        return len(tokens)

    def clear(self) -> None:
        """Drop all sessions (for testing)."""
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
