"""Cancellation registry service.

CancellationRegistry is a stateful service mapping request uid to the cancel
token of that uid's in-flight call. It is owned by a single RequestEpic.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from actorflow.cancellation.token import CancelToken

logger = logging.getLogger(__name__)

SUPERSEDED = "superseded"
CANCELLED = "cancelled"


class CancellationRegistry:
    """Holds at most one live cancel token per request uid.

    Access is single-threaded and cooperative: every operation completes
    without suspending, so no locking is needed even though completions
    arrive in arbitrary order.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, CancelToken] = {}

    def register(self, uid: str) -> CancelToken:
        """Create the token for a new call on ``uid``, superseding any live one.

        A previous token for the same uid is cancelled exactly once before the
        new one is stored ("latest wins").

        Args:
            uid: Request identity.

        Returns:
            Freshly created token, now the only entry for ``uid``.
        """
        previous = self._tokens.pop(uid, None)
        if previous is not None:
            logger.debug("Superseding in-flight request %r", uid)
            previous.cancel(SUPERSEDED)

        token = CancelToken()
        self._tokens[uid] = token
        return token

    def cancel(self, uid: str, reason: str = CANCELLED) -> bool:
        """Cancel and forget the live token for ``uid``. Idempotent.

        Returns:
            True if a live token was cancelled, False if none was registered.
        """
        token = self._tokens.pop(uid, None)
        if token is None:
            return False
        logger.debug("Cancelling request %r (%s)", uid, reason)
        token.cancel(reason)
        return True

    def clear(self, uid: str, token: CancelToken | None = None) -> bool:
        """Forget the entry for ``uid`` without cancelling it.

        Args:
            uid: Request identity.
            token: When given, the entry is removed only if it still holds this
                token. A superseded call settling late must not drop the entry
                of the call that replaced it.

        Returns:
            True if an entry was removed.
        """
        current = self._tokens.get(uid)
        if current is None:
            return False
        if token is not None and current is not token:
            return False
        del self._tokens[uid]
        return True

    def get(self, uid: str) -> CancelToken | None:
        return self._tokens.get(uid)

    def active(self) -> Iterator[str]:
        """Iterate uids with a live token."""
        return iter(list(self._tokens))

    def __contains__(self, uid: object) -> bool:
        return uid in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)
