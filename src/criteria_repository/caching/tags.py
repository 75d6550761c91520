"""Cache tag resolution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..ports.auth import IAuthContext

logger = logging.getLogger("criteria_repository.caching")

ANONYMOUS = "0"


class TagResolver:
    """
    Resolves the tag that groups a repository's cache entries.

    Precedence:

    1. A manual override (``set_user_tag``) gives ``{Repository}_{override}``.
    2. With user tagging enabled, the first guard in *guards* order that
       reports an authenticated principal gives ``{Repository}_{principal}``.
    3. Otherwise ``{Repository}_0``.
    """

    def __init__(
        self,
        repository: type,
        guards: Sequence[str],
        auth: IAuthContext | None = None,
    ) -> None:
        self._basename = repository.__name__
        self._guards = tuple(guards)
        self._auth = auth
        self._override: Any = None
        self.use_user_tag = False

    def set_override(self, tag: Any) -> None:
        self._override = tag

    def clear_override(self) -> None:
        self._override = None

    @property
    def override(self) -> Any:
        return self._override

    def resolve(self) -> str:
        if self._override is not None:
            return f"{self._basename}_{self._override}"
        if self.use_user_tag:
            principal = self._principal()
            if principal is not None:
                return f"{self._basename}_{principal}"
        return f"{self._basename}_{ANONYMOUS}"

    def _principal(self) -> Any:
        if self._auth is None:
            logger.debug("User tagging enabled without an auth context")
            return None
        for name in self._guards:
            guard = self._auth.guard(name)
            if guard.is_authenticated():
                return guard.current_principal_id()
        return None
