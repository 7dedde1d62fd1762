"""Resolution of the acting principal.

Authentication itself happens elsewhere; this module only turns whatever
the caller hands over into an owner id, or nothing.
"""

from typing import Any, Mapping, Optional, Protocol

from .config import get_config
from .errors import unauthenticated
from .results import Result


class IdentityResolver(Protocol):
    """Anything that can name the owner behind a request."""

    def resolve_owner(self, request: Any) -> Optional[str]:
        ...


class StaticIdentityResolver:
    """Always resolves to the same owner. Used by scripts and tests."""

    def __init__(self, owner_id: Optional[str]):
        self.owner_id = owner_id

    def resolve_owner(self, request: Any = None) -> Optional[str]:
        return _clean(self.owner_id)


class EnvIdentityResolver:
    """Resolves the owner from the request, then from SHELFLISTS_OWNER."""

    def __init__(self, key: str = "owner"):
        self.key = key

    def resolve_owner(self, request: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        if request:
            owner = _clean(request.get(self.key))
            if owner:
                return owner
        return get_config().owner_id


def require_owner(resolver: IdentityResolver, request: Any = None) -> Result[str]:
    """Resolve the owner or fail with Unauthenticated."""
    owner_id = resolver.resolve_owner(request)
    if not owner_id:
        return unauthenticated()
    return Result.ok(owner_id)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
