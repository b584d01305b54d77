from typing import Optional

from ..config import settings
from ..errors import Forbidden
from .schema import Identity


def ensure_owner(owner_id: Optional[int], identity: Identity, resource: str) -> None:
    """The single ownership rule: only the recorded owner may mutate a resource."""
    if owner_id != identity.user_id:
        raise Forbidden(resource)


def ensure_owner_if_strict(owner_id: Optional[int], identity: Identity, resource: str) -> None:
    """
    Ownership for mutations that are open to any authenticated user by default
    (deletes, post edits). Enforced only when STRICT_OWNERSHIP is on.
    """
    if settings.STRICT_OWNERSHIP:
        ensure_owner(owner_id, identity, resource)
