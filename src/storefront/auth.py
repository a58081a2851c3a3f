"""Authenticated principal supplied by the authentication collaborator."""

from dataclasses import dataclass

from storefront.errors import Unauthorized


@dataclass(frozen=True)
class Principal:
    user_id: str
    is_admin: bool = False


def ensure_owner_or_admin(principal: Principal, owner_id, action: str) -> None:
    """Raise Unauthorized unless the principal owns the record or is an admin."""
    if principal.is_admin:
        return
    if str(principal.user_id) != str(owner_id):
        raise Unauthorized(action)


def ensure_admin(principal: Principal, action: str) -> None:
    if not principal.is_admin:
        raise Unauthorized(action)
