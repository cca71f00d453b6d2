"""Access rules for events, community posts and notices.

``evaluate`` is a pure function: it never touches the database and never
raises. Callers look the resource up first (a missing row is a 404 before any
permission question is asked) and turn a denied ``Decision`` into an HTTP
error themselves.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Category(str, Enum):
    EVENT = "event"
    COMMUNITY = "community"
    NOTICE = "notice"


class Operation(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


class DenyReason(str, Enum):
    AUTH_REQUIRED = "auth_required"
    NO_PERMISSION = "no_permission"
    ADMIN_REQUIRED = "admin_required"


DENY_MESSAGES = {
    DenyReason.AUTH_REQUIRED: "Login required",
    DenyReason.NO_PERMISSION: "You do not have permission to access this resource",
    DenyReason.ADMIN_REQUIRED: "Admin privileges required",
}


@dataclass(frozen=True)
class Actor:
    id: int
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> Optional["Actor"]:
        if user is None:
            return None
        return cls(id=user.id, is_admin=bool(user.is_admin))


@dataclass(frozen=True)
class Resource:
    category: Category
    author_id: Optional[int] = None
    is_private: bool = False

    @classmethod
    def for_event(cls, event) -> "Resource":
        return cls(Category.EVENT, event.author_id, bool(event.is_private))


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None

    @property
    def message(self) -> Optional[str]:
        return DENY_MESSAGES.get(self.reason) if self.reason else None

    def __bool__(self) -> bool:
        return self.allowed


PERMIT = Decision(True)


def deny(reason: DenyReason) -> Decision:
    return Decision(False, reason)


def evaluate(actor: Optional[Actor], resource: Resource, operation: Operation) -> Decision:
    """Decide whether ``actor`` (None for anonymous) may perform ``operation``."""
    if operation == Operation.VIEW:
        if not resource.is_private:
            return PERMIT
        if actor is None:
            return deny(DenyReason.AUTH_REQUIRED)
        # Private resources are owner-only; being an admin does not widen this.
        if actor.id == resource.author_id:
            return PERMIT
        return deny(DenyReason.NO_PERMISSION)

    if actor is None:
        return deny(DenyReason.AUTH_REQUIRED)

    if resource.category == Category.NOTICE:
        return PERMIT if actor.is_admin else deny(DenyReason.ADMIN_REQUIRED)

    if operation == Operation.CREATE:
        return PERMIT

    if actor.id == resource.author_id or actor.is_admin:
        return PERMIT
    return deny(DenyReason.NO_PERMISSION)


def can_view(actor: Optional[Actor], event) -> bool:
    """Visibility filter for calendar and list views."""
    return evaluate(actor, Resource.for_event(event), Operation.VIEW).allowed
