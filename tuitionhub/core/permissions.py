# tuitionhub/core/permissions.py
# Composable authorization predicates
#
# A predicate takes (caller, resource) and returns bool. Services combine
# them and call authorize(), which raises Forbidden on a miss:
#
#   authorize(user, tuition, TUITION_OWNER_OR_ADMIN,
#             "You are not authorized to update this tuition")
#
# Role-only gates used as route dependencies live in dependencies.py.

from typing import Any, Callable, Optional

from tuitionhub.core.exceptions import Forbidden

Predicate = Callable[[Any, Any], bool]


def has_role(*roles: str) -> Predicate:
    """Caller's role is one of `roles`. Ignores the resource."""
    def check(caller, resource=None) -> bool:
        return caller is not None and caller.role in roles
    return check


def is_owner(field: str = "user_id") -> Predicate:
    """Caller's id equals the resource's `field` attribute."""
    def check(caller, resource) -> bool:
        if caller is None or resource is None:
            return False
        return getattr(resource, field, None) == caller.id
    return check


def is_self() -> Predicate:
    """Caller is the resource (for User resources)."""
    def check(caller, resource) -> bool:
        return caller is not None and resource is not None and resource.id == caller.id
    return check


def any_of(*predicates: Predicate) -> Predicate:
    def check(caller, resource=None) -> bool:
        return any(p(caller, resource) for p in predicates)
    return check


def all_of(*predicates: Predicate) -> Predicate:
    def check(caller, resource=None) -> bool:
        return all(p(caller, resource) for p in predicates)
    return check


def authorize(
    caller,
    resource,
    predicate: Predicate,
    message: Optional[str] = None,
) -> None:
    """Raise Forbidden unless predicate(caller, resource) holds."""
    if not predicate(caller, resource):
        raise Forbidden(message or "You do not have permission to access this resource.")


# ── Shared Rules ──────────────────────────────────────────────────────────────

is_admin = has_role("admin")

# Tuitions and applications carry the posting student as student_id
TUITION_OWNER_OR_ADMIN = any_of(is_owner("student_id"), is_admin)

# Tutor-side ownership of an application (a role change revokes it)
APPLICATION_TUTOR = all_of(has_role("tutor"), is_owner("tutor_id"))

# Payment parties: the paying student, the paid tutor, or an admin
PAYMENT_PARTY_OR_ADMIN = any_of(is_owner("student_id"), is_owner("tutor_id"), is_admin)
