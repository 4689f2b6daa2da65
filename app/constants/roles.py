"""
Role Constants for DormGuard

This module defines the closed set of roles an authenticated identity can
carry, and the capability check every route and service relies on.
"""

from enum import Enum


class RoleName(str, Enum):
    """Enumeration of role names carried in identity tokens."""

    ADMIN = "admin"
    HELPDESK = "helpdesk"
    TENANT = "tenant"

    @classmethod
    def from_claim(cls, value: str) -> "RoleName":
        """
        Normalize a stored or decoded role literal.

        Staff accounts store "Admin" / "HelpDesk"; tokens carry the lowercase
        value. Both collapse to the same member.

        Raises:
            ValueError: If the value names no known role
        """
        normalized = (value or "").strip().lower().replace("_", "").replace(" ", "")
        return cls(normalized)


class StaffRole(str, Enum):
    """Role literals stored on staff accounts."""

    ADMIN = "Admin"
    HELPDESK = "HelpDesk"


# Staff literal -> token role
STAFF_ROLE_MAP = {
    StaffRole.ADMIN: RoleName.ADMIN,
    StaffRole.HELPDESK: RoleName.HELPDESK,
}

# Roles whose capability includes another role's
IMPLIED_ROLES = {
    RoleName.ADMIN: {RoleName.HELPDESK},
}

STAFF_ROLES = (RoleName.ADMIN, RoleName.HELPDESK)


def has_role(actor_role: RoleName | str, required: RoleName | str) -> bool:
    """
    Check whether an actor's role grants a required capability.

    Admin also satisfies helpdesk so administrators can run the desk.

    Args:
        actor_role: Role carried by the identity
        required: Role the operation requires

    Returns:
        bool: True if the capability is granted
    """
    try:
        actor = RoleName.from_claim(actor_role)
        needed = RoleName.from_claim(required)
    except ValueError:
        return False

    if actor == needed:
        return True
    return needed in IMPLIED_ROLES.get(actor, set())
