"""
Permission checks for report operations.
"""
from dataclasses import dataclass

from ..models.models import ADMIN_ROLE


@dataclass(frozen=True)
class AuthContext:
    """Authenticated caller, resolved once per request by the API layer."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def can_modify_report(ctx: AuthContext, created_by: int) -> bool:
    """
    Owner-or-admin rule.
    - Admin can modify any report
    - Otherwise only the user who created it
    """
    if ctx.is_admin:
        return True
    return ctx.user_id == created_by
