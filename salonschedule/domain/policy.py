"""
Who may edit whose schedule.
"""

from typing import Iterable

from .exceptions import AuthorizationError
from .models import Actor, Role

DEFAULT_ELEVATED_ROLES = (Role.OWNER, Role.ADMIN)


class AccessPolicy:
    """
    Edit permission for schedule write paths.

    Elevated roles may edit every employee; anybody else may only edit the
    schedule of the employee record they are linked to. Read paths are not
    gated here.
    """

    def __init__(self, elevated_roles: Iterable[Role] = DEFAULT_ELEVATED_ROLES):
        self.elevated_roles = frozenset(Role(role) for role in elevated_roles)

    def can_edit(self, actor: Actor, target_employee_id: str) -> bool:
        if actor.role in self.elevated_roles:
            return True
        return actor.employee_id is not None and actor.employee_id == target_employee_id

    def ensure_can_edit(self, actor: Actor, target_employee_id: str) -> None:
        """
        Raises:
            AuthorizationError: If the actor may not edit the target schedule
        """
        if not self.can_edit(actor, target_employee_id):
            raise AuthorizationError(
                f"User {actor.user_id} ({actor.role.value}) may not edit "
                f"the schedule of employee {target_employee_id}"
            )
