"""
Role based permission classes.

The role sets mirror the hospital's access policies: administrators only,
doctors or administrators, clinical staff or administrators, and the front
desk (receptionists plus clinical staff) for registration, booking and
billing.  Reads are open to every authenticated role.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

ADMIN_ROLES = {"admin"}
DOCTOR_ROLES = {"admin", "doctor"}
STAFF_ROLES = {"admin", "doctor", "nurse", "lab_staff"}
FRONT_DESK_ROLES = STAFF_ROLES | {"receptionist"}


def has_role(user, roles) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


class _RoleWritePermission(BasePermission):
    """Any authenticated user may read; writes require one of ``roles``."""
    roles: set = set()

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if request.method in SAFE_METHODS:
            return bool(user and user.is_authenticated)
        return has_role(user, self.roles)


class AdminWrite(_RoleWritePermission):
    roles = ADMIN_ROLES


class DoctorOrAdminWrite(_RoleWritePermission):
    roles = DOCTOR_ROLES


class StaffOrAdminWrite(_RoleWritePermission):
    roles = STAFF_ROLES


class FrontDeskWrite(_RoleWritePermission):
    roles = FRONT_DESK_ROLES

