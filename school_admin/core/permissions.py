from enum import Enum
from typing import Mapping, FrozenSet


class Role(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    INSTITUTE_ADMIN = "INSTITUTE_ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"
    STAFF = "STAFF"
    USER = "USER"


# roles an institute admin may hand out through create-institute-user
INSTITUTE_USER_ROLES: FrozenSet[str] = frozenset({
    Role.TEACHER.value,
    Role.STUDENT.value,
    Role.PARENT.value,
    Role.STAFF.value,
    Role.USER.value,
})


# =====================================================
# ROLE -> CAPABILITIES
# =====================================================

ROLE_PERMISSIONS: Mapping[str, FrozenSet[str]] = {
    Role.SUPER_ADMIN.value: frozenset({
        "CREATE_NEW_INSTITUTES",
        "GET_ALL_INSTITUTES",
        "GET_INSTITUTE_BY_ID",
        "UPDATE_INSTITUTE",
        "DELETE_INSTITUTE",
        "CREATE_SUPER_ADMIN",
        "CREATE_INSTITUTE_ADMIN",
        "UPDATE_USER_STATUS",
    }),
    Role.INSTITUTE_ADMIN.value: frozenset({
        "GET_MY_INSTITUTE",
        "UPDATE_MY_INSTITUTE",
        "CREATE_USER",
        "GET_INSTITUTE_USERS",
        "UPDATE_USER",
        "DELETE_USER",
        "CREATE_CLASS",
        "GET_CLASSES",
        "UPDATE_CLASS",
        "DELETE_CLASS",
        "CREATE_ACADEMIC_SESSION",
        "GET_ACADEMIC_SESSIONS",
        "UPDATE_ACADEMIC_SESSION",
        "DELETE_ACADEMIC_SESSION",
    }),
    Role.TEACHER.value: frozenset({
        "GET_MY_PROFILE",
        "GET_MY_STUDENTS",
        "GET_CLASSES",
        "GET_ACADEMIC_SESSIONS",
    }),
    Role.STUDENT.value: frozenset({
        "GET_MY_PROFILE",
        "GET_CLASSES",
        "GET_ACADEMIC_SESSIONS",
    }),
}


def has_permission(role, capability) -> bool:
    """True iff ``role`` is granted ``capability``. Unknown roles get nothing."""
    if isinstance(role, Role):
        role = role.value
    try:
        return capability in ROLE_PERMISSIONS.get(role, frozenset())
    except TypeError:
        # unhashable role or capability
        return False
