import enum
from employee_portal.db.models.user import Role


class Action(str, enum.Enum):
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"


EVERYONE = frozenset({Role.admin, Role.employee})
ADMIN_ONLY = frozenset({Role.admin})

# (resource, action) -> roles allowed to perform it
PERMISSIONS: dict[tuple[str, Action], frozenset[Role]] = {
    ("departments", Action.read): EVERYONE,
    ("departments", Action.create): ADMIN_ONLY,
    ("departments", Action.update): ADMIN_ONLY,
    ("departments", Action.delete): ADMIN_ONLY,
    ("employees", Action.read): EVERYONE,
    ("employees", Action.create): ADMIN_ONLY,
    ("employees", Action.update): ADMIN_ONLY,
    ("employees", Action.delete): ADMIN_ONLY,
    ("attendance", Action.read): ADMIN_ONLY,
    ("attendance", Action.create): ADMIN_ONLY,
    ("leaves", Action.read): EVERYONE,
    ("leaves", Action.create): EVERYONE,
    ("leaves", Action.update): ADMIN_ONLY,
    ("leaves", Action.delete): ADMIN_ONLY,
    ("profile", Action.read): EVERYONE,
}


def allowed_roles(resource: str, action: Action) -> frozenset[Role]:
    """Unlisted pairs are denied to everyone."""
    return PERMISSIONS.get((resource, action), frozenset())


def is_allowed(role: Role, resource: str, action: Action) -> bool:
    return role in allowed_roles(resource, action)
