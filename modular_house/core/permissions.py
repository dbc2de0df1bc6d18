import enum
from typing import Dict, FrozenSet, Iterable


class Role(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"


class Permission(str, enum.Enum):
    PAGES_MANAGE = "pages:manage"
    GALLERY_EDIT = "gallery:edit"
    GALLERY_DELETE = "gallery:delete"
    FAQS_EDIT = "faqs:edit"
    FAQS_DELETE = "faqs:delete"
    REDIRECTS_MANAGE = "redirects:manage"
    SUBMISSIONS_READ = "submissions:read"
    SUBMISSIONS_EXPORT = "submissions:export"
    UPLOADS_CREATE = "uploads:create"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.EDITOR: frozenset({
        Permission.GALLERY_EDIT,
        Permission.FAQS_EDIT,
        Permission.REDIRECTS_MANAGE,
        Permission.SUBMISSIONS_READ,
        Permission.UPLOADS_CREATE,
    }),
}


def permissions_for(roles: Iterable[str]) -> FrozenSet[Permission]:
    granted = set()
    for name in roles:
        try:
            granted |= ROLE_PERMISSIONS[Role(name)]
        except ValueError:
            # Unknown role strings grant nothing
            continue
    return frozenset(granted)


def authorize(roles: Iterable[str], permission: Permission) -> bool:
    """The single check every protected route goes through."""
    return permission in permissions_for(roles)
