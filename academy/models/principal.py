from __future__ import annotations

from dataclasses import dataclass

STAFF_ROLES = frozenset({"teacher", "admin"})


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    Carried through the request via FastAPI's dependency system.

        user_id: subject claim issued by the identity provider
        roles: platform roles (student, teacher, admin)
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: set[str] | frozenset[str]) -> bool:
        return bool(self.roles & roles)

    def is_admin(self) -> bool:
        return "admin" in self.roles

    def is_staff(self) -> bool:
        """Teachers and admins author content and see every result."""
        return self.has_any_role(STAFF_ROLES)
