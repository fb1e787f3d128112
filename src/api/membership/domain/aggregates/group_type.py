"""GroupType aggregate: an entity type/bundle pair acting as a group, with its roles."""

from __future__ import annotations

from dataclasses import dataclass, field

from membership.domain.exceptions import UnknownRoleError
from membership.domain.value_objects import GroupTypeId


@dataclass
class GroupType:
    """A kind of group and the roles its memberships may hold.

    Roles are not globally unique: two group types may both define
    "administrator" and they are unrelated.
    """

    id: GroupTypeId
    roles: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls, entity_type: str, bundle: str, roles: list[str] | tuple[str, ...] = ()
    ) -> GroupType:
        """Factory method for a new group type.

        Args:
            entity_type: Entity type of the groups (e.g. "node")
            bundle: Bundle of the groups (e.g. "club")
            roles: Role names; duplicates are dropped, order kept

        Raises:
            ValueError: If entity type, bundle or a role name is empty
        """
        if not entity_type or not bundle:
            raise ValueError("Group type requires an entity type and a bundle")
        group_type = cls(id=GroupTypeId(entity_type=entity_type, bundle=bundle))
        for role in roles:
            group_type.add_role(role)
        return group_type

    def add_role(self, role: str) -> bool:
        """Define a role for this group type.

        Returns:
            True if the role was added, False if it already existed
        """
        if not role:
            raise ValueError("Role name must not be empty")
        if role in self.roles:
            return False
        self.roles.append(role)
        return True

    def has_role(self, role: str) -> bool:
        """Check if a role is defined for this group type."""
        return role in self.roles

    def require_roles(self, roles: list[str] | tuple[str, ...]) -> None:
        """Validate role names against this group type.

        Raises:
            UnknownRoleError: If any role is not defined
        """
        unknown = [role for role in roles if role not in self.roles]
        if unknown:
            raise UnknownRoleError(
                f"Roles {unknown} are not defined for group type {self.id}"
            )
