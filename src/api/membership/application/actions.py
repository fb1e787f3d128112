"""Administrative actions over memberships.

Actions are command objects identified by a plugin id. Each is created by
the ActionManager from its plugin id and optional configuration, with the
membership service injected, and executed against one membership or a
batch of memberships. Actions never touch group or user entities.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from membership.application.observability import ActionProbe, DefaultActionProbe
from membership.application.services import MembershipService
from membership.domain.aggregates import Membership
from membership.domain.value_objects import MembershipState
from membership.ports.exceptions import (
    ActionConfigurationError,
    NotFoundError,
    UnknownActionError,
)

_registry: dict[str, type[MembershipAction]] = {}


def register_action(plugin_id: str) -> Callable[[type[MembershipAction]], type[MembershipAction]]:
    """Register a MembershipAction subclass under a plugin id.

    Example:
        @register_action("og_membership_delete_action")
        class DeleteMembershipAction(MembershipAction):
            ...
    """

    def decorator(cls: type[MembershipAction]) -> type[MembershipAction]:
        if not issubclass(cls, MembershipAction):
            raise TypeError(f"Action must subclass MembershipAction: {plugin_id}")
        if plugin_id in _registry:
            raise RuntimeError(f"Action already registered with id: {plugin_id}")
        cls.plugin_id = plugin_id
        _registry[plugin_id] = cls
        return cls

    return decorator


@dataclass(frozen=True)
class ActionResult:
    """Outcome of running an action on one membership."""

    membership: Membership
    success: bool
    error: str | None = None


class MembershipAction(ABC):
    """Base class for membership actions.

    Subclasses implement ``_apply`` and may override ``_configure`` to
    validate their configuration at construction time.
    """

    plugin_id: ClassVar[str] = ""

    def __init__(
        self,
        service: MembershipService,
        configuration: Mapping[str, Any] | None = None,
        probe: ActionProbe | None = None,
    ) -> None:
        self._service = service
        self._probe = probe or DefaultActionProbe()
        self.configuration = dict(configuration or {})
        self._configure(self.configuration)

    def _configure(self, configuration: dict[str, Any]) -> None:
        """Validate configuration. The default accepts anything."""

    @abstractmethod
    async def _apply(self, membership: Membership) -> None:
        """Apply the action to one membership."""
        ...

    async def execute(self, membership: Membership) -> bool:
        """Run the action on one membership.

        Returns:
            True on success

        Raises:
            NotFoundError: If the membership no longer exists (where relevant)
            ValueError: On validation errors such as an invalid transition
        """
        await self._apply(membership)
        self._probe.action_executed(
            self.plugin_id,
            membership.group.id.value,
            membership.user_id.value,
        )
        return True

    async def execute_multiple(
        self, memberships: Iterable[Membership]
    ) -> list[ActionResult]:
        """Run the action over a batch of memberships.

        A validation failure on one membership is recorded in its result
        and does not stop the rest of the batch.
        """
        results: list[ActionResult] = []
        for membership in memberships:
            try:
                await self.execute(membership)
            except (NotFoundError, ValueError) as e:
                self._probe.action_failed(
                    self.plugin_id,
                    membership.group.id.value,
                    membership.user_id.value,
                    str(e),
                )
                results.append(
                    ActionResult(membership=membership, success=False, error=str(e))
                )
            else:
                results.append(ActionResult(membership=membership, success=True))

        succeeded = sum(1 for result in results if result.success)
        self._probe.bulk_action_completed(
            self.plugin_id, succeeded=succeeded, failed=len(results) - succeeded
        )
        return results


def _require_role_name(configuration: dict[str, Any]) -> str:
    role = configuration.get("role_name")
    if not isinstance(role, str) or not role:
        raise ActionConfigurationError("Configuration requires a non-empty 'role_name'")
    return role


def _require_role_names(configuration: dict[str, Any]) -> list[str]:
    roles = configuration.get("role_names")
    if (
        not isinstance(roles, list | tuple)
        or not roles
        or not all(isinstance(role, str) and role for role in roles)
    ):
        raise ActionConfigurationError(
            "Configuration requires a non-empty list of 'role_names'"
        )
    return list(roles)


@register_action("og_membership_delete_action")
class DeleteMembershipAction(MembershipAction):
    """Delete the membership. An already deleted membership is a success."""

    async def _apply(self, membership: Membership) -> None:
        await self._service.delete_membership(membership)


@register_action("og_membership_add_single_role_action")
class AddSingleRoleAction(MembershipAction):
    """Grant the configured ``role_name``."""

    def _configure(self, configuration: dict[str, Any]) -> None:
        self.role_name = _require_role_name(configuration)

    async def _apply(self, membership: Membership) -> None:
        await self._service.add_role(membership, self.role_name)


@register_action("og_membership_remove_single_role_action")
class RemoveSingleRoleAction(MembershipAction):
    """Revoke the configured ``role_name``."""

    def _configure(self, configuration: dict[str, Any]) -> None:
        self.role_name = _require_role_name(configuration)

    async def _apply(self, membership: Membership) -> None:
        await self._service.remove_role(membership, self.role_name)


@register_action("og_membership_add_multiple_roles_action")
class AddMultipleRolesAction(MembershipAction):
    """Grant every role in ``role_names``, or none of them."""

    def _configure(self, configuration: dict[str, Any]) -> None:
        self.role_names = _require_role_names(configuration)

    async def _apply(self, membership: Membership) -> None:
        await self._service.add_roles(membership, self.role_names)


@register_action("og_membership_remove_multiple_roles_action")
class RemoveMultipleRolesAction(MembershipAction):
    """Revoke every role in ``role_names``."""

    def _configure(self, configuration: dict[str, Any]) -> None:
        self.role_names = _require_role_names(configuration)

    async def _apply(self, membership: Membership) -> None:
        await self._service.remove_roles(membership, self.role_names)


@register_action("og_membership_approve_action")
class ApproveMembershipAction(MembershipAction):
    """Activate a pending membership."""

    async def _apply(self, membership: Membership) -> None:
        await self._service.set_state(
            membership,
            MembershipState.ACTIVE,
            from_states=(MembershipState.PENDING,),
        )


@register_action("og_membership_block_action")
class BlockMembershipAction(MembershipAction):
    """Block an active membership."""

    async def _apply(self, membership: Membership) -> None:
        await self._service.set_state(membership, MembershipState.BLOCKED)


@register_action("og_membership_unblock_action")
class UnblockMembershipAction(MembershipAction):
    """Reactivate a blocked membership."""

    async def _apply(self, membership: Membership) -> None:
        await self._service.set_state(
            membership,
            MembershipState.ACTIVE,
            from_states=(MembershipState.BLOCKED,),
        )


class ActionManager:
    """Creates configured action instances from plugin ids."""

    def __init__(
        self,
        service: MembershipService,
        probe: ActionProbe | None = None,
    ) -> None:
        self._service = service
        self._probe = probe or DefaultActionProbe()

    @staticmethod
    def available() -> list[str]:
        """Plugin ids of every registered action."""
        return sorted(_registry)

    def create_instance(
        self,
        plugin_id: str,
        configuration: Mapping[str, Any] | None = None,
    ) -> MembershipAction:
        """Instantiate an action.

        Raises:
            UnknownActionError: If no action has this plugin id
            ActionConfigurationError: If the configuration is invalid
        """
        action_class = _registry.get(plugin_id)
        if action_class is None:
            raise UnknownActionError(f"Unknown membership action: {plugin_id}")
        return action_class(self._service, configuration, probe=self._probe)
