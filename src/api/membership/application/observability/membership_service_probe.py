"""Protocol for membership application service observability.

Defines the interface for domain probes that capture application-level
domain events for membership service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class MembershipServiceProbe(Protocol):
    """Domain probe for membership service operations."""

    def membership_created(
        self, group_id: str, user_id: str, state: str, roles: list[str]
    ) -> None:
        """Record that a membership was created."""
        ...

    def membership_conflict(self, group_id: str, user_id: str) -> None:
        """Record that a duplicate membership was refused."""
        ...

    def membership_state_changed(
        self, group_id: str, user_id: str, old_state: str, new_state: str
    ) -> None:
        """Record a state transition."""
        ...

    def membership_transition_refused(
        self, group_id: str, user_id: str, old_state: str, new_state: str
    ) -> None:
        """Record that an illegal transition was requested."""
        ...

    def membership_roles_changed(
        self, group_id: str, user_id: str, added: list[str], removed: list[str]
    ) -> None:
        """Record that roles were added to or removed from a membership."""
        ...

    def membership_deleted(self, group_id: str, user_id: str) -> None:
        """Record that a membership was deleted."""
        ...

    def memberships_cascaded(self, reason: str, subject_id: str, count: int) -> None:
        """Record that memberships were removed because their group or user went away."""
        ...

    def group_type_registered(
        self, entity_type: str, bundle: str, roles: list[str]
    ) -> None:
        """Record that a group type was registered."""
        ...

    def with_context(self, context: ObservationContext) -> MembershipServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMembershipServiceProbe:
    """Default implementation of MembershipServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultMembershipServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultMembershipServiceProbe(logger=self._logger, context=context)

    def membership_created(
        self, group_id: str, user_id: str, state: str, roles: list[str]
    ) -> None:
        """Record that a membership was created."""
        self._logger.info(
            "membership_created",
            group_id=group_id,
            user_id=user_id,
            state=state,
            roles=roles,
            **self._get_context_kwargs(),
        )

    def membership_conflict(self, group_id: str, user_id: str) -> None:
        """Record that a duplicate membership was refused."""
        self._logger.warning(
            "membership_conflict",
            group_id=group_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def membership_state_changed(
        self, group_id: str, user_id: str, old_state: str, new_state: str
    ) -> None:
        """Record a state transition."""
        self._logger.info(
            "membership_state_changed",
            group_id=group_id,
            user_id=user_id,
            old_state=old_state,
            new_state=new_state,
            **self._get_context_kwargs(),
        )

    def membership_transition_refused(
        self, group_id: str, user_id: str, old_state: str, new_state: str
    ) -> None:
        """Record that an illegal transition was requested."""
        self._logger.warning(
            "membership_transition_refused",
            group_id=group_id,
            user_id=user_id,
            old_state=old_state,
            new_state=new_state,
            **self._get_context_kwargs(),
        )

    def membership_roles_changed(
        self, group_id: str, user_id: str, added: list[str], removed: list[str]
    ) -> None:
        """Record that roles were added to or removed from a membership."""
        self._logger.info(
            "membership_roles_changed",
            group_id=group_id,
            user_id=user_id,
            added=added,
            removed=removed,
            **self._get_context_kwargs(),
        )

    def membership_deleted(self, group_id: str, user_id: str) -> None:
        """Record that a membership was deleted."""
        self._logger.info(
            "membership_deleted",
            group_id=group_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def memberships_cascaded(self, reason: str, subject_id: str, count: int) -> None:
        """Record a cascade deletion."""
        self._logger.info(
            "memberships_cascaded",
            reason=reason,
            subject_id=subject_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def group_type_registered(
        self, entity_type: str, bundle: str, roles: list[str]
    ) -> None:
        """Record that a group type was registered."""
        self._logger.info(
            "group_type_registered",
            entity_type=entity_type,
            bundle=bundle,
            roles=roles,
            **self._get_context_kwargs(),
        )
