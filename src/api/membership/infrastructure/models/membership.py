"""SQLAlchemy ORM model for the og_membership table."""

from __future__ import annotations

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin
from membership.domain.aggregates import Membership
from membership.domain.value_objects import MembershipState
from shared_kernel.identifiers import GroupId, GroupRef, UserId


class MembershipModel(Base, TimestampMixin):
    """ORM model for the og_membership table.

    The composite primary key (user_id, group_id) enforces at most one
    membership per user and group, including under concurrent inserts.
    Roles are stored as an ordered JSON list.
    """

    __tablename__ = "og_membership"

    user_id: Mapped[str] = mapped_column(String(26), primary_key=True)
    group_id: Mapped[str] = mapped_column(String(26), primary_key=True, index=True)
    group_entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    group_bundle: Mapped[str] = mapped_column(String(64), nullable=False)
    state: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    @classmethod
    def from_domain(cls, membership: Membership) -> MembershipModel:
        """Build a row from a Membership aggregate."""
        return cls(
            user_id=membership.user_id.value,
            group_id=membership.group.id.value,
            group_entity_type=membership.group.entity_type,
            group_bundle=membership.group.bundle,
            state=membership.state.value,
            roles=list(membership.roles),
            created_at=membership.created_at,
            changed_at=membership.changed_at,
        )

    def to_domain(self) -> Membership:
        """Convert this row to a Membership aggregate."""
        return Membership(
            group=GroupRef(
                id=GroupId(value=self.group_id),
                entity_type=self.group_entity_type,
                bundle=self.group_bundle,
            ),
            user_id=UserId(value=self.user_id),
            state=MembershipState(self.state),
            roles=list(self.roles),
            created_at=self.created_at,
            changed_at=self.changed_at,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<MembershipModel(user_id={self.user_id}, group_id={self.group_id}, "
            f"state={self.state})>"
        )
