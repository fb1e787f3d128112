"""SQLAlchemy ORM model for the og_group_content table."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base


class GroupContentModel(Base):
    """One link between a content item and a group it belongs to.

    ``delta`` is the position of the group within the content's audience,
    so the reference order survives a round trip.
    """

    __tablename__ = "og_group_content"

    content_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    group_id: Mapped[str] = mapped_column(String(26), primary_key=True, index=True)
    delta: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<GroupContentModel(content_id={self.content_id}, "
            f"group_id={self.group_id}, delta={self.delta})>"
        )
