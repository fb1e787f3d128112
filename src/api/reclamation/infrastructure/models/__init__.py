"""SQLAlchemy ORM models for the reclamation context."""

from reclamation.infrastructure.models.group_content import GroupContentModel

__all__ = ["GroupContentModel"]
