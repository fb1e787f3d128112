"""SQLAlchemy ORM models for the membership context."""

from membership.infrastructure.models.membership import MembershipModel

__all__ = ["MembershipModel"]
