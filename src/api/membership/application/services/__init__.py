"""Application services for the membership bounded context."""

from membership.application.services.membership_service import MembershipService

__all__ = ["MembershipService"]
