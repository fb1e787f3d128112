"""FastAPI dependency providers for the membership context.

Services are built once at startup and stored on ``app.state.container``;
these providers hand them to route handlers and are the seam tests override.
"""

from fastapi import Request

from membership.application.actions import ActionManager
from membership.application.services import MembershipService


def get_membership_service(request: Request) -> MembershipService:
    """Get the application-wide MembershipService.

    Returns:
        MembershipService instance
    """
    return request.app.state.container.membership_service


def get_action_manager(request: Request) -> ActionManager:
    """Get the application-wide ActionManager.

    Returns:
        ActionManager instance
    """
    return request.app.state.container.action_manager
