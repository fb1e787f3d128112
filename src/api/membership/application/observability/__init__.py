"""Domain-Oriented Observability for the membership application layer.

Probes for application service and action operations following
Domain-Oriented Observability patterns.
"""

from membership.application.observability.action_probe import (
    ActionProbe,
    DefaultActionProbe,
)
from membership.application.observability.membership_service_probe import (
    DefaultMembershipServiceProbe,
    MembershipServiceProbe,
)

__all__ = [
    "ActionProbe",
    "DefaultActionProbe",
    "MembershipServiceProbe",
    "DefaultMembershipServiceProbe",
]
