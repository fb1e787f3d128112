"""Domain-Oriented Observability for the reclamation application layer."""

from reclamation.application.observability.reclamation_probe import (
    DefaultReclamationProbe,
    ReclamationProbe,
)
from reclamation.application.observability.scheduler_probe import (
    DefaultSchedulerProbe,
    SchedulerProbe,
)

__all__ = [
    "DefaultReclamationProbe",
    "DefaultSchedulerProbe",
    "ReclamationProbe",
    "SchedulerProbe",
]
