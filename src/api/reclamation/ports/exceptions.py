"""Exceptions for the reclamation bounded context.

These exceptions represent errors that can occur while sweeping orphaned
content. They should be caught and handled by the presentation layer or
the scheduler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared_kernel.exceptions import StorageError

if TYPE_CHECKING:
    from reclamation.domain.value_objects import SweepResult


class ProcessingError(Exception):
    """Raised when a strategy's ``process()`` stops on a storage failure.

    Candidates that were not acknowledged stay queued, so the next run
    picks them up again.

    Attributes:
        result: What was reclaimed before the failure
    """

    def __init__(self, message: str, result: SweepResult) -> None:
        super().__init__(message)
        self.result = result


__all__ = ["ProcessingError", "StorageError"]
