"""Domain exceptions raised by services and translated by the routers."""

from __future__ import annotations


class NotFoundError(Exception):
    """The target does not exist, or is unpublished for this caller."""


class ForbiddenError(Exception):
    """The caller may not act on this resource (e.g. no purchase)."""


class AttemptLimitExceededError(Exception):
    def __init__(self, previous_attempts: int, max_attempts: int) -> None:
        super().__init__(
            f"maximum attempts reached ({previous_attempts}/{max_attempts})"
        )
        self.previous_attempts = previous_attempts
        self.max_attempts = max_attempts


class AttemptConflictError(Exception):
    """Another submission claimed the same attempt number first."""


class AuthoringValidationError(ValueError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class PositionConflictError(Exception):
    def __init__(self, position: int) -> None:
        super().__init__(f"position {position} is already used in this course")
        self.position = position


class CodeAlreadyUsedError(Exception):
    pass


class AlreadyPurchasedError(Exception):
    pass
