class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the caller is not logged in."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class StateError(DomainError):
    """Raised when an operation is not allowed in the record's current state."""


class MonthLockedError(StateError):
    def __init__(self, month_key: str):
        super().__init__(f"Month {month_key} is locked. Unlock it before recomputing.")
        self.month_key = month_key


class WeekLockedError(StateError):
    def __init__(self, week_key: str):
        super().__init__(f"Week {week_key} is locked")
        self.week_key = week_key


class DeliveryError(DomainError):
    """Raised when an outgoing email could not be delivered."""
