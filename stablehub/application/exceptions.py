class SlotUnavailable(RuntimeError):
    """Raised when the requested lesson slot has no capacity or is already taken."""
    pass


class InvalidTransition(RuntimeError):
    """Raised when a status change is requested from a terminal or incompatible state."""

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(f"Cannot move {entity} from '{current}' to '{target}'.")
        self.entity = entity
        self.current = current
        self.target = target


class ValidationError(ValueError):
    """Raised for malformed input before any upstream call is made."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class RecordNotFound(LookupError):
    """Raised when a reservation, order, product or lesson type id is unknown."""
    pass


class UpstreamFailure(RuntimeError):
    """Raised when the data backend, email API or verification API fails or times out."""
    pass


class ParseFailure(RuntimeError):
    """Raised when the verification API returns non-JSON or schema-mismatched output."""
    pass


class SubmissionInProgress(RuntimeError):
    """Raised when the same checkout submission is already being processed."""
    pass


class SlotConflictError(RuntimeError):
    """Raised by a reservation ledger when an occupying reservation already holds the exact slot."""
    pass
