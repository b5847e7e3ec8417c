class ReconciliationError(Exception):
    code = "RECONCILIATION_ERROR"

    def __init__(self, message: str, details: dict | list | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class DataUnavailable(ReconciliationError):
    code = "DATA_UNAVAILABLE"


class InvalidArgument(ReconciliationError):
    code = "INVALID_ARGUMENT"


class ConcurrentCreationConflict(ReconciliationError):
    code = "CONCURRENT_CREATION_CONFLICT"


class InsufficientStock(ReconciliationError):
    code = "INSUFFICIENT_STOCK"
