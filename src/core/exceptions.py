"""Custom exceptions for the rip log inspector."""


class RiplogError(Exception):
    """Base exception for all rip log inspector errors."""

    def __init__(self, message: str, details: str = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class InputError(RiplogError):
    """Raised when the scan root cannot be turned into candidate logs."""

    def __init__(self, message: str, path: str = None, details: str = None):
        super().__init__(message, details)
        self.path = path


class NotAccessibleError(InputError):
    """Raised when the scan root cannot be inspected."""


class EmptyResultError(InputError):
    """Raised when a directory scan finds no log files."""


class InvalidInputError(InputError):
    """Raised when the scan root is neither a file nor a directory."""


class EvaluationError(RiplogError):
    """Raised when the evaluator rejects a log or cannot be reached."""

    def __init__(self, message: str, status_code: int = None, details: str = None):
        super().__init__(message, details)
        self.status_code = status_code


class AnalysisError(RiplogError):
    """Raised when a single log cannot be analyzed."""

    def __init__(self, message: str, file_path: str = None, details: str = None):
        super().__init__(message, details)
        self.file_path = file_path


class PersistenceError(RiplogError):
    """Raised when saving raw log bytes fails."""

    def __init__(
        self,
        message: str,
        file_path: str = None,
        operation: str = None,
        details: str = None,
    ):
        super().__init__(message, details)
        self.file_path = file_path
        self.operation = operation


class WorkerPoolError(RiplogError):
    """Raised when the analysis worker pool itself fails."""


class DashboardError(RiplogError):
    """Raised when the terminal dashboard cannot render or read input."""


class FolderRevealError(RiplogError):
    """Raised when a containing folder cannot be opened."""

    def __init__(self, message: str, path: str = None, details: str = None):
        super().__init__(message, details)
        self.path = path
