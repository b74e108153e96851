"""Error kinds raised by the tracker.  All derive from BudgetTrackerError."""

from __future__ import annotations


class BudgetTrackerError(Exception):
    """Base class; main() turns these into a message and exit status 1."""


class HomeDirectoryUnavailable(BudgetTrackerError):
    pass


class StorageUnavailable(BudgetTrackerError):
    pass


class MalformedRecord(BudgetTrackerError):
    """A store line that does not parse into an expense."""

    def __init__(self, message: str, line: str = "", line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line = line
        self.line_number = line_number


class InvalidUserInput(BudgetTrackerError):
    """Bad answer to an add-flow prompt.  Always handled by re-prompting."""


class EditorFailed(BudgetTrackerError):
    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode


class InputClosed(BudgetTrackerError):
    """Standard input ended before the add flow got all of its answers."""
