"""Exception types raised by the migration core.

Validation failures are never raised; they travel as
:class:`~paramigrate.core.migration.models.ValidationResult` data.
Only caller misuse and scanner failure abort a call outright.
"""


class MigrationError(Exception):
    """Base class for all paramigrate errors."""


class PreconditionError(MigrationError):
    """A step was called out of state-machine order or on bad input."""


class ScanError(MigrationError):
    """The scanner could not produce a ProjectState for a project root."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot scan {root}: {reason}")


class OperationError(MigrationError):
    """An applier could not apply one replacement operation."""

    def __init__(self, operation_id: str, reason: str):
        self.operation_id = operation_id
        self.reason = reason
        super().__init__(f"Operation {operation_id} failed: {reason}")
