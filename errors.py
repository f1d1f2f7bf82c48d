"""Exception types raised by the task tree engine."""


class TaskTreeError(Exception):
    """Base class for all task tree errors."""


class InvalidInputError(TaskTreeError, ValueError):
    """Malformed caller input: empty text, unknown enum value, bad date key."""


class NotFoundError(TaskTreeError, LookupError):
    """An id that must exist does not resolve to any task."""

    def __init__(self, task_id):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ForbiddenError(TaskTreeError):
    """The operation would violate a tree invariant."""


class DataIntegrityError(TaskTreeError):
    """Persisted rows do not describe a well-formed task tree."""
