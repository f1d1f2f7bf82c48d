"""Parsing of the "add task" input line.

The line is the task text with optional markers anywhere in it:
``#group`` (urgent, routine, project, other) and ``!type`` (unique,
repetitive, manual, record, quantity). Unambiguous prefixes are accepted,
e.g. ``Write report #proj !rec``.
"""
from typing import Dict, Optional, Tuple

from errors import InvalidInputError
from models import TaskGroup, TaskType

TYPE_ALIASES: Dict[str, TaskType] = {
    "unique": TaskType.UNIQUE,
    "once": TaskType.UNIQUE,
    "repetitive": TaskType.REPETITIVE,
    "repeat": TaskType.REPETITIVE,
    "manual": TaskType.MANUAL_TIME,
    "hours": TaskType.MANUAL_TIME,
    "record": TaskType.RECORD_TIME,
    "timer": TaskType.RECORD_TIME,
    "quantity": TaskType.QUANTITY,
    "count": TaskType.QUANTITY,
}

GROUP_ALIASES: Dict[str, TaskGroup] = {group.value: group for group in TaskGroup}

TYPE_LABELS = {
    TaskType.UNIQUE: "once",
    TaskType.REPETITIVE: "repeat",
    TaskType.MANUAL_TIME: "hours",
    TaskType.RECORD_TIME: "timer",
    TaskType.QUANTITY: "count",
}


def _match(word: str, aliases: Dict[str, object], kind: str):
    if word in aliases:
        return aliases[word]
    matches = {value for alias, value in aliases.items() if alias.startswith(word)}
    if len(matches) != 1:
        raise InvalidInputError(f"Unknown {kind}: {word!r}")
    return matches.pop()


def parse_task_input(value: str) -> Tuple[str, Optional[TaskType], Optional[TaskGroup]]:
    """
    Split an input line into text, type and group.

    Args:
        value: Raw input, e.g. "Call client #urgent !timer"

    Returns:
        Tuple of (text, task_type or None, group or None)

    Raises:
        InvalidInputError: If a marker names no (or more than one) type/group
    """
    words = []
    task_type = None
    group = None
    for word in value.split():
        if word.startswith("#") and len(word) > 1:
            group = _match(word[1:].lower(), GROUP_ALIASES, "group")
        elif word.startswith("!") and len(word) > 1:
            task_type = _match(word[1:].lower(), TYPE_ALIASES, "task type")
        else:
            words.append(word)
    return " ".join(words), task_type, group
