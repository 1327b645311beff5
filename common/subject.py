"""Named message counters for handshake-testkit.

Turns a flat JSON mapping of subject name to message count into a sorted
list of Subject entries.
"""

import json
from dataclasses import dataclass, field

from common.encoding import EncodingError


@dataclass(frozen=True, order=True)
class Subject:
    """Subject name with its message count. Sorts by name."""

    name: str
    count: int = field(compare=False)


def optional_list_of(json_text: str | None) -> list[Subject] | None:
    """Parse {"subject": count, ...} into Subjects sorted by name.

    Returns None for missing input or when the mapping is empty.
    Raises EncodingError if the text is not a mapping of integer counts.
    """
    if not json_text:
        return None

    try:
        mapping = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise EncodingError(f"Invalid subject counts: {e}")

    if not isinstance(mapping, dict):
        raise EncodingError(f"Subject counts must be an object, got {type(mapping).__name__}")

    subjects = []
    for name, count in mapping.items():
        # bool is an int subclass but never a valid count
        if isinstance(count, bool) or not isinstance(count, int):
            raise EncodingError(f"Count for {name!r} is not an integer: {count!r}")
        subjects.append(Subject(name=name, count=count))

    subjects.sort()
    return subjects or None
