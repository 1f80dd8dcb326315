"""
remover.py

Delete top-level objects from the text of a JSON array without re-serializing it.

The text is scanned line by line while counting brackets. This only works for
machine-formatted arrays where:
- the array opens on a line holding only `[` and closes on a line holding only `]`
- every top-level object opens on a line holding only `{`
- every top-level object closes on a line holding only `}` or `},`

Blank lines and standalone `,` lines between objects are kept as the "gap"
in front of the object that follows them. Anything else (minified arrays,
several objects on one line, nested arrays at the top level) raises
StructuralAssumptionError so the caller can re-serialize instead.
"""

import re
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from logger import logger
from models import StructuralAssumptionError

OBJECT_CLOSE = re.compile(r"^\}\s*,?$")
TRAILING_COMMA = re.compile(r",(\s*)$")


class ScanState(str, Enum):
    BEFORE_ARRAY = "before_array"
    BETWEEN_OBJECTS = "between_objects"
    IN_OBJECT = "in_object"
    AFTER_ARRAY = "after_array"


class ArrayLayout:
    """Lines of a JSON array split into header, per-object gaps and bodies, and trailer."""

    def __init__(self):
        self.header: List[str] = []
        self.gaps: List[List[str]] = []
        self.bodies: List[List[str]] = []
        self.trailer: List[str] = []

    @property
    def object_count(self) -> int:
        return len(self.bodies)


def scan_brackets(line: str) -> Tuple[int, int]:
    """Count brackets outside string literals.

    Returns:
        tuple of (net depth change, lowest running depth change)
    """
    delta = 0
    lowest = 0
    in_string = False
    escaped = False

    for ch in line:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in "{[":
            delta += 1
        elif ch in "}]":
            delta -= 1
            lowest = min(lowest, delta)

    return delta, lowest


def split_array(text: str) -> ArrayLayout:
    """Locate the top-level objects of a one-token-per-line JSON array.

    Raises:
        StructuralAssumptionError: if the layout does not allow it
    """
    layout = ArrayLayout()
    state = ScanState.BEFORE_ARRAY
    depth = 0
    gap: List[str] = []
    body: List[str] = []

    for line_number, line in enumerate(text.split("\n"), start=1):
        trimmed = line.strip().lstrip("\ufeff")

        if state == ScanState.BEFORE_ARRAY:
            layout.header.append(line)
            if not trimmed:
                continue
            if trimmed != "[":
                raise StructuralAssumptionError(
                    "expected the array to open on a line of its own", line_number
                )
            depth = 1
            state = ScanState.BETWEEN_OBJECTS

        elif state == ScanState.BETWEEN_OBJECTS:
            if not trimmed or trimmed == ",":
                gap.append(line)
            elif trimmed == "{":
                layout.gaps.append(gap)
                gap = []
                body = [line]
                depth = 2
                state = ScanState.IN_OBJECT
            elif trimmed == "]":
                layout.trailer = gap + [line]
                gap = []
                depth = 0
                state = ScanState.AFTER_ARRAY
            else:
                raise StructuralAssumptionError(
                    "expected a line holding only '{' to open a top-level object",
                    line_number,
                )

        elif state == ScanState.IN_OBJECT:
            body.append(line)
            delta, lowest = scan_brackets(line)
            if depth + lowest < 1:
                raise StructuralAssumptionError(
                    "closing brackets run past the end of the array", line_number
                )
            if depth + lowest == 1 and depth + delta != 1:
                raise StructuralAssumptionError(
                    "a top-level object closes and another opens on the same line",
                    line_number,
                )
            depth += delta
            if depth == 1:
                if not OBJECT_CLOSE.match(trimmed):
                    raise StructuralAssumptionError(
                        "a top-level object must close on a line holding only '}'",
                        line_number,
                    )
                layout.bodies.append(body)
                body = []
                state = ScanState.BETWEEN_OBJECTS

        else:
            layout.trailer.append(line)
            if trimmed:
                raise StructuralAssumptionError(
                    "unexpected content after the closing ']'", line_number
                )

    if state != ScanState.AFTER_ARRAY:
        raise StructuralAssumptionError(
            f"the array is never closed (scan ended in state {state.value})"
        )

    return layout


def strip_trailing_comma(line: str) -> str:
    return TRAILING_COMMA.sub(r"\1", line, count=1)


def remove_by_index(
    text: str, indices: Iterable[int], expected_count: Optional[int] = None
) -> str:
    """Remove the top-level objects at the given positions from text.

    Kept objects are copied verbatim together with the gap lines in front of
    them. The first survivor takes the first object's gap so no separator is
    left dangling after `[`, and the new last survivor loses its trailing comma.

    Args:
        text: raw JSON array text
        indices: 0-based positions of top-level objects to drop
        expected_count: number of elements the parsed array holds, if known

    Returns:
        the new text, or text itself when there is nothing to remove

    Raises:
        StructuralAssumptionError: if the objects cannot be located reliably
    """
    removal = frozenset(indices)
    if not removal:
        return text

    layout = split_array(text)
    count = layout.object_count
    logger.debug(f"Located {count} top-level objects")

    if expected_count is not None and count != expected_count:
        raise StructuralAssumptionError(
            f"found {count} top-level objects in the text, the array holds {expected_count}"
        )

    out_of_range = sorted(i for i in removal if i < 0 or i >= count)
    if out_of_range:
        raise StructuralAssumptionError(
            f"no top-level object at index {out_of_range[0]} ({count} found)"
        )

    survivors = [i for i in range(count) if i not in removal]
    lines = list(layout.header)

    for position, idx in enumerate(survivors):
        lines.extend(layout.gaps[0] if position == 0 else layout.gaps[idx])
        body = layout.bodies[idx]
        if position == len(survivors) - 1 and idx != count - 1:
            body = body[:-1] + [strip_trailing_comma(body[-1])]
        lines.extend(body)

    lines.extend(layout.trailer)
    return "\n".join(lines)
