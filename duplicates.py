import json
from typing import Any, Hashable, List, Tuple

from models import MalformedInputError


def canonical(value: Any) -> Any:
    """Collapse integral floats so 1 and 1.0 compare equal, as in JSON.parse."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: canonical(v) for k, v in value.items()}
    if isinstance(value, list):
        return [canonical(v) for v in value]
    return value


def comparison_key(value: Any) -> Tuple[str, Hashable]:
    # Tagged so the string "1" never matches the number 1
    if isinstance(value, str):
        return ("str", value)
    return (
        "json",
        json.dumps(
            canonical(value),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        ),
    )


def find_duplicates(items, key: str) -> List[int]:
    """Return the indices of items repeating an earlier item's value for key.

    Items without the key are never reported. The first occurrence of each
    value is the keeper, so the result is always in ascending order.

    Raises:
        MalformedInputError: if items is not a list of objects
    """
    if not isinstance(items, list):
        raise MalformedInputError("Expected a JSON array of objects")

    seen = set()
    duplicates = []

    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise MalformedInputError(f"Array element {idx} is not an object")
        if key not in item:
            continue

        marker = comparison_key(item[key])
        if marker in seen:
            duplicates.append(idx)
        else:
            seen.add(marker)

    return duplicates
