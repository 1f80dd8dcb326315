#!/usr/bin/env python3
"""
dedupe.py

Remove objects from a JSON array that repeat an earlier object's value for a
chosen property, keeping the file's original formatting where possible.

Usage:
    python dedupe.py input.json [key] [output.json]

If key is not provided, the properties of the first object are listed and
one is picked interactively. If output.json is not provided, input.json is
rewritten in place.

Environment:
    DEDUPE_PRESERVE_FORMATTING=false     always re-serialize the array
    DEDUPE_REQUIRE_JSON_EXTENSION=false  accept files not ending in .json
"""

import sys
import os
import json
from typing import Callable, List, Optional

from logger import logger
from settings import get_settings
from models import DedupeResult, MalformedInputError, StructuralAssumptionError
from indentation import detect_indentation
from duplicates import find_duplicates
from remover import remove_by_index

USAGE = "Usage: dedupe.py <input.json> [key] [output.json]"
BOM = "\ufeff"


def parse_args(argv, require_json_extension=True):
    """Parse and validate command-line arguments.

    Args:
        argv: list of command-line arguments (excluding script name)
        require_json_extension: reject input files not ending in .json

    Returns:
        tuple of (input_path, key or None, output_path or None)

    Raises:
        ValueError: if arguments are invalid
    """
    if len(argv) < 1 or len(argv) > 3:
        raise ValueError(USAGE)

    input_path = argv[0]
    key = argv[1] if len(argv) >= 2 else None
    output_path = argv[2] if len(argv) >= 3 else None

    if not os.path.exists(input_path):
        raise ValueError(f"{input_path} does not exist")
    if not os.path.isfile(input_path):
        raise ValueError(f"{input_path} must be a file")
    if require_json_extension and os.path.splitext(input_path)[1].lower() != ".json":
        raise ValueError(f"{input_path} is not a JSON file")
    if key is not None and not key:
        raise ValueError("key must not be empty")

    return input_path, key, output_path


def load_json_text(path):
    """Read the raw text of a JSON file.

    Raises:
        FileNotFoundError: if file does not exist
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError as e:
        raise FileNotFoundError(f"File not found: {path}") from e


def write_text(path, text):
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def reject_constant(name):
    raise MalformedInputError(f"Invalid JSON format: {name} is not a JSON value")


def parse_document(text) -> list:
    """Parse text and check that it holds an array of objects.

    A leading byte order mark is ignored. NaN and Infinity are rejected.

    Raises:
        MalformedInputError: if text is not valid JSON or not an array of objects
    """
    try:
        data = json.loads(text.removeprefix(BOM), parse_constant=reject_constant)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON format: {e}") from e

    if not isinstance(data, list):
        raise MalformedInputError("The JSON file must contain an array of objects.")

    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedInputError(
                f"The JSON file must contain an array of objects (element {idx} is {type(item).__name__})."
            )

    return data


def available_keys(items) -> List[str]:
    """Property names of the first element, offered as comparison keys."""
    keys = list(items[0].keys())
    if not keys:
        raise MalformedInputError("The first object has no properties to compare.")
    return keys


def reserialize(items, indentation, trailing_newline=False):
    text = json.dumps(items, indent=indentation.indent, ensure_ascii=False)
    if trailing_newline:
        text += "\n"
    return text


def deduplicate_text(text, key, preserve_formatting=True) -> DedupeResult:
    """Remove later duplicates of key from the JSON array held in text.

    Objects are removed from the text directly when its layout allows it;
    otherwise the surviving objects are re-serialized with the indentation
    detected from the original text.

    Raises:
        MalformedInputError: if text is not a JSON array of objects
    """
    items = parse_document(text)
    indentation = detect_indentation(text)

    if not items:
        return DedupeResult(
            text=text,
            key=key,
            remaining_count=0,
            strategy="unchanged",
            indentation=indentation,
            message="The JSON array is empty. Nothing to deduplicate.",
        )

    duplicates = find_duplicates(items, key)
    remaining = len(items) - len(duplicates)
    logger.debug(f"Duplicate indices for '{key}': {duplicates}")

    if not duplicates:
        return DedupeResult(
            text=text,
            key=key,
            remaining_count=remaining,
            strategy="unchanged",
            indentation=indentation,
        )

    if preserve_formatting:
        try:
            new_text = remove_by_index(text, duplicates, expected_count=len(items))
            return DedupeResult(
                text=new_text,
                key=key,
                removed_indices=duplicates,
                remaining_count=remaining,
                strategy="preserved",
                indentation=indentation,
            )
        except StructuralAssumptionError as e:
            logger.warn(f"Cannot keep the original layout ({e}), re-serializing")

    removal = set(duplicates)
    survivors = [item for idx, item in enumerate(items) if idx not in removal]
    bom = BOM if text.startswith(BOM) else ""
    logger.info(f"Re-serializing with {indentation}")

    return DedupeResult(
        text=bom + reserialize(
            survivors, indentation, trailing_newline=text.endswith("\n")
        ),
        key=key,
        removed_indices=duplicates,
        remaining_count=remaining,
        strategy="reserialized",
        indentation=indentation,
    )


def prompt_for_key(keys, input_fn: Callable[[str], str] = input) -> Optional[str]:
    """Ask which property to compare on. Returns None when the user cancels."""
    print("Select a property to use for duplicate comparison:")
    for i, key in enumerate(keys, start=1):
        print(f"  {i}. {key}")

    while True:
        try:
            answer = input_fn("> ").strip()
        except EOFError:
            return None

        if not answer:
            return None
        if answer.isdecimal() and 1 <= int(answer) <= len(keys):
            return keys[int(answer) - 1]
        if answer in keys:
            return answer
        print(f"'{answer}' is not one of the listed properties")


def main(argv, input_fn: Callable[[str], str] = input) -> Optional[DedupeResult]:
    """Deduplicate a JSON file.

    Returns:
        the result, or None when key selection was cancelled

    Raises:
        ValueError: on bad arguments or malformed input
    """
    settings = get_settings()
    input_path, key, output_path = parse_args(
        argv, require_json_extension=settings.require_json_extension
    )

    text = load_json_text(input_path)
    items = parse_document(text)

    if items and key is None:
        key = prompt_for_key(available_keys(items), input_fn=input_fn)
        if key is None:
            logger.info("No property selected, nothing changed")
            return None
    elif items and key not in items[0]:
        logger.warn(f"The first object has no '{key}' property")

    result = deduplicate_text(
        text, key or "", preserve_formatting=settings.preserve_formatting
    )

    target = output_path or input_path
    if result.changed or output_path:
        write_text(target, result.text)
        logger.info(f"Wrote {target} ({result.strategy})")

    logger.info(result.summary)
    return result


def run():
    try:
        main(sys.argv[1:])
    except (ValueError, OSError) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    run()
