from __future__ import annotations
from enum import Enum
from typing import List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class MalformedInputError(ValueError):
    """The document is not a JSON array of objects we can deduplicate."""


class StructuralAssumptionError(ValueError):
    """The text layout does not allow locating top-level objects line by line."""

    def __init__(self, message: str, line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class IndentStyle(str, Enum):
    TAB = "tab"
    SPACES = "spaces"


class IndentationUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    style: IndentStyle
    width: int = Field(gt=0)
    # True when width is the most frequent raw sample rather than a candidate unit
    fallback: bool = False

    @classmethod
    def tab(cls) -> IndentationUnit:
        return cls(style=IndentStyle.TAB, width=1)

    @classmethod
    def spaces(cls, width: int, fallback: bool = False) -> IndentationUnit:
        return cls(style=IndentStyle.SPACES, width=width, fallback=fallback)

    @property
    def indent(self) -> Union[str, int]:
        """Value accepted by ``json.dumps(indent=...)``."""
        if self.style == IndentStyle.TAB:
            return "\t"
        return self.width

    def __str__(self) -> str:
        if self.style == IndentStyle.TAB:
            return "tabs"
        return f"{self.width} spaces"


DEFAULT_INDENTATION = IndentationUnit.spaces(2)


class DedupeResult(BaseModel):
    text: str
    key: str
    removed_indices: List[int] = Field(default_factory=list)
    remaining_count: int
    strategy: Literal["preserved", "reserialized", "unchanged"]
    indentation: IndentationUnit = DEFAULT_INDENTATION
    message: str | None = None

    @property
    def removed_count(self) -> int:
        return len(self.removed_indices)

    @property
    def changed(self) -> bool:
        return self.strategy != "unchanged"

    @property
    def summary(self) -> str:
        if self.message:
            return self.message
        return (
            f'Removed {self.removed_count} duplicate(s) based on "{self.key}". '
            f"{self.remaining_count} unique item(s) remain."
        )
