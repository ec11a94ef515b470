"""Exceptions raised when merging sketches or building them."""

from __future__ import annotations

import math


def _format_number(value: float) -> str:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


class HeavyKeeperError(ValueError):
    """Two sketches cannot be merged because their parameters differ."""


class IncompatibleWidthError(HeavyKeeperError):
    def __init__(self, self_width: int, other_width: int) -> None:
        self.self_width = self_width
        self.other_width = other_width
        super().__init__(
            f"Incompatible width: self ({self_width}) != other ({other_width})"
        )


class IncompatibleDepthError(HeavyKeeperError):
    def __init__(self, self_depth: int, other_depth: int) -> None:
        self.self_depth = self_depth
        self.other_depth = other_depth
        super().__init__(
            f"Incompatible depth: self ({self_depth}) != other ({other_depth})"
        )


class IncompatibleDecayError(HeavyKeeperError):
    def __init__(self, self_decay: float, other_decay: float) -> None:
        self.self_decay = self_decay
        self.other_decay = other_decay
        super().__init__(
            f"Incompatible decay: self ({_format_number(self_decay)}) "
            f"!= other ({_format_number(other_decay)})"
        )


class IncompatibleTopItemsError(HeavyKeeperError):
    def __init__(self, self_items: int, other_items: int) -> None:
        self.self_items = self_items
        self.other_items = other_items
        super().__init__(
            f"Incompatible top_items: self ({self_items}) != other ({other_items})"
        )


class BuilderError(ValueError):
    """A sketch could not be built from the given settings."""


class MissingFieldError(BuilderError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required field: {field}")