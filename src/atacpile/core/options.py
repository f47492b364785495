"""Closed option sets accepted by the conversion and pileup pipeline."""

from __future__ import annotations

from enum import Enum

from .exceptions import (
    AtacPileError,
    InvalidModeError,
    InvalidNormError,
    InvalidWindowModeError,
)


class _Option(str, Enum):
    """String-valued option that validates itself at the API boundary."""

    @classmethod
    def parse(cls, value):
        """
        Resolve a member from an enum member or its string value.

        Raises:
            InvalidModeError, InvalidNormError or InvalidWindowModeError
            (depending on the option set) if value is not a member.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(repr(m.value) for m in cls)
            error = _ERRORS.get(cls, AtacPileError)
            raise error(
                f"Invalid {cls.__name__} {value!r}; expected one of {choices}"
            ) from None

    def __str__(self) -> str:
        return self.value


class ConversionMode(_Option):
    """Interval representation a fragment is converted to."""

    CUTS = "cuts"
    FOOTPRINTS = "footprints"


class NormMode(_Option):
    """Per-group profile normalization."""

    PM = "PM"
    MAX = "max"
    NONE = "none"


class WindowMode(_Option):
    """Reducer applied to the positions inside one bin."""

    MAX = "max"
    MEAN = "mean"
    MEDIAN = "median"


_ERRORS: dict[type[_Option], type[AtacPileError]] = {
    ConversionMode: InvalidModeError,
    NormMode: InvalidNormError,
    WindowMode: InvalidWindowModeError,
}
