"""
The five temporal fields of a pattern, and the fixed-size record used to hold one value per field.
"""

from collections.abc import Callable, Iterator, Mapping
from datetime import datetime
from enum import Enum
from typing import Generic, Protocol, TypeVar

__all__ = ["FieldRepresentation", "FieldStructure", "Moment", "PatternField"]


class Moment(Protocol):
    """
    Anything carrying calendar fields, such as ``datetime.datetime`` or ``arrow.Arrow``.
    """

    @property
    def minute(self) -> int: ...

    @property
    def hour(self) -> int: ...

    @property
    def day(self) -> int: ...

    @property
    def month(self) -> int: ...

    def isoweekday(self) -> int: ...


class FieldRepresentation(Enum):
    """
    How a field value was written in the pattern text, so it can be rendered back the same way.
    """

    STAR = "star"
    NUMERICAL = "numerical"
    ALPHA = "alpha"


_MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

_WEEKDAYS = {
    "SUN": 0,
    "MON": 1,
    "TUE": 2,
    "WED": 3,
    "THU": 4,
    "FRI": 5,
    "SAT": 6,
}


class PatternField(Enum):
    """
    One of the five fields of a pattern, in pattern order.

    Each member knows its inclusive bounds, its alias table (if any), and how to read its value from a moment in time.
    Day of week accepts both 0 and 7 for Sunday in pattern text, but always reads as 0 to 6 from a moment.
    """

    MINUTE = ("minute", 0, 59)
    HOUR = ("hour", 0, 23)
    DAY_OF_MONTH = ("day-of-month", 1, 31)
    MONTH = ("month", 1, 12)
    DAY_OF_WEEK = ("day-of-week", 0, 7)

    def __init__(self, label: str, min_value: int, max_value: int) -> None:
        self.label = label
        self.min = min_value
        self.max = max_value

    @property
    def aliases(self) -> Mapping[str, int] | None:
        return _ALIASES.get(self.name)

    def value_of(self, moment: Moment | datetime) -> int:
        """
        Read this field's value out of a moment. Day of week is always 0 (Sunday) to 6 (Saturday).
        """
        match self:
            case PatternField.MINUTE:
                return moment.minute
            case PatternField.HOUR:
                return moment.hour
            case PatternField.DAY_OF_MONTH:
                return moment.day
            case PatternField.MONTH:
                return moment.month
            case PatternField.DAY_OF_WEEK:
                return moment.isoweekday() % 7
        raise AssertionError(f"Unknown field {self}")

    def parse_number(self, text: str) -> int:
        """
        Parse a decimal number for this field.

        Raises:
            ValueError: If the text is not a decimal integer, or has leading zeros.
        """
        if not (text.isascii() and text.isdecimal()):
            raise ValueError(f"invalid literal for {self.label} field: '{text}'")
        if len(text) > 1 and text.startswith("0"):
            raise ValueError(f"leading zeros in {self.label} field: '{text}'")
        return int(text)

    def parse_value(self, text: str) -> tuple[int, FieldRepresentation]:
        """
        Resolve the value part of a field spec: a literal ``*``, an alias, or a number, in that order.
        """
        if text == "*":
            return self.min, FieldRepresentation.STAR
        if self.aliases is not None and text in self.aliases:
            return self.aliases[text], FieldRepresentation.ALPHA
        return self.parse_number(text), FieldRepresentation.NUMERICAL

    def alias_of(self, value: int) -> str | None:
        if self.aliases is None:
            return None
        for alias, aliased in self.aliases.items():
            if aliased == value:
                return alias
        return None

    def render(self, value: int, representation: FieldRepresentation | None) -> str:
        """
        Render a value the way it was written, or as an alias when the field has one and no representation was
        recorded.
        """
        match representation:
            case FieldRepresentation.STAR:
                return "*"
            case FieldRepresentation.NUMERICAL:
                return str(value)
            case FieldRepresentation.ALPHA:
                alias = self.alias_of(value)
                if alias is None:
                    raise ValueError(f"No alias for value {value} of {self.label} field")
                return alias
            case None:
                return self.alias_of(value) or str(value)


_ALIASES: dict[str, Mapping[str, int]] = {"MONTH": _MONTHS, "DAY_OF_WEEK": _WEEKDAYS}
_ORDER = {field: index for index, field in enumerate(PatternField)}

_T = TypeVar("_T")
_U = TypeVar("_U")
_E = TypeVar("_E")


class FieldStructure(Generic[_T]):
    """
    An immutable record holding exactly one value per pattern field.
    """

    __slots__ = ("_values",)

    def __init__(self, factory: Callable[[PatternField], _T]) -> None:
        self._values: tuple[_T, ...] = tuple(factory(field) for field in PatternField)

    def __getitem__(self, field: PatternField) -> _T:
        return self._values[_ORDER[field]]

    def __iter__(self) -> Iterator[_T]:
        return iter(self._values)

    def items(self) -> Iterator[tuple[PatternField, _T]]:
        return zip(PatternField, self._values)

    def map(self, transform: Callable[[PatternField, _T], _U]) -> "FieldStructure[_U]":
        return FieldStructure(lambda field: transform(field, self[field]))

    def transform(
        self,
        transform: Callable[[PatternField, _T], tuple[_U | None, _E | None]],
    ) -> "tuple[FieldStructure[_U] | None, list[_E]]":
        """
        Apply a fallible transform to every field, collecting the errors of all fields instead of stopping at the
        first.

        Args:
            transform: Function returning either ``(result, None)`` or ``(None, error)``.

        Returns:
            The transformed structure and an empty list, or ``None`` and every error produced.
        """
        results = [transform(field, value) for field, value in self.items()]
        errors = [error for _, error in results if error is not None]
        if errors:
            return None, errors
        values = [result for result, _ in results]
        return FieldStructure(lambda field: values[_ORDER[field]]), []  # type: ignore[arg-type, return-value]

    def join(self, render: Callable[[_T], str], separator: str = " ") -> str:
        return separator.join(render(value) for value in self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldStructure):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"FieldStructure({', '.join(f'{f.name}={v!r}' for f, v in self.items())})"
