"""
Parsing, building, rendering and matching of five-field time patterns.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from kron.exceptions import PatternParseError
from kron.pattern._fields import FieldRepresentation, FieldStructure, Moment, PatternField
from kron.pattern._matchers import (
    FieldMatcher,
    FieldValidationFailure,
    PartValidationFailure,
    PatternValidationFailure,
)

__all__ = ["Clause", "Pattern", "PatternSpec"]


Matchers = tuple[FieldMatcher, ...]


class Pattern:
    """
    An immutable five-field time pattern (minute, hour, day of month, month, day of week).

    A moment matches the pattern if, for every field, the moment's value for that field satisfies at least one of the
    field's matchers. A field without matchers (written ``*``) matches anything.

    Patterns are created with ``Pattern.parse`` or with a ``PatternSpec``, and are safe to share between threads.

    .. code-block:: python

        pattern = Pattern.parse("*/15 8-17 * * MON")
        pattern.matches(arrow.now())
    """

    __slots__ = ("_matchers",)

    def __init__(self, matchers: FieldStructure[Matchers]) -> None:
        self._matchers = matchers

    @classmethod
    def parse(cls, pattern: str) -> "Pattern":
        """
        Parse a pattern from text.

        Args:
            pattern: Five sections separated by single spaces, each ``*`` or a comma-separated list of
                ``VALUE[-RANGE][/INTERVAL]``.

        Raises:
            PatternParseError: If the pattern is invalid. The exception lists every invalid field.
        """
        result = cls.try_parse(pattern)
        if isinstance(result, PatternValidationFailure):
            raise PatternParseError(result)
        return result

    @classmethod
    def try_parse(cls, pattern: str) -> "Pattern | PatternValidationFailure":
        """
        Parse a pattern from text, returning the structured failure instead of raising if it is invalid.
        """
        sections = pattern.split(" ")
        if len(sections) != len(PatternField):
            return PatternValidationFailure(pattern, "Pattern does not have 5 space-separated sections")

        by_field = dict(zip(PatternField, sections))
        structure, errors = FieldStructure(lambda field: by_field[field]).transform(_parse_section)
        if structure is None:
            return PatternValidationFailure(pattern, "Pattern sections did not parse.", tuple(errors))
        return cls(structure)

    @classmethod
    def build(cls, define: Callable[["PatternSpec"], None]) -> "Pattern":
        """
        Build a pattern programmatically.

        .. code-block:: python

            Pattern.build(lambda p: (p.minutes(12, 25).interval(4), p.hours(4), p.hours(18)))

        Args:
            define: Called with an empty ``PatternSpec`` to add clauses to.

        Raises:
            PatternParseError: If any clause is out of bounds for its field.
        """
        spec = PatternSpec()
        define(spec)
        return spec.build()

    def matches(self, moment: Moment | datetime) -> bool:
        """
        Check whether a moment matches this pattern. Seconds and smaller units are ignored.
        """
        return all(
            not matchers or any(m.matches(field.value_of(moment)) for m in matchers)
            for field, matchers in self._matchers.items()
        )

    def matchers(self, field: PatternField) -> Matchers:
        """
        The matchers of one field. An empty tuple means the field matches anything.
        """
        return self._matchers[field]

    def as_string(self) -> str:
        """
        Canonical text for this pattern, which parses back to an equal pattern.
        """
        return self._matchers.join(_render_matchers)

    def __str__(self) -> str:
        return self.as_string()

    def __repr__(self) -> str:
        return f"Pattern[ {self.as_string()} ]"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pattern):
            return NotImplemented
        return self._matchers == other._matchers

    def __hash__(self) -> int:
        return hash(self._matchers)


def _render_matchers(matchers: Matchers) -> str:
    if not matchers:
        return "*"
    return ",".join(m.as_string() for m in matchers)


def _split_last(text: str, separator: str) -> tuple[str, str | None]:
    head, found, tail = text.rpartition(separator)
    if not found:
        return text, None
    return head, tail


def _parse_spec(field: PatternField, spec: str) -> FieldMatcher | FieldValidationFailure:
    # VALUE[-RANGE][/INTERVAL], stripped from the right
    rest, interval_text = _split_last(spec, "/")
    rest, range_text = _split_last(rest, "-")

    try:
        value, representation = field.parse_value(rest)
        range_end = field.parse_number(range_text) if range_text is not None else None
        interval = field.parse_number(interval_text) if interval_text is not None else None
    except ValueError as e:
        return FieldValidationFailure(spec, (f"Number format error: {e}",))

    return FieldMatcher.create(field, value, range_end, interval, representation, original_pattern=spec)


def _parse_section(field: PatternField, section: str) -> tuple[Matchers | None, PartValidationFailure | None]:
    if section == "*":
        return (), None

    results = [_parse_spec(field, spec) for spec in section.split(",")]
    errors = tuple(r for r in results if isinstance(r, FieldValidationFailure))
    if errors:
        return None, PartValidationFailure(field, section, errors)
    return tuple(r for r in results if isinstance(r, FieldMatcher)), None


@dataclass
class Clause:
    """
    One clause of a ``PatternSpec``, mirroring ``VALUE[-RANGE][/INTERVAL]`` in pattern text.

    Values of the month and day of week fields may be given as aliases, such as ``"JAN"`` or ``"SUN"``.
    """

    value: int | str
    range_end: int | str | None = None
    step: int | None = None
    representation: FieldRepresentation | None = None

    def interval(self, step: int) -> "Clause":
        """
        Only match every ``step``-th value, counting from the clause value.
        """
        self.step = step
        return self

    def as_string(self) -> str:
        value_part = "*" if self.representation is FieldRepresentation.STAR else str(self.value)
        range_part = f"-{self.range_end}" if self.range_end is not None else ""
        interval_part = f"/{self.step}" if self.step is not None else ""
        return f"{value_part}{range_part}{interval_part}"


class PatternSpec:
    """
    A mutable specification of a pattern, one list of clauses per field.

    Clauses are validated with the same rules as pattern text when ``build`` is called, and all invalid clauses are
    reported together.

    .. code-block:: python

        spec = PatternSpec()
        spec.minutes_interval(15)
        spec.hours(8, 17)
        spec.days_of_week("MON")
        pattern = spec.build()  # Same as Pattern.parse("*/15 8-17 * * MON")
    """

    def __init__(self) -> None:
        self._clauses: FieldStructure[list[Clause]] = FieldStructure(lambda _: [])

    def add(self, field: PatternField, value: int | str, range_end: int | str | None = None) -> Clause:
        clause = Clause(value, range_end)
        self._clauses[field].append(clause)
        return clause

    def add_interval(self, field: PatternField, step: int) -> Clause:
        clause = Clause(field.min, representation=FieldRepresentation.STAR).interval(step)
        self._clauses[field].append(clause)
        return clause

    def minutes(self, value: int, range_end: int | None = None) -> Clause:
        return self.add(PatternField.MINUTE, value, range_end)

    def minutes_interval(self, step: int) -> Clause:
        return self.add_interval(PatternField.MINUTE, step)

    def hours(self, value: int, range_end: int | None = None) -> Clause:
        return self.add(PatternField.HOUR, value, range_end)

    def hours_interval(self, step: int) -> Clause:
        return self.add_interval(PatternField.HOUR, step)

    def days_of_month(self, value: int, range_end: int | None = None) -> Clause:
        return self.add(PatternField.DAY_OF_MONTH, value, range_end)

    def days_of_month_interval(self, step: int) -> Clause:
        return self.add_interval(PatternField.DAY_OF_MONTH, step)

    def months(self, value: int | str, range_end: int | str | None = None) -> Clause:
        return self.add(PatternField.MONTH, value, range_end)

    def months_interval(self, step: int) -> Clause:
        return self.add_interval(PatternField.MONTH, step)

    def days_of_week(self, value: int | str, range_end: int | str | None = None) -> Clause:
        return self.add(PatternField.DAY_OF_WEEK, value, range_end)

    def days_of_week_interval(self, step: int) -> Clause:
        return self.add_interval(PatternField.DAY_OF_WEEK, step)

    def as_string(self) -> str:
        return self._clauses.join(lambda clauses: ",".join(c.as_string() for c in clauses) if clauses else "*")

    def try_build(self) -> "Pattern | PatternValidationFailure":
        """
        Build the pattern, returning the structured failure instead of raising if any clause is invalid.
        """
        structure, errors = self._clauses.transform(_build_section)
        if structure is None:
            return PatternValidationFailure(self.as_string(), "Pattern failed to validate.", tuple(errors))
        return Pattern(structure)

    def build(self) -> "Pattern":
        """
        Build the pattern.

        Raises:
            PatternParseError: If any clause is out of bounds for its field.
        """
        result = self.try_build()
        if isinstance(result, PatternValidationFailure):
            raise PatternParseError(result)
        return result


def _resolve(field: PatternField, value: int | str) -> int:
    if isinstance(value, int):
        return value
    if field.aliases is not None and value in field.aliases:
        return field.aliases[value]
    raise ValueError(f"'{value}' is not a known alias for {field.label} field")


def _build_clause(field: PatternField, clause: Clause) -> FieldMatcher | FieldValidationFailure:
    try:
        value = _resolve(field, clause.value)
        range_end = _resolve(field, clause.range_end) if clause.range_end is not None else None
    except ValueError as e:
        return FieldValidationFailure(clause.as_string(), (str(e),))
    return FieldMatcher.create(field, value, range_end, clause.step, clause.representation)


def _build_section(field: PatternField, clauses: list[Clause]) -> tuple[Matchers | None, PartValidationFailure | None]:
    results = [_build_clause(field, clause) for clause in clauses]
    errors = tuple(r for r in results if isinstance(r, FieldValidationFailure))
    if errors:
        section = ",".join(c.as_string() for c in clauses)
        return None, PartValidationFailure(field, section, errors)
    return tuple(r for r in results if isinstance(r, FieldMatcher)), None
