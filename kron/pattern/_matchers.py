"""
Single-field matching clauses and the structured validation failures produced when building them.
"""

import dataclasses
from dataclasses import dataclass

from kron.pattern._fields import FieldRepresentation, PatternField

__all__ = ["FieldMatcher", "FieldValidationFailure", "PartValidationFailure", "PatternValidationFailure"]


@dataclass(frozen=True)
class FieldValidationFailure:
    """
    A single field spec (such as ``61`` or ``12-99/5``) that failed to validate.
    """

    pattern: str
    errors: tuple[str, ...]

    def __str__(self) -> str:
        return f"'{self.pattern}': {'; '.join(self.errors)}"


@dataclass(frozen=True)
class PartValidationFailure:
    """
    A pattern section (all the comma-separated specs of one field) containing at least one invalid spec.
    """

    field: PatternField
    pattern: str
    field_errors: tuple[FieldValidationFailure, ...]

    def __str__(self) -> str:
        return f"{self.field.label} '{self.pattern}': [{', '.join(str(e) for e in self.field_errors)}]"


@dataclass(frozen=True)
class PatternValidationFailure:
    """
    The aggregate failure for a whole pattern, carrying the original text and every contributing error.
    """

    pattern: str
    error: str
    part_errors: tuple[PartValidationFailure, ...] = ()

    def __str__(self) -> str:
        if not self.part_errors:
            return f"Invalid pattern '{self.pattern}': {self.error}"
        parts = "; ".join(str(p) for p in self.part_errors)
        return f"Invalid pattern '{self.pattern}': {self.error} {parts}"


@dataclass(frozen=True)
class FieldMatcher:
    """
    One clause of a field: a value, with an optional inclusive range end and an optional step interval.

    Use ``FieldMatcher.create`` rather than the constructor, so bounds are validated.
    """

    field: PatternField
    value: int
    range_end: int | None = None
    interval: int | None = None
    representation: FieldRepresentation | None = dataclasses.field(default=None, compare=False, hash=False)

    @classmethod
    def create(
        cls,
        pattern_field: PatternField,
        value: int,
        range_end: int | None = None,
        interval: int | None = None,
        representation: FieldRepresentation | None = None,
        original_pattern: str | None = None,
    ) -> "FieldMatcher | FieldValidationFailure":
        """
        Validate the clause against the field's bounds.

        Returns:
            The matcher, or a ``FieldValidationFailure`` listing every violated bound.
        """
        matcher = cls(pattern_field, value, range_end, interval, representation)
        errors = _validate(pattern_field, value, range_end, interval)
        if errors:
            return FieldValidationFailure(original_pattern or matcher.as_string(), tuple(errors))
        return matcher

    def matches(self, test_value: int) -> bool:
        if self._accepts(test_value):
            return True
        # Sunday is both 0 and 7
        return self.field is PatternField.DAY_OF_WEEK and test_value == 0 and self._accepts(7)

    def _accepts(self, test_value: int) -> bool:
        if self.range_end is None:
            if self.interval is None:
                return test_value == self.value
            return test_value >= self.value and test_value % self.interval == self.value % self.interval

        if self.interval is None:
            return self.value <= test_value <= self.range_end
        return self.value <= test_value <= self.range_end and test_value % self.interval == self.value % self.interval

    def as_string(self) -> str:
        value_part = self.field.render(self.value, self.representation)
        range_part = f"-{self.range_end}" if self.range_end is not None else ""
        interval_part = f"/{self.interval}" if self.interval is not None else ""
        return f"{value_part}{range_part}{interval_part}"

    def __str__(self) -> str:
        return f"{self.field.label}-> {self.as_string()}"


def _validate(pattern_field: PatternField, value: int, range_end: int | None, interval: int | None) -> list[str]:
    errors: list[str] = []

    def check_bounds(label: str, test: int) -> None:
        if test < pattern_field.min:
            errors.append(f"{label} [{test}] is less than min of [{pattern_field.min}] for {pattern_field.label} field")
        if test > pattern_field.max:
            errors.append(
                f"{label} [{test}] is greater than max of [{pattern_field.max}] for {pattern_field.label} field"
            )

    check_bounds("Value", value)
    if range_end is not None:
        check_bounds("Range", range_end)
    if interval is not None and interval < 1:
        errors.append(f"Interval [{interval}] must be at least 1 for {pattern_field.label} field")
    return errors
