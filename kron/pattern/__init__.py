"""
This module provides five-field time patterns, in the style of cron expressions.

A pattern has five sections separated by single spaces: minute, hour, day of month, month and day of week. Each
section is either ``*`` (match anything) or a comma-separated list of ``VALUE[-RANGE][/INTERVAL]`` clauses. Numbers
are plain decimals without leading zeros. Months may be written as ``JAN`` to ``DEC`` and days of week as ``SUN`` to
``SAT``; day of week also accepts both ``0`` and ``7`` for Sunday.

A ``*`` used as a clause value stands for the field minimum, so ``*/15`` in the minute section means 0, 15, 30 and 45.
Only a section that is exactly ``*`` matches anything: ``*,5`` in the minute section matches minutes 0 and 5 only.

Patterns can either be parsed from text with ``Pattern.parse``, or built with a ``PatternSpec``. Both report every
invalid field at once, as a ``PatternParseError`` carrying a structured ``PatternValidationFailure``.
"""

from ._fields import FieldRepresentation, FieldStructure, PatternField
from ._matchers import FieldMatcher, FieldValidationFailure, PartValidationFailure, PatternValidationFailure
from ._pattern import Clause, Pattern, PatternSpec

__all__ = [
    "Clause",
    "FieldMatcher",
    "FieldRepresentation",
    "FieldStructure",
    "FieldValidationFailure",
    "PartValidationFailure",
    "Pattern",
    "PatternField",
    "PatternSpec",
    "PatternValidationFailure",
]
