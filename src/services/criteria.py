"""Single-criterion evaluation.

The evaluator is a pure function of ``(criterion, value)``: no state, no
I/O, safe for unbounded concurrent use.  It fails closed.  An absent value
or a value whose kind cannot be compared under the operator never raises;
it yields ``MISSING`` or ``INVALID`` respectively, both of which count as
not met.  Keeping the two apart lets the engine report insufficient input
separately from ineligibility.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from datetime import date
from enum import StrEnum
from typing import Any, Final, assert_never

from src.models.enums import CriterionOperator
from src.models.scheme import EligibilityCriterion, ValueRange
from src.models.values import DateValue, NumberValue, SelectValue, TextValue


class CriterionOutcome(StrEnum):
    __slots__ = ()

    MET = "met"
    UNMET = "unmet"
    MISSING = "missing"
    INVALID = "invalid"


_COMPARATORS: Final[dict[CriterionOperator, Callable[[Any, Any], bool]]] = {
    CriterionOperator.GREATER_THAN: operator.gt,
    CriterionOperator.LESS_THAN: operator.lt,
    CriterionOperator.GREATER_THAN_OR_EQUAL: operator.ge,
    CriterionOperator.LESS_THAN_OR_EQUAL: operator.le,
}


def _value_kind(value: NumberValue | TextValue | DateValue | SelectValue) -> str:
    # text and select answers are both categorical strings
    if isinstance(value, NumberValue):
        return "number"
    if isinstance(value, DateValue):
        return "date"
    return "string"


def _scalar_kind(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, date):
        return "date"
    if isinstance(value, str):
        return "string"
    return None


def _outcome(passed: bool) -> CriterionOutcome:
    return CriterionOutcome.MET if passed else CriterionOutcome.UNMET


class CriterionEvaluator:
    """Evaluates one eligibility criterion against one tagged user value."""

    __slots__ = ()

    def assess(
        self,
        criterion: EligibilityCriterion,
        user_value: NumberValue | TextValue | DateValue | SelectValue | None,
    ) -> CriterionOutcome:
        if user_value is None:
            return CriterionOutcome.MISSING

        kind = _value_kind(user_value)
        actual = user_value.value
        expected = criterion.value

        match criterion.operator:
            case CriterionOperator.EQUALS:
                if _scalar_kind(expected) != kind:
                    return CriterionOutcome.INVALID
                return _outcome(actual == expected)

            case (
                CriterionOperator.GREATER_THAN
                | CriterionOperator.LESS_THAN
                | CriterionOperator.GREATER_THAN_OR_EQUAL
                | CriterionOperator.LESS_THAN_OR_EQUAL
            ):
                if kind != "number":
                    return CriterionOutcome.INVALID
                return _outcome(_COMPARATORS[criterion.operator](actual, expected))

            case CriterionOperator.BETWEEN:
                if kind != "number" or not isinstance(expected, ValueRange):
                    return CriterionOutcome.INVALID
                return _outcome(expected.min <= actual <= expected.max)

            case CriterionOperator.IN:
                if not isinstance(expected, list):
                    return CriterionOutcome.INVALID
                comparable = [member for member in expected if _scalar_kind(member) == kind]
                if expected and not comparable:
                    return CriterionOutcome.INVALID
                return _outcome(actual in comparable)

            case _:
                assert_never(criterion.operator)

    def evaluate(
        self,
        criterion: EligibilityCriterion,
        user_value: NumberValue | TextValue | DateValue | SelectValue | None,
    ) -> bool:
        """Return *True* only when the criterion is positively met."""
        return self.assess(criterion, user_value) is CriterionOutcome.MET
