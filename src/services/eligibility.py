"""Deterministic eligibility engine.

For one scheme and one set of tagged user inputs, the engine walks the
scheme's criteria in catalog declaration order, evaluates each through
:class:`~src.services.criteria.CriterionEvaluator` and partitions them
into met and unmet.  The verdict is ``eligible`` exactly when nothing is
unmet.

Insufficient input is not ineligibility: if any criterion names a field
absent from the inputs, :class:`InvalidEligibilityInputsError` is raised
*before* a verdict is formed, listing the missing fields.

The engine holds no mutable state and performs no I/O, so the same
``(scheme, inputs)`` pair always yields the same result and instances are
safe to share across threads.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

import structlog
from pydantic import BaseModel, Field, computed_field

from config.languages import get_language
from src.errors import InvalidEligibilityInputsError
from src.models.scheme import EligibilityCriterion, Scheme, ValueRange
from src.models.values import DateValue, NumberValue, SelectValue, TextValue
from src.services.criteria import CriterionEvaluator, CriterionOutcome

logger = structlog.get_logger(__name__)

TaggedInputs = Mapping[str, NumberValue | TextValue | DateValue | SelectValue | None]


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class EligibilityResult(BaseModel):
    """Outcome of checking one scheme's full criteria set.

    ``met_criteria`` and ``unmet_criteria`` partition the scheme's criteria
    with no overlap, each in declaration order.  ``invalid_fields`` names
    inputs that were present but of a kind the operator cannot compare;
    their criteria are reported as unmet.
    """

    scheme_id: str
    met_criteria: list[EligibilityCriterion] = Field(default_factory=list)
    unmet_criteria: list[EligibilityCriterion] = Field(default_factory=list)
    invalid_fields: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def eligible(self) -> bool:
        return not self.unmet_criteria


# ---------------------------------------------------------------------------
# Explanation templates
# ---------------------------------------------------------------------------

_TEMPLATES: Final[dict[str, dict[str, str]]] = {
    "en": {
        "eligible": "You are eligible for {scheme}. All {total} criteria are met.",
        "eligible_no_criteria": "You are eligible for {scheme}. It has no eligibility conditions.",
        "ineligible": "You are not eligible for {scheme}. {unmet} of {total} criteria are not met:",
        "invalid": "Please check the value given for: {fields}.",
    },
    "hi": {
        "eligible": "आप {scheme} के लिए पात्र हैं। सभी {total} शर्तें पूरी होती हैं।",
        "eligible_no_criteria": "आप {scheme} के लिए पात्र हैं। इसकी कोई पात्रता शर्त नहीं है।",
        "ineligible": "आप {scheme} के लिए पात्र नहीं हैं। {total} में से {unmet} शर्तें पूरी नहीं होतीं:",
        "invalid": "कृपया इन जानकारियों की जाँच करें: {fields}।",
    },
}

_OPERATOR_WORDS: Final[dict[str, str]] = {
    "equals": "must be",
    "greaterThan": "must be more than",
    "lessThan": "must be less than",
    "greaterThanOrEqual": "must be at least",
    "lessThanOrEqual": "must be at most",
    "between": "must be between",
    "in": "must be one of",
}


def _describe(criterion: EligibilityCriterion) -> str:
    if criterion.description:
        return criterion.description
    value = criterion.value
    if isinstance(value, ValueRange):
        shown = f"{value.min} and {value.max}"
    elif isinstance(value, list):
        shown = ", ".join(str(v) for v in value)
    else:
        shown = str(value)
    return f"{criterion.field.replace('_', ' ')} {_OPERATOR_WORDS[criterion.operator]} {shown}"


# ---------------------------------------------------------------------------
# Eligibility Engine
# ---------------------------------------------------------------------------


class EligibilityEngine:
    """Evaluates a scheme's criteria set against user inputs."""

    __slots__ = ("_evaluator",)

    def __init__(self, evaluator: CriterionEvaluator | None = None) -> None:
        self._evaluator = evaluator or CriterionEvaluator()

    @staticmethod
    def missing_fields(scheme: Scheme, user_inputs: TaggedInputs) -> list[str]:
        """Fields referenced by *scheme*'s criteria but absent from *user_inputs*."""
        missing: list[str] = []
        for criterion in scheme.criteria:
            if user_inputs.get(criterion.field) is None and criterion.field not in missing:
                missing.append(criterion.field)
        return missing

    def check_eligibility(self, scheme: Scheme, user_inputs: TaggedInputs) -> EligibilityResult:
        """Return the eligibility verdict of *user_inputs* for *scheme*.

        Raises
        ------
        InvalidEligibilityInputsError
            If one or more criteria reference fields missing from the inputs.
        """
        missing = self.missing_fields(scheme, user_inputs)
        if missing:
            logger.info(
                "eligibility.insufficient_inputs",
                scheme_id=scheme.scheme_id,
                missing_fields=missing,
            )
            raise InvalidEligibilityInputsError(scheme.scheme_id, missing)

        result = EligibilityResult(scheme_id=scheme.scheme_id)
        for criterion in scheme.criteria:
            outcome = self._evaluator.assess(criterion, user_inputs.get(criterion.field))
            if outcome is CriterionOutcome.MET:
                result.met_criteria.append(criterion)
                continue
            result.unmet_criteria.append(criterion)
            if outcome is CriterionOutcome.INVALID and criterion.field not in result.invalid_fields:
                result.invalid_fields.append(criterion.field)

        logger.debug(
            "eligibility.checked",
            scheme_id=scheme.scheme_id,
            eligible=result.eligible,
            met=len(result.met_criteria),
            unmet=len(result.unmet_criteria),
        )
        return result

    @staticmethod
    def generate_explanation(
        result: EligibilityResult,
        language: str = "en",
        scheme_name: str | None = None,
    ) -> str:
        """Render an already-computed *result* as user-facing text.

        Pure formatting: eligibility is never re-derived here.  Languages
        without templates fall back to English.
        """
        config = get_language(language)
        code = config.code if config is not None and config.has_explanations else "en"
        templates = _TEMPLATES[code]

        scheme = scheme_name or result.scheme_id
        total = len(result.met_criteria) + len(result.unmet_criteria)

        if result.eligible:
            key = "eligible" if total else "eligible_no_criteria"
            return templates[key].format(scheme=scheme, total=total)

        lines = [templates["ineligible"].format(scheme=scheme, unmet=len(result.unmet_criteria), total=total)]
        lines.extend(f"- {_describe(c)}" for c in result.unmet_criteria)
        if result.invalid_fields:
            lines.append(templates["invalid"].format(fields=", ".join(result.invalid_fields)))
        return "\n".join(lines)
