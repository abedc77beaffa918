"""Tests for the deterministic eligibility engine.

Covers the verdict partition, missing-input reporting, type-mismatch
handling, determinism and explanation rendering.  Scenarios run against
the bundled scheme catalog via load_schemes().
"""

from __future__ import annotations

import pytest

from src.data.seed import load_schemes
from src.errors import ErrorCode, InvalidEligibilityInputsError
from src.models.enums import CriterionOperator, FieldType
from src.models.scheme import ApplicationStep, EligibilityCriterion, Scheme
from src.models.values import normalize_inputs
from src.services.eligibility import EligibilityEngine, EligibilityResult


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def schemes() -> dict[str, Scheme]:
    """The bundled schemes.json keyed by scheme id."""
    return {s.scheme_id: s for s in load_schemes()}


@pytest.fixture
def engine() -> EligibilityEngine:
    return EligibilityEngine()


@pytest.fixture
def farmer_inputs() -> dict:
    """Small farmer with 2 acres and a modest income."""
    return {"occupation": "farmer", "land_holding_acres": 2.0, "income": 60000}


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestSeniorPension:
    def test_exactly_65_is_eligible(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(schemes["senior-pension"], normalize_inputs({"age": 65}))
        assert result.eligible is True
        assert result.unmet_criteria == []

    def test_64_is_not_eligible(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        scheme = schemes["senior-pension"]
        result = engine.check_eligibility(scheme, normalize_inputs({"age": 64}))
        assert result.eligible is False
        assert result.unmet_criteria == [scheme.criteria[0]], "The age criterion should be reported as unmet"
        assert result.unmet_criteria[0].field == "age"


class TestMissingInputs:
    def test_missing_income_is_not_a_verdict(
        self,
        engine: EligibilityEngine,
        schemes: dict[str, Scheme],
        farmer_inputs: dict,
    ) -> None:
        farmer_inputs.pop("income")
        with pytest.raises(InvalidEligibilityInputsError) as exc_info:
            engine.check_eligibility(schemes["farmer-income-support"], normalize_inputs(farmer_inputs))
        err = exc_info.value
        assert err.code == ErrorCode.INVALID_ELIGIBILITY_INPUTS
        assert err.missing_fields == ["income"]
        assert err.to_dict()["missing_fields"] == ["income"]

    def test_none_counts_as_missing(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        with pytest.raises(InvalidEligibilityInputsError) as exc_info:
            engine.check_eligibility(schemes["senior-pension"], {"age": None})
        assert exc_info.value.missing_fields == ["age"]

    def test_missing_fields_in_declaration_order_without_duplicates(self, engine: EligibilityEngine) -> None:
        scheme = Scheme(
            scheme_id="dup",
            name="Dup",
            criteria=[
                EligibilityCriterion(field="income", operator=CriterionOperator.LESS_THAN, value=100),
                EligibilityCriterion(field="age", operator=CriterionOperator.GREATER_THAN, value=18),
                EligibilityCriterion(field="income", operator=CriterionOperator.GREATER_THAN, value=0),
            ],
            steps=[ApplicationStep(step_number=1, question="Name?", field_type=FieldType.TEXT)],
        )
        assert engine.missing_fields(scheme, {}) == ["income", "age"]


class TestPartition:
    def test_met_and_unmet_cover_all_criteria(
        self,
        engine: EligibilityEngine,
        schemes: dict[str, Scheme],
        farmer_inputs: dict,
    ) -> None:
        scheme = schemes["farmer-income-support"]
        farmer_inputs["land_holding_acres"] = 8
        result = engine.check_eligibility(scheme, normalize_inputs(farmer_inputs))

        combined = result.met_criteria + result.unmet_criteria
        assert len(combined) == len(scheme.criteria)
        assert all(c in scheme.criteria for c in combined)
        assert not any(c in result.unmet_criteria for c in result.met_criteria), "Partition must not overlap"
        assert [c.field for c in result.unmet_criteria] == ["land_holding_acres"]

    def test_unmet_keeps_declaration_order(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        scheme = schemes["farmer-income-support"]
        inputs = normalize_inputs({"occupation": "weaver", "land_holding_acres": 2, "income": 500000})
        result = engine.check_eligibility(scheme, inputs)
        assert [c.field for c in result.unmet_criteria] == ["occupation", "income"]

    def test_type_mismatch_is_unmet_and_flagged(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(schemes["senior-pension"], normalize_inputs({"age": "seventy"}))
        assert result.eligible is False
        assert result.invalid_fields == ["age"]

    def test_no_criteria_is_eligible(self, engine: EligibilityEngine) -> None:
        scheme = Scheme(
            scheme_id="open",
            name="Open",
            steps=[ApplicationStep(step_number=1, question="Name?", field_type=FieldType.TEXT)],
        )
        assert engine.check_eligibility(scheme, {}).eligible is True

    def test_extra_inputs_are_ignored(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(
            schemes["senior-pension"],
            normalize_inputs({"age": 80, "favourite_colour": "blue"}),
        )
        assert result.eligible is True


class TestDeterminism:
    def test_repeated_checks_are_identical(
        self,
        engine: EligibilityEngine,
        schemes: dict[str, Scheme],
        farmer_inputs: dict,
    ) -> None:
        scheme = schemes["farmer-income-support"]
        inputs = normalize_inputs(farmer_inputs)
        first = engine.check_eligibility(scheme, inputs)
        for _ in range(20):
            assert engine.check_eligibility(scheme, inputs) == first

    def test_fresh_engines_agree(self, schemes: dict[str, Scheme]) -> None:
        inputs = normalize_inputs({"gender": "female", "age": 7})
        results = {
            EligibilityEngine().check_eligibility(schemes["girl-child-savings"], inputs).eligible for _ in range(5)
        }
        assert results == {True}


# ---------------------------------------------------------------------------
# Explanations
# ---------------------------------------------------------------------------


class TestExplanation:
    def test_english_eligible(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(schemes["senior-pension"], normalize_inputs({"age": 70}))
        text = engine.generate_explanation(result, "en", "Senior Citizen Pension")
        assert text.startswith("You are eligible for Senior Citizen Pension")

    def test_english_ineligible_lists_unmet(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(schemes["senior-pension"], normalize_inputs({"age": 50}))
        text = engine.generate_explanation(result, "en")
        assert "not eligible" in text
        assert "Applicant must be at least 65 years old" in text

    def test_hindi(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(schemes["senior-pension"], normalize_inputs({"age": 50}))
        text = engine.generate_explanation(result, "hi", "वरिष्ठ नागरिक पेंशन")
        assert "पात्र नहीं" in text

    def test_unknown_language_falls_back_to_english(self) -> None:
        result = EligibilityResult(scheme_id="s")
        text = EligibilityEngine.generate_explanation(result, "xx")
        assert text.startswith("You are eligible for s")

    def test_language_without_templates_falls_back_to_english(self) -> None:
        result = EligibilityResult(scheme_id="s")
        assert EligibilityEngine.generate_explanation(result, "ta").startswith("You are eligible")

    def test_invalid_fields_mentioned(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(schemes["senior-pension"], normalize_inputs({"age": "old"}))
        assert "age" in engine.generate_explanation(result).splitlines()[-1]

    def test_explanation_does_not_change_result(self, engine: EligibilityEngine, schemes: dict[str, Scheme]) -> None:
        result = engine.check_eligibility(schemes["senior-pension"], normalize_inputs({"age": 50}))
        before = result.model_dump()
        engine.generate_explanation(result, "hi")
        assert result.model_dump() == before
