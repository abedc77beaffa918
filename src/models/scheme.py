from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator, model_validator

from src.models.enums import CriterionOperator, DocumentCategory, FieldType
from src.models.values import parse_iso_date


class SchemeCategory(StrEnum):
    __slots__ = ()

    AGRICULTURE = "agriculture"
    HEALTH = "health"
    EDUCATION = "education"
    HOUSING = "housing"
    EMPLOYMENT = "employment"
    SOCIAL_SECURITY = "social_security"
    FINANCIAL_INCLUSION = "financial_inclusion"
    WOMEN_CHILD = "women_child"
    TRIBAL = "tribal"
    DISABILITY = "disability"
    SENIOR_CITIZEN = "senior_citizen"
    SKILL_DEVELOPMENT = "skill_development"
    OTHER = "other"


Scalar = StrictInt | StrictFloat | StrictStr | date

_ORDERING_OPERATORS: Final[frozenset[CriterionOperator]] = frozenset({
    CriterionOperator.GREATER_THAN,
    CriterionOperator.LESS_THAN,
    CriterionOperator.GREATER_THAN_OR_EQUAL,
    CriterionOperator.LESS_THAN_OR_EQUAL,
})


def _as_date_if_iso(value: object) -> object:
    if isinstance(value, str):
        parsed = parse_iso_date(value)
        if parsed is not None:
            return parsed
    return value


class ValueRange(BaseModel):
    """Inclusive numeric range used by ``between`` criteria."""

    model_config = ConfigDict(frozen=True)

    min: StrictInt | StrictFloat
    max: StrictInt | StrictFloat

    @model_validator(mode="after")
    def _ordered(self) -> ValueRange:
        if self.min > self.max:
            raise ValueError(f"range min {self.min} exceeds max {self.max}")
        return self


class EligibilityCriterion(BaseModel):
    """One eligibility rule: ``<field> <operator> <value>``."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    operator: CriterionOperator
    value: ValueRange | list[Scalar] | Scalar
    description: str = ""

    @field_validator("value")
    @classmethod
    def _iso_strings_are_dates(cls, value: ValueRange | list[Scalar] | Scalar) -> ValueRange | list[Scalar] | Scalar:
        # Inputs tag ISO strings as dates, so criterion values must match.
        if isinstance(value, list):
            return [_as_date_if_iso(member) for member in value]
        return _as_date_if_iso(value)

    @model_validator(mode="after")
    def _value_matches_operator(self) -> EligibilityCriterion:
        op = self.operator
        if op == CriterionOperator.BETWEEN and not isinstance(self.value, ValueRange):
            raise ValueError("'between' requires a {min, max} range")
        if op == CriterionOperator.IN and not isinstance(self.value, list):
            raise ValueError("'in' requires a list of values")
        if op in _ORDERING_OPERATORS and (
            isinstance(self.value, bool) or not isinstance(self.value, int | float)
        ):
            raise ValueError(f"'{op}' requires a numeric value")
        if op == CriterionOperator.EQUALS and isinstance(self.value, ValueRange | list):
            raise ValueError("'equals' requires a single value")
        return self


_CATEGORY_ICONS: Final[dict[DocumentCategory, str]] = {
    DocumentCategory.IDENTITY: "id-card",
    DocumentCategory.ADDRESS: "home",
    DocumentCategory.INCOME: "rupee",
    DocumentCategory.CASTE: "certificate",
    DocumentCategory.AGE: "calendar",
    DocumentCategory.BANK: "bank",
    DocumentCategory.LAND: "map",
    DocumentCategory.PHOTO: "camera",
    DocumentCategory.OTHER: "file",
}


class Document(BaseModel):
    """A document an applicant may need to furnish.

    ``conditions`` is the applicability predicate: every criterion must hold
    for the document to be part of a tailored checklist.  Documents without
    conditions always apply.
    """

    document_id: str
    name: str
    description: str = ""
    category: DocumentCategory = DocumentCategory.OTHER
    icon: str = ""
    required: bool = True
    conditions: list[EligibilityCriterion] = Field(default_factory=list)

    @model_validator(mode="after")
    def _default_icon(self) -> Document:
        if not self.icon:
            self.icon = _CATEGORY_ICONS[self.category]
        return self


class ValidationRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_value: float | None = None
    max_value: float | None = None
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=1)
    pattern: str | None = None


class ApplicationStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_number: int = Field(ge=1)
    question: str
    question_translations: dict[str, str] = Field(default_factory=dict)
    field_type: FieldType
    options: list[str] | None = None
    validation_rule: ValidationRule | None = None

    @model_validator(mode="after")
    def _select_has_options(self) -> ApplicationStep:
        if self.field_type == FieldType.SELECT and not self.options:
            raise ValueError(f"select step {self.step_number} must declare options")
        return self

    def localized_question(self, language: str) -> str:
        return self.question_translations.get(language, self.question)


class Scheme(BaseModel):
    """Catalog entry for a government scheme.

    Owned by the catalog; the engine only reads it.  ``criteria`` and
    ``steps`` keep their declaration order, which drives the order of
    unmet-criteria reporting and of the application flow.
    """

    model_config = {"populate_by_name": True}

    scheme_id: str
    name: str
    name_translations: dict[str, str] = Field(default_factory=dict)
    description: str = ""
    description_translations: dict[str, str] = Field(default_factory=dict)
    category: SchemeCategory = SchemeCategory.OTHER
    ministry: str = ""
    criteria: list[EligibilityCriterion] = Field(default_factory=list)
    steps: list[ApplicationStep] = Field(min_length=1)
    documents: list[Document] = Field(default_factory=list)
    active: bool = True
    helpline: str | None = None
    website: str | None = None

    @model_validator(mode="after")
    def _steps_contiguous(self) -> Scheme:
        numbers = [s.step_number for s in self.steps]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(f"steps must be numbered 1..{len(numbers)} in order, got {numbers}")
        return self

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step(self, step_number: int) -> ApplicationStep | None:
        if 1 <= step_number <= len(self.steps):
            return self.steps[step_number - 1]
        return None

    def localized_name(self, language: str) -> str:
        return self.name_translations.get(language, self.name)

    def localized_description(self, language: str) -> str:
        return self.description_translations.get(language, self.description)
