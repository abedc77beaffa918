"""Scheme endpoints: catalog browsing, eligibility checks and document checklists."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from src.errors import ValidationFailedError
from src.models.scheme import ApplicationStep, Document, EligibilityCriterion, Scheme, SchemeCategory
from src.services.schemes import SchemeService

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/schemes", tags=["schemes"])


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------


class SchemeSummary(BaseModel):
    scheme_id: str
    name: str
    category: str
    ministry: str
    total_steps: int


class SchemeListResponse(BaseModel):
    schemes: list[SchemeSummary]
    total: int


class SchemeDetailResponse(BaseModel):
    """Full detail of a single scheme, localised to the requested language."""

    scheme_id: str
    name: str
    description: str
    category: str
    ministry: str
    criteria: list[EligibilityCriterion]
    steps: list[ApplicationStep]
    documents: list[Document]
    helpline: str | None
    website: str | None


class EligibilityRequest(BaseModel):
    inputs: dict[str, Any] = Field(default_factory=dict)
    language: str = "en"


class EligibilityResponse(BaseModel):
    scheme_id: str
    eligible: bool
    met_criteria: list[EligibilityCriterion]
    unmet_criteria: list[EligibilityCriterion]
    invalid_fields: list[str]
    explanation: str


class DocumentsRequest(BaseModel):
    inputs: dict[str, Any] | None = None


class DocumentsResponse(BaseModel):
    scheme_id: str
    documents: list[Document]
    total: int


def _service(request: Request) -> SchemeService:
    return request.app.state.scheme_service


def _localized_steps(scheme: Scheme, lang: str) -> list[ApplicationStep]:
    return [s.model_copy(update={"question": s.localized_question(lang)}) for s in scheme.steps]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=SchemeListResponse)
async def list_schemes(
    request: Request,
    category: str | None = Query(default=None, description="Filter by scheme category"),
    lang: str = Query(default="en", description="Language for scheme names"),
) -> SchemeListResponse:
    """List active schemes, optionally filtered by category."""
    cat_enum: SchemeCategory | None = None
    if category:
        try:
            cat_enum = SchemeCategory(category)
        except ValueError:
            raise ValidationFailedError(
                "category",
                f"Invalid category '{category}'. Valid categories: {[c.value for c in SchemeCategory]}",
            ) from None

    schemes = _service(request).list_schemes(cat_enum)
    return SchemeListResponse(
        schemes=[
            SchemeSummary(
                scheme_id=s.scheme_id,
                name=s.localized_name(lang),
                category=s.category.value,
                ministry=s.ministry,
                total_steps=s.total_steps,
            )
            for s in schemes
        ],
        total=len(schemes),
    )


@router.get("/{scheme_id}", response_model=SchemeDetailResponse)
async def get_scheme(
    request: Request,
    scheme_id: str,
    lang: str = Query(default="en", description="Language for names and questions"),
) -> SchemeDetailResponse:
    scheme = _service(request).get_scheme(scheme_id)
    return SchemeDetailResponse(
        scheme_id=scheme.scheme_id,
        name=scheme.localized_name(lang),
        description=scheme.localized_description(lang),
        category=scheme.category.value,
        ministry=scheme.ministry,
        criteria=scheme.criteria,
        steps=_localized_steps(scheme, lang),
        documents=scheme.documents,
        helpline=scheme.helpline,
        website=scheme.website,
    )


@router.post("/{scheme_id}/eligibility", response_model=EligibilityResponse)
async def check_eligibility(request: Request, scheme_id: str, body: EligibilityRequest) -> EligibilityResponse:
    """Evaluate the supplied inputs against every criterion of the scheme.

    An ineligible verdict is a normal 200 response; missing inputs are a
    422 ``INVALID_ELIGIBILITY_INPUTS`` listing the absent fields.
    """
    service = _service(request)
    result = service.check_eligibility(scheme_id, body.inputs)
    return EligibilityResponse(
        scheme_id=result.scheme_id,
        eligible=result.eligible,
        met_criteria=result.met_criteria,
        unmet_criteria=result.unmet_criteria,
        invalid_fields=result.invalid_fields,
        explanation=service.explain(scheme_id, result, body.language),
    )


@router.post("/{scheme_id}/documents", response_model=DocumentsResponse)
async def select_documents(request: Request, scheme_id: str, body: DocumentsRequest) -> DocumentsResponse:
    documents = _service(request).select_documents(scheme_id, body.inputs)
    return DocumentsResponse(scheme_id=scheme_id, documents=documents, total=len(documents))
