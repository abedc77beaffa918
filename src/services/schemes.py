"""Scheme-facing operations used by the API layer.

Composes the catalog, the eligibility engine and the document selector,
converting plain JSON inputs into tagged values on the way in and firing
analytics hooks on the way out.
"""

from __future__ import annotations

from typing import Any

import structlog

from src.errors import ValidationFailedError
from src.models.scheme import Document, Scheme, SchemeCategory
from src.models.values import UntaggableValueError, normalize_inputs
from src.services.analytics import AnalyticsSink, notify
from src.services.catalog import SchemeCatalog
from src.services.documents import DocumentSelector
from src.services.eligibility import EligibilityEngine, EligibilityResult, TaggedInputs

logger = structlog.get_logger(__name__)


def _tag(raw_inputs: dict[str, Any] | None) -> TaggedInputs:
    try:
        return normalize_inputs(raw_inputs)
    except UntaggableValueError as exc:
        raise ValidationFailedError(exc.field, str(exc)) from exc


class SchemeService:
    __slots__ = ("_analytics", "_catalog", "_engine", "_selector")

    def __init__(
        self,
        catalog: SchemeCatalog,
        engine: EligibilityEngine | None = None,
        selector: DocumentSelector | None = None,
        analytics: AnalyticsSink | None = None,
    ) -> None:
        self._catalog = catalog
        self._engine = engine or EligibilityEngine()
        self._selector = selector or DocumentSelector()
        self._analytics = analytics

    @property
    def catalog(self) -> SchemeCatalog:
        return self._catalog

    def get_scheme(self, scheme_id: str) -> Scheme:
        scheme = self._catalog.get_scheme(scheme_id)
        notify(self._analytics, "scheme_viewed", scheme_id)
        return scheme

    def list_schemes(self, category: SchemeCategory | str | None = None) -> list[Scheme]:
        return self._catalog.list_schemes(category)

    def check_eligibility(self, scheme_id: str, raw_inputs: dict[str, Any] | None) -> EligibilityResult:
        """Tag *raw_inputs* and evaluate them against the scheme's criteria.

        Raises
        ------
        SchemeNotFoundError
            For an unknown or inactive scheme.
        ValidationFailedError
            If an input value cannot be represented as a tagged value.
        InvalidEligibilityInputsError
            If a criterion's field is absent from the inputs.
        """
        scheme = self._catalog.get_scheme(scheme_id)
        result = self._engine.check_eligibility(scheme, _tag(raw_inputs))
        notify(self._analytics, "eligibility_checked", scheme_id, result.eligible)
        return result

    def explain(self, scheme_id: str, result: EligibilityResult, language: str = "en") -> str:
        scheme = self._catalog.get_scheme(scheme_id, include_inactive=True)
        return self._engine.generate_explanation(result, language, scheme.localized_name(language))

    def select_documents(self, scheme_id: str, raw_inputs: dict[str, Any] | None = None) -> list[Document]:
        scheme = self._catalog.get_scheme(scheme_id)
        return self._selector.select_documents(scheme, _tag(raw_inputs))
