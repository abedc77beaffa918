"""Tailored document checklists.

A scheme's document list is filtered by each document's applicability
conditions, evaluated with the same fail-closed evaluator the eligibility
engine uses.  A condition whose field the user has not supplied is
treated as "may apply": the document stays on the checklist so nothing
the applicant might need is hidden.
"""

from __future__ import annotations

import structlog

from src.models.scheme import Document, Scheme
from src.services.criteria import CriterionEvaluator, CriterionOutcome
from src.services.eligibility import TaggedInputs

logger = structlog.get_logger(__name__)

_EXCLUDING_OUTCOMES = frozenset({CriterionOutcome.UNMET, CriterionOutcome.INVALID})


class DocumentSelector:
    __slots__ = ("_evaluator",)

    def __init__(self, evaluator: CriterionEvaluator | None = None) -> None:
        self._evaluator = evaluator or CriterionEvaluator()

    def applies(self, document: Document, user_inputs: TaggedInputs) -> bool:
        return not any(
            self._evaluator.assess(condition, user_inputs.get(condition.field)) in _EXCLUDING_OUTCOMES
            for condition in document.conditions
        )

    def select_documents(self, scheme: Scheme, user_inputs: TaggedInputs | None = None) -> list[Document]:
        """Return the documents of *scheme* that apply to *user_inputs*, in catalog order.

        With no inputs the full baseline checklist is returned.
        """
        if not user_inputs:
            return list(scheme.documents)

        selected = [doc for doc in scheme.documents if self.applies(doc, user_inputs)]
        logger.debug(
            "documents.selected",
            scheme_id=scheme.scheme_id,
            selected=len(selected),
            total=len(scheme.documents),
        )
        return selected
