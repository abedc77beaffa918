"""Saathi service layer: eligibility, documents, applications, sessions and tracking."""

from __future__ import annotations

from src.services.analytics import AnalyticsSink, InMemoryAnalytics, notify
from src.services.applications import (
    ApplicationService,
    ProgressResult,
    StartedApplication,
    SubmissionResult,
)
from src.services.catalog import SchemeCatalog
from src.services.criteria import CriterionEvaluator, CriterionOutcome
from src.services.documents import DocumentSelector
from src.services.eligibility import EligibilityEngine, EligibilityResult
from src.services.schemes import SchemeService
from src.services.sessions import SessionManager
from src.services.status_tracker import StatusTracker
from src.services.store import (
    ApplicationStore,
    InMemoryApplicationStore,
    InMemorySessionStore,
    KeyedLocks,
    SessionStore,
)
from src.services.tracking import TrackingReferenceGenerator

__all__ = [
    "AnalyticsSink",
    "ApplicationService",
    "ApplicationStore",
    "CriterionEvaluator",
    "CriterionOutcome",
    "DocumentSelector",
    "EligibilityEngine",
    "EligibilityResult",
    "InMemoryAnalytics",
    "InMemoryApplicationStore",
    "InMemorySessionStore",
    "KeyedLocks",
    "ProgressResult",
    "SchemeCatalog",
    "SchemeService",
    "SessionManager",
    "SessionStore",
    "StartedApplication",
    "StatusTracker",
    "SubmissionResult",
    "TrackingReferenceGenerator",
    "notify",
]
