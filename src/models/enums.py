from __future__ import annotations

from enum import StrEnum


class CriterionOperator(StrEnum):
    """Closed set of comparison operators an eligibility criterion may use."""

    __slots__ = ()

    EQUALS = "equals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    BETWEEN = "between"
    IN = "in"


class FieldType(StrEnum):
    __slots__ = ()

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    DATE = "date"


class ApplicationState(StrEnum):
    __slots__ = ()

    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class TrackingStatus(StrEnum):
    """Post-submission states, owned by the status tracker."""

    __slots__ = ()

    SUBMITTED = "Submitted"
    UNDER_REVIEW = "Under Review"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class DocumentCategory(StrEnum):
    __slots__ = ()

    IDENTITY = "identity"
    ADDRESS = "address"
    INCOME = "income"
    CASTE = "caste"
    AGE = "age"
    BANK = "bank"
    LAND = "land"
    PHOTO = "photo"
    OTHER = "other"


class ConversationRole(StrEnum):
    __slots__ = ()

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
