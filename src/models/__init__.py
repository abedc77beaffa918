from src.models.application import Application, ApplicationStatus
from src.models.enums import (
    ApplicationState,
    ConversationRole,
    CriterionOperator,
    DocumentCategory,
    FieldType,
    TrackingStatus,
)
from src.models.scheme import (
    ApplicationStep,
    Document,
    EligibilityCriterion,
    Scheme,
    SchemeCategory,
    ValidationRule,
    ValueRange,
)
from src.models.session import ConversationTurn, Session
from src.models.values import (
    DateValue,
    NumberValue,
    SelectValue,
    TextValue,
    UntaggableValueError,
    UserValue,
    normalize_inputs,
    to_user_value,
)

__all__ = [
    "Application",
    "ApplicationState",
    "ApplicationStatus",
    "ApplicationStep",
    "ConversationRole",
    "ConversationTurn",
    "CriterionOperator",
    "DateValue",
    "Document",
    "DocumentCategory",
    "EligibilityCriterion",
    "FieldType",
    "NumberValue",
    "Scheme",
    "SchemeCategory",
    "SelectValue",
    "Session",
    "TextValue",
    "TrackingStatus",
    "UntaggableValueError",
    "UserValue",
    "ValidationRule",
    "ValueRange",
    "normalize_inputs",
    "to_user_value",
]
