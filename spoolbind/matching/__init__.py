"""Tool-to-slot material matching for multi-material jobs."""

from spoolbind.matching.errors import (
    ErrorKind,
    MatchingError,
    NotApplicableError,
    SelectionRequiredError,
    EmptySlotError,
    UnknownToolError,
    MaterialMismatchError,
    SlotAlreadyAssignedError,
    FetchFailureError,
    IncompleteMappingError,
    StationLoadingError,
    SubmissionInProgressError,
    SubmissionFailureError,
    NoSessionError,
)
from spoolbind.matching.validator import (
    materials_match,
    colors_differ,
    validate_binding,
)
from spoolbind.matching.advisory import ColorAdvisory, check_color
from spoolbind.matching.session import (
    MatchingSession,
    Outcome,
    SessionState,
)
from spoolbind.matching.sinks import (
    NotificationSink,
    RenderSink,
    Severity,
)
from spoolbind.matching.workflow import MaterialMatchingWorkflow

__all__ = [
    # Errors
    "ErrorKind",
    "MatchingError",
    "NotApplicableError",
    "SelectionRequiredError",
    "EmptySlotError",
    "UnknownToolError",
    "MaterialMismatchError",
    "SlotAlreadyAssignedError",
    "FetchFailureError",
    "IncompleteMappingError",
    "StationLoadingError",
    "SubmissionInProgressError",
    "SubmissionFailureError",
    "NoSessionError",
    # Validation
    "materials_match",
    "colors_differ",
    "validate_binding",
    "ColorAdvisory",
    "check_color",
    # Session
    "MatchingSession",
    "Outcome",
    "SessionState",
    # Sinks
    "NotificationSink",
    "RenderSink",
    "Severity",
    # Workflow
    "MaterialMatchingWorkflow",
]
