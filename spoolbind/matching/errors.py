"""Errors raised or surfaced by the material matching workflow."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of matching failures."""
    NOT_APPLICABLE = "not_applicable"
    SELECTION_REQUIRED = "selection_required"
    EMPTY_SLOT = "empty_slot"
    UNKNOWN_TOOL = "unknown_tool"
    MATERIAL_MISMATCH = "material_mismatch"
    SLOT_ALREADY_ASSIGNED = "slot_already_assigned"
    FETCH_FAILURE = "fetch_failure"
    INCOMPLETE_MAPPING = "incomplete_mapping"
    STATION_LOADING = "station_loading"
    SUBMISSION_IN_PROGRESS = "submission_in_progress"
    SUBMISSION_FAILURE = "submission_failure"
    NO_SESSION = "no_session"


class MatchingError(Exception):
    """Base class for matching errors; ``str(err)`` is operator-facing."""

    kind: ErrorKind = ErrorKind.NO_SESSION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotApplicableError(MatchingError):
    """Job has no multi-material metadata; the workflow cannot open."""
    kind = ErrorKind.NOT_APPLICABLE


class SelectionRequiredError(MatchingError):
    kind = ErrorKind.SELECTION_REQUIRED


class EmptySlotError(MatchingError):
    kind = ErrorKind.EMPTY_SLOT


class UnknownToolError(MatchingError):
    kind = ErrorKind.UNKNOWN_TOOL


class MaterialMismatchError(MatchingError):
    kind = ErrorKind.MATERIAL_MISMATCH


class SlotAlreadyAssignedError(MatchingError):
    kind = ErrorKind.SLOT_ALREADY_ASSIGNED


class FetchFailureError(MatchingError):
    kind = ErrorKind.FETCH_FAILURE


class IncompleteMappingError(MatchingError):
    kind = ErrorKind.INCOMPLETE_MAPPING


class StationLoadingError(MatchingError):
    """Submit attempted before the station snapshot has resolved."""
    kind = ErrorKind.STATION_LOADING


class SubmissionInProgressError(MatchingError):
    kind = ErrorKind.SUBMISSION_IN_PROGRESS


class SubmissionFailureError(MatchingError):
    kind = ErrorKind.SUBMISSION_FAILURE


class NoSessionError(MatchingError):
    """Operation called while no session is open."""
    kind = ErrorKind.NO_SESSION
