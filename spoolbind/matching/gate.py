"""Completion gate for job submission."""

from typing import List

from spoolbind.jobs.models import MaterialBinding
from spoolbind.matching.errors import (
    IncompleteMappingError,
    StationLoadingError,
    SubmissionInProgressError,
)
from spoolbind.matching.session import MatchingSession, SessionState


def can_submit(session: MatchingSession) -> bool:
    """Submit control should be enabled."""
    return session.state == SessionState.READY and session.is_complete()


def freeze_bindings(session: MatchingSession) -> List[MaterialBinding]:
    """Binding set as a list ordered by tool id."""
    return [session.bindings[tool_id] for tool_id in sorted(session.bindings)]


def check_submittable(session: MatchingSession) -> List[MaterialBinding]:
    """
    Gate a submission. Only a Ready session with every tool bound passes.

    Returns:
        The frozen binding list to hand to the executor

    Raises:
        SubmissionInProgressError: a submission is already outstanding
        StationLoadingError: the station snapshot has not resolved yet
        IncompleteMappingError: some tool has no binding
    """
    if session.state == SessionState.SUBMITTING:
        raise SubmissionInProgressError("The job is already being started.")
    if session.state == SessionState.LOADING:
        raise StationLoadingError(
            "Material station status is still loading. Try again in a moment."
        )
    if not session.is_complete():
        raise IncompleteMappingError("Map every tool to a material slot before starting the job.")
    return freeze_bindings(session)
