"""
Matching session state.

A MatchingSession is immutable; every operation returns a new session
together with an Outcome describing what happened. The workflow
controller owns the current session and dispatches to the render sink
after each operation, so these functions never touch a UI.

States::

    Closed --open--> Loading --fetch resolves--> Ready
    Ready --select/bind/remove/refresh--> Ready
    Ready --submit--> Submitting --success--> Closed
                                 --failure--> Ready
    Loading|Ready --close--> Closed
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple
from uuid import uuid4

from spoolbind.jobs.models import JobFile, MaterialBinding
from spoolbind.matching.advisory import ColorAdvisory, check_color
from spoolbind.matching.errors import MatchingError, NotApplicableError, SubmissionInProgressError
from spoolbind.matching.validator import validate_binding
from spoolbind.station.models import SlotState, StationSnapshot


class SessionState(str, Enum):
    """Lifecycle state of a matching session."""
    CLOSED = "closed"
    LOADING = "loading"  # Station fetch in flight
    READY = "ready"
    SUBMITTING = "submitting"  # Job start in flight


@dataclass(frozen=True)
class MatchingSession:
    """Transient state for provisioning one job."""
    job: JobFile
    session_id: str = field(default_factory=lambda: str(uuid4())[:8])
    state: SessionState = SessionState.LOADING
    station: Optional[StationSnapshot] = None
    selected_tool_id: Optional[int] = None
    bindings: Dict[int, MaterialBinding] = field(default_factory=dict)
    leveling: bool = False

    @property
    def required_count(self) -> int:
        return self.job.tool_count

    @property
    def is_editable(self) -> bool:
        return self.state in (SessionState.LOADING, SessionState.READY)

    def is_complete(self) -> bool:
        """True iff every tool requirement has a binding."""
        return len(self.bindings) == self.required_count

    def binding_for(self, tool_id: int) -> Optional[MaterialBinding]:
        return self.bindings.get(tool_id)


@dataclass(frozen=True)
class Outcome:
    """Result of a session operation."""
    error: Optional[MatchingError] = None
    binding: Optional[MaterialBinding] = None
    advisory: Optional[ColorAdvisory] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def open_session(job: JobFile, leveling: bool = False) -> MatchingSession:
    """
    Start a session for ``job``.

    Raises:
        NotApplicableError: if the job has no multi-material metadata or no tools
    """
    if not job.is_multi_material():
        raise NotApplicableError("Material matching is not available for this job.")
    return MatchingSession(job=job, leveling=leveling)


def apply_snapshot(session: MatchingSession, snapshot: Optional[StationSnapshot]) -> MatchingSession:
    """Record a fetched snapshot; a session still loading becomes ready."""
    state = SessionState.READY if session.state == SessionState.LOADING else session.state
    return replace(session, station=snapshot, state=state)


def select_tool(session: MatchingSession, tool_id: int) -> MatchingSession:
    """Toggle the tool selection."""
    if not session.is_editable:
        return session
    if session.selected_tool_id == tool_id:
        return replace(session, selected_tool_id=None)
    return replace(session, selected_tool_id=tool_id)


def select_slot(session: MatchingSession, slot: SlotState) -> Tuple[MatchingSession, Outcome]:
    """
    Bind the selected tool to ``slot``.

    On success the binding is upserted (a tool moved to a new slot frees its
    old one), the selection cleared and the color advisory computed. On
    failure the session is returned unchanged.
    """
    if not session.is_editable:
        error = SubmissionInProgressError("Mappings cannot change while the job is starting.")
        return session, Outcome(error=error)

    try:
        binding = validate_binding(session.job, session.bindings, session.selected_tool_id, slot)
    except MatchingError as e:
        return session, Outcome(error=e)

    tool = session.job.get_tool(binding.tool_id)
    advisory = check_color(tool, slot)

    bindings = dict(session.bindings)
    bindings[binding.tool_id] = binding
    updated = replace(session, bindings=bindings, selected_tool_id=None)
    return updated, Outcome(binding=binding, advisory=advisory)


def remove_mapping(session: MatchingSession, tool_id: int) -> MatchingSession:
    """Drop the binding for ``tool_id`` if present; selection is kept."""
    if tool_id not in session.bindings or not session.is_editable:
        return session
    bindings = {k: v for k, v in session.bindings.items() if k != tool_id}
    return replace(session, bindings=bindings)


def with_state(session: MatchingSession, state: SessionState) -> MatchingSession:
    return replace(session, state=state)
