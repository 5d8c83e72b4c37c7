"""
Material matching workflow controller.

Owns the current MatchingSession and runs the operator-facing operations:
open, select tool, select slot, remove mapping, submit and close. Every
state change is followed by a single dispatch to the render sink; every
validation outcome is pushed to the notification sink.

Two operations await: the station fetch and the job start. A fetch result
is applied only if the session that issued it is still the current one,
so closing or reopening while a fetch is in flight never corrupts state.

Usage:
    workflow = MaterialMatchingWorkflow(create_station_provider(), create_job_executor())
    await workflow.open(job)
    workflow.select_tool(0)
    workflow.select_slot(workflow.find_slot(1))
    await workflow.submit()
"""

from typing import Optional

from spoolbind.config import Settings, get_settings
from spoolbind.jobs.executor import JobStartError, JobStartExecutor, JobStartResult
from spoolbind.jobs.models import JobFile
from spoolbind.matching import gate
from spoolbind.matching import session as ops
from spoolbind.matching.errors import (
    FetchFailureError,
    MatchingError,
    NoSessionError,
    NotApplicableError,
    SubmissionFailureError,
    SubmissionInProgressError,
)
from spoolbind.matching.session import MatchingSession, Outcome, SessionState
from spoolbind.matching.sinks import (
    NotificationSink,
    NullNotificationSink,
    NullRenderSink,
    RenderSink,
    Severity,
    SlotListView,
    build_binding_views,
    build_slot_views,
    build_tool_views,
)
from spoolbind.station.models import SlotState, StationSnapshot
from spoolbind.station.provider import StationProvider, StationUnavailableError
from spoolbind.utils import get_logger

logger = get_logger("matching.workflow")


class MaterialMatchingWorkflow:
    """Drives one job's tool-to-slot matching from open to job start."""

    def __init__(
        self,
        provider: StationProvider,
        executor: JobStartExecutor,
        notifications: Optional[NotificationSink] = None,
        renderer: Optional[RenderSink] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the workflow.

        Args:
            provider: Source of material station snapshots
            executor: Starts the job once every tool is bound
            notifications: Receives errors, warnings and toasts
            renderer: Receives views after each state change
            settings: Defaults for context id and leveling
        """
        self.provider = provider
        self.executor = executor
        self.notifications = notifications or NullNotificationSink()
        self.renderer = renderer or NullRenderSink()
        self.settings = settings or get_settings()
        self._session: Optional[MatchingSession] = None

    @property
    def session(self) -> Optional[MatchingSession]:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state if self._session else SessionState.CLOSED

    def is_complete(self) -> bool:
        return self._session is not None and self._session.is_complete()

    def find_slot(self, display_id: int) -> Optional[SlotState]:
        """Slot with the given display id in the current snapshot."""
        if self._session is None or self._session.station is None:
            return None
        return self._session.station.get_slot(display_id)

    # -- lifecycle ---------------------------------------------------------

    async def open(self, job: JobFile, leveling: Optional[bool] = None) -> MatchingSession:
        """
        Open a session for ``job`` and fetch the station snapshot.

        Any session already open is discarded, unless its job is being
        started; that session is kept and the call is rejected.

        Raises:
            SubmissionInProgressError: the current session is submitting
            NotApplicableError: job has no multi-material tool metadata
        """
        if self._session is not None and self._session.state == SessionState.SUBMITTING:
            error = SubmissionInProgressError(
                "Cannot open another job while the current job is starting."
            )
            logger.warning(f"Rejected open of {job.file_name} while a job is starting")
            self.notifications.show_error(str(error))
            raise error

        self._session = None
        try:
            session = ops.open_session(
                job, leveling=self.settings.leveling if leveling is None else leveling
            )
        except NotApplicableError as e:
            logger.info(f"Material matching not applicable for {job.file_name}")
            self.notifications.toast(str(e), Severity.ERROR)
            self._dispatch()
            raise

        self._session = session
        logger.info(
            f"Opened matching session {session.session_id} for {job.name} "
            f"({job.tool_count} tools)"
        )
        self.notifications.clear_messages()
        self._dispatch()

        await self._fetch_station(session.session_id)
        return self._session or session

    def close(self) -> bool:
        """
        Discard the session.

        Returns:
            False if a job start is in flight and the session was kept
        """
        if self._session is None:
            return True
        if self._session.state == SessionState.SUBMITTING:
            logger.warning("Cannot close matching session while the job is starting")
            return False
        logger.info(f"Closed matching session {self._session.session_id}")
        self._session = None
        self.notifications.clear_messages()
        self._dispatch()
        return True

    def reset(self) -> bool:
        return self.close()

    async def refresh_station(self) -> Optional[StationSnapshot]:
        """Re-fetch the snapshot for the current session in place."""
        if self._session is None:
            return None
        return await self._fetch_station(self._session.session_id)

    async def _fetch_station(self, session_id: str) -> Optional[StationSnapshot]:
        error: Optional[str] = None
        try:
            snapshot = await self.provider.fetch(self.settings.context_id)
        except StationUnavailableError as e:
            snapshot, error = None, str(e)
        except Exception as e:
            logger.exception(f"Unexpected error fetching material station: {e}")
            snapshot, error = None, "Failed to load material station status."

        current = self._session
        if current is None or current.session_id != session_id:
            logger.debug(f"Discarding station snapshot for stale session {session_id}")
            return None

        self._session = ops.apply_snapshot(current, snapshot)
        self._dispatch()

        if snapshot is None or not snapshot.connected:
            failure = FetchFailureError(
                error
                or (snapshot.error_message if snapshot else None)
                or "Material station not connected."
            )
            logger.warning(f"Material station unavailable: {failure}")
            self.notifications.show_error(str(failure))
        else:
            logger.debug(
                f"Station snapshot: {len(snapshot.slots)} slots, status {snapshot.status.value}"
            )
        return snapshot

    # -- operator actions --------------------------------------------------

    def select_tool(self, tool_id: int) -> Optional[int]:
        """
        Toggle selection of ``tool_id``.

        Returns:
            The selected tool id afterwards (None if cleared)
        """
        if self._session is None:
            return None
        self._session = ops.select_tool(self._session, tool_id)
        self.notifications.clear_messages()
        self._dispatch()
        return self._session.selected_tool_id

    def select_slot(self, slot: SlotState) -> Outcome:
        """Bind the selected tool to ``slot``; failures are surfaced, not raised."""
        if self._session is None:
            return Outcome(error=NoSessionError("No material matching session is open."))

        updated, outcome = ops.select_slot(self._session, slot)
        if not outcome.ok:
            logger.debug(f"Rejected slot {slot.display_id}: {outcome.error.kind.value}")
            self.notifications.show_error(str(outcome.error))
            return outcome

        self._session = updated
        binding = outcome.binding
        logger.debug(f"Bound tool {binding.tool_id} to slot {binding.slot_id}")
        if outcome.advisory:
            logger.info(outcome.advisory.message)
            self.notifications.show_warning(outcome.advisory.message)
        else:
            self.notifications.clear_messages()
        self._dispatch()
        return outcome

    def remove_mapping(self, tool_id: int) -> bool:
        """Remove the binding for ``tool_id``; returns True if one existed."""
        if self._session is None:
            return False
        updated = ops.remove_mapping(self._session, tool_id)
        removed = updated is not self._session
        self._session = updated
        self.notifications.clear_messages()
        self._dispatch()
        return removed

    async def submit(self) -> bool:
        """
        Start the job with the current bindings.

        Only one submission may be in flight per session. On success the
        session is closed; on failure it returns to Ready with bindings
        intact so the operator can retry.

        Returns:
            True if the job was started
        """
        if self._session is None:
            return False

        try:
            bindings = gate.check_submittable(self._session)
        except MatchingError as e:
            self.notifications.show_error(str(e))
            return False

        session = ops.with_state(self._session, SessionState.SUBMITTING)
        self._session = session
        self._dispatch()
        logger.info(f"Starting {session.job.file_name} with {len(bindings)} material mappings")

        result: Optional[JobStartResult] = None
        try:
            result = await self.executor.start(session.job.file_name, session.leveling, bindings)
        except JobStartError as e:
            result = JobStartResult(success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error starting {session.job.file_name}: {e}")
            result = JobStartResult(success=False, error=f"Failed to start print: {e}")
        finally:
            if result is None:
                # Cancelled mid-flight
                self._release_submission(session)

        current = self._session
        if current is None or current.session_id != session.session_id:
            logger.warning(f"Job start result for stale session {session.session_id} dropped")
            return result.success

        if result.success:
            self.notifications.toast(result.message or "Print job started", Severity.SUCCESS)
            self._session = None
            logger.info(f"Job started, closed matching session {session.session_id}")
            self.notifications.clear_messages()
            self._dispatch()
            return True

        failure = SubmissionFailureError(result.error or "Failed to start print")
        logger.error(f"Job start failed: {failure}")
        self._session = ops.with_state(current, SessionState.READY)
        self.notifications.toast(str(failure), Severity.ERROR)
        self._dispatch()
        return False

    def _release_submission(self, session: MatchingSession) -> None:
        current = self._session
        if current is not None and current.session_id == session.session_id:
            self._session = ops.with_state(current, SessionState.READY)
            self._dispatch()

    # -- rendering ---------------------------------------------------------

    def _dispatch(self) -> None:
        session = self._session
        if session is None:
            self.renderer.render_requirements([])
            self.renderer.render_slots(SlotListView(slots=[]))
            self.renderer.render_bindings([])
            self.renderer.set_submit_enabled(False)
            return
        self.renderer.render_requirements(build_tool_views(session))
        self.renderer.render_slots(build_slot_views(session))
        self.renderer.render_bindings(build_binding_views(session))
        self.renderer.set_submit_enabled(gate.can_submit(session))
