"""
Job start executors.

An executor receives the finished binding set and asks the printer to
start the job. Failures reported by the printer come back as an
unsuccessful JobStartResult; transport failures raise JobStartError.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import urljoin

import aiohttp
from pydantic import ValidationError

from spoolbind.config import Settings, get_settings
from spoolbind.jobs.models import JobStartRequest, MaterialBinding
from spoolbind.utils import get_logger

logger = get_logger("jobs.executor")

JOB_START_ENDPOINT = "api/jobs/start"


class JobStartError(Exception):
    """Raised when a job start request cannot be delivered."""
    pass


@dataclass
class JobStartResult:
    """Result of a job start request."""
    success: bool
    message: str = ""
    error: Optional[str] = None


@runtime_checkable
class JobStartExecutor(Protocol):
    """Protocol for job start backends."""

    async def start(
        self, filename: str, leveling: bool, bindings: List[MaterialBinding]
    ) -> JobStartResult:
        """Start ``filename`` with the given material bindings."""
        ...


class HttpJobStartExecutor:
    """Starts jobs through the printer web API."""

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        context_id: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.api_token = api_token
        self.context_id = context_id
        self.timeout = timeout

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def start(
        self, filename: str, leveling: bool, bindings: List[MaterialBinding]
    ) -> JobStartResult:
        try:
            request = JobStartRequest.build(filename, leveling, bindings)
        except ValidationError as e:
            return JobStartResult(success=False, error=f"Invalid job start request: {e}")

        params = {"contextId": self.context_id} if self.context_id else None
        url = urljoin(self.base_url, JOB_START_ENDPOINT)
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        status: Optional[int] = None

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    url,
                    headers=self._get_headers(),
                    params=params,
                    json=request.model_dump(exclude_none=True),
                ) as response:
                    status = response.status
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise JobStartError(f"Failed to start print job: {e}") from e
        except ValueError as e:
            raise JobStartError(f"Printer returned an invalid response (HTTP {status})") from e

        if not isinstance(data, dict):
            raise JobStartError(f"Printer returned an unexpected response (HTTP {status})")

        if data.get("success"):
            return JobStartResult(success=True, message=data.get("message") or "Print job started")
        return JobStartResult(success=False, error=data.get("error") or "Failed to start print")


@dataclass
class StartCall:
    """A recorded call to MockJobStartExecutor.start()."""
    filename: str
    leveling: bool
    bindings: List[MaterialBinding] = field(default_factory=list)


class MockJobStartExecutor:
    """
    Records job start requests instead of sending them.

    Set ``error`` to make every start fail with that message, and ``delay``
    to keep a start in flight for a while.
    """

    def __init__(self, error: Optional[str] = None, delay: float = 0.0):
        self.error = error
        self.delay = delay
        self.calls: List[StartCall] = []

    async def start(
        self, filename: str, leveling: bool, bindings: List[MaterialBinding]
    ) -> JobStartResult:
        self.calls.append(StartCall(filename, leveling, list(bindings)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            return JobStartResult(success=False, error=self.error)
        logger.info(f"Mock job start: {filename} with {len(bindings)} material mappings")
        return JobStartResult(success=True, message=f"Starting print: {filename}")


def create_job_executor(settings: Optional[Settings] = None) -> JobStartExecutor:
    """Build the configured executor."""
    settings = settings or get_settings()

    if settings.mock_mode or not settings.printer_url:
        if not settings.mock_mode:
            logger.warning("No printer URL configured, using mock job executor")
        return MockJobStartExecutor()

    return HttpJobStartExecutor(
        settings.printer_url,
        api_token=settings.api_token,
        context_id=settings.context_id,
        timeout=settings.request_timeout,
    )
