"""Job files, material bindings and job start."""

from .models import (
    JobFile,
    JobMetadataType,
    ToolRequirement,
    MaterialBinding,
    JobStartRequest,
    UNKNOWN_SLOT_COLOR,
)
from .executor import (
    JobStartExecutor,
    JobStartResult,
    JobStartError,
    HttpJobStartExecutor,
    MockJobStartExecutor,
    create_job_executor,
)

__all__ = [
    # Models
    "JobFile",
    "JobMetadataType",
    "ToolRequirement",
    "MaterialBinding",
    "JobStartRequest",
    "UNKNOWN_SLOT_COLOR",
    # Executors
    "JobStartExecutor",
    "JobStartResult",
    "JobStartError",
    "HttpJobStartExecutor",
    "MockJobStartExecutor",
    "create_job_executor",
]
