"""Domain models for jj-forge."""

from jj_forge.models.config import ForgeConfig, ReviewRecord, ReviewStatus
from jj_forge.models.results import OpenResult, SubmitResult, UploadResult
from jj_forge.models.revision import Revision, push_bookmark

__all__ = [
    "ForgeConfig",
    "OpenResult",
    "ReviewRecord",
    "ReviewStatus",
    "Revision",
    "SubmitResult",
    "UploadResult",
    "push_bookmark",
]
