from .api import UploadClient
from .engine import FileUploader
from .types import (
    CompleteResult,
    CompletionState,
    CreateFileResult,
    OnUploadProgressCallback,
    PollOutcome,
    SingleUploadResult,
    UploadMode,
    UploadProgressEvent,
    UploadResult,
    UploadSession,
)
from .utils import SINGLE_UPLOAD_LIMIT

__all__ = [
    "UploadClient",
    "FileUploader",
    "CompleteResult",
    "CompletionState",
    "CreateFileResult",
    "OnUploadProgressCallback",
    "PollOutcome",
    "SingleUploadResult",
    "UploadMode",
    "UploadProgressEvent",
    "UploadResult",
    "UploadSession",
    "SINGLE_UPLOAD_LIMIT",
]
