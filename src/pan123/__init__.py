from ._version import __version__
from ._http.config import ClientConfig, RateLimitConfig
from .errors import (
    Pan123Error,
    ConfigurationError,
    AuthError,
    RateLimitError,
    ApiError,
    UploadError,
)
from .auth import TokenInfo
from .ratelimit import RateLimiterStatus, TokenBucketRateLimiter
from .client import Pan123Client
from .share import ExplicitIds, JoinedIds, IdList
from .upload import (
    UploadProgressEvent,
    UploadResult,
    CreateFileResult,
    CompleteResult,
    SingleUploadResult,
    PollOutcome,
)
from .types import (
    FileItem,
    FileListPage,
    RenameItem,
    BatchRenameResult,
    ShareLink,
    UserInfo,
    OfflineTask,
    BatchTaskResult,
    DownloadProcess,
    OfflineTaskDetail,
    OfflineTaskPage,
)

__all__ = [
    "__version__",
    "Pan123Client",
    "ClientConfig",
    "RateLimitConfig",
    "Pan123Error",
    "ConfigurationError",
    "AuthError",
    "RateLimitError",
    "ApiError",
    "UploadError",
    "TokenInfo",
    "RateLimiterStatus",
    "TokenBucketRateLimiter",
    "ExplicitIds",
    "JoinedIds",
    "IdList",
    "UploadProgressEvent",
    "UploadResult",
    "CreateFileResult",
    "CompleteResult",
    "SingleUploadResult",
    "PollOutcome",
    "FileItem",
    "FileListPage",
    "RenameItem",
    "BatchRenameResult",
    "ShareLink",
    "UserInfo",
    "OfflineTask",
    "BatchTaskResult",
    "DownloadProcess",
    "OfflineTaskDetail",
    "OfflineTaskPage",
]
