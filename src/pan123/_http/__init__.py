from .config import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT, ClientConfig, RateLimitConfig
from .envelope import ApiEnvelope, parse_envelope, unwrap_envelope
from .pipeline import ApiRequest, AuthStage, RateLimitStage, RequestPipeline, Stage
from .transport import AsyncTransport, BaseTransport, JSONBody, MultipartBody, RequestBody

__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_TIMEOUT",
    "ClientConfig",
    "RateLimitConfig",
    "ApiEnvelope",
    "parse_envelope",
    "unwrap_envelope",
    "ApiRequest",
    "AuthStage",
    "RateLimitStage",
    "RequestPipeline",
    "Stage",
    "AsyncTransport",
    "BaseTransport",
    "JSONBody",
    "MultipartBody",
    "RequestBody",
]
