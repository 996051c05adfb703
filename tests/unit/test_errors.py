from pan123 import (
    ApiError,
    AuthError,
    ConfigurationError,
    Pan123Error,
    RateLimitError,
    UploadError,
)


def test_hierarchy():
    for error_type in (ConfigurationError, AuthError, RateLimitError, ApiError, UploadError):
        assert issubclass(error_type, Pan123Error)
    assert issubclass(UploadError, ApiError)


def test_rate_limit_error_names_retry_ceiling():
    error = RateLimitError(5)
    assert str(error) == "Rate limit exceeded. Max retries (5) reached."


def test_auth_error_fields():
    error = AuthError("nope", code=401, details={"x": 1})
    assert (error.message, error.code, error.details) == ("nope", 401, {"x": 1})


def test_upload_error_from_api_error_copies_status_and_details():
    cause = ApiError(4001, "slice checksum mismatch", details={"sliceNo": 2}, trace_id="t", status_code=200)
    error = UploadError.from_error("slice", cause)

    assert error.step == "slice"
    assert error.message == "slice failed: slice checksum mismatch"
    assert error.code == 4001
    assert error.details == {"sliceNo": 2}
    assert error.trace_id == "t"
    assert error.status_code == 200


def test_upload_error_wraps_auth_and_rate_limit_failures():
    auth = UploadError.from_error("poll", AuthError("rejected after refresh", code=401))
    assert auth.step == "poll"
    assert auth.message == "poll failed: rejected after refresh"
    assert auth.code == 401

    throttled = UploadError.from_error("slice", RateLimitError(3))
    assert throttled.message == "slice failed: Rate limit exceeded. Max retries (3) reached."
    assert throttled.code == -1
