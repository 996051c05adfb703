from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field


class UploadMode(str, enum.Enum):
    SINGLE = "single"
    MULTIPART = "multipart"


class CompletionState(str, enum.Enum):
    PENDING = "pending"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


class PollOutcome(enum.Enum):
    """How one upload_complete answer reads."""

    COMPLETED = "completed"
    PENDING = "pending"
    # Server says completed but hands back no file id; treated as not done.
    COMPLETED_WITHOUT_ID = "completed_without_id"


@dataclass(slots=True)
class UploadProgressEvent:
    loaded: int
    total: int
    percent: float
    current_slice: int | None = None
    total_slices: int | None = None


OnUploadProgressCallback = (
    Callable[[UploadProgressEvent], None] | Callable[[UploadProgressEvent], Awaitable[None]]
)


@dataclass(slots=True)
class CreateFileResult:
    reuse: bool
    file_id: int
    preupload_id: str | None
    slice_size: int
    servers: list[str]


@dataclass(slots=True)
class CompleteResult:
    completed: bool
    file_id: int

    @property
    def outcome(self) -> PollOutcome:
        if self.completed and self.file_id:
            return PollOutcome.COMPLETED
        if self.completed:
            return PollOutcome.COMPLETED_WITHOUT_ID
        return PollOutcome.PENDING


@dataclass(slots=True)
class SingleUploadResult:
    file_id: int
    completed: bool


@dataclass(slots=True)
class UploadResult:
    """Outcome of ``upload_file``.

    In async mode ``file_id`` may be 0; pass ``preupload_id`` to
    ``query_upload_result`` later to learn the final id.
    """

    file_id: int
    is_reuse: bool
    is_single_upload: bool
    is_async: bool = False
    preupload_id: str | None = None


_TRANSITIONS: dict[CompletionState, frozenset[CompletionState]] = {
    CompletionState.PENDING: frozenset(
        {CompletionState.POLLING, CompletionState.DONE, CompletionState.FAILED}
    ),
    CompletionState.POLLING: frozenset({CompletionState.DONE, CompletionState.FAILED}),
    CompletionState.DONE: frozenset(),
    CompletionState.FAILED: frozenset(),
}


@dataclass(slots=True)
class UploadSession:
    """Working state of one ``upload_file`` call; never outlives it."""

    filename: str
    total_size: int
    content_hash: str
    mode: UploadMode
    slice_size: int = 0
    preupload_id: str | None = None
    upload_servers: list[str] = field(default_factory=list)
    slices_uploaded: int = 0
    completion_state: CompletionState = CompletionState.PENDING

    def transition(self, state: CompletionState) -> None:
        if state not in _TRANSITIONS[self.completion_state]:
            raise RuntimeError(
                f"invalid upload state transition {self.completion_state.value} -> {state.value}"
            )
        self.completion_state = state

    @property
    def finished(self) -> bool:
        return self.completion_state in (CompletionState.DONE, CompletionState.FAILED)


__all__ = [
    "UploadMode",
    "CompletionState",
    "PollOutcome",
    "UploadProgressEvent",
    "OnUploadProgressCallback",
    "CreateFileResult",
    "CompleteResult",
    "SingleUploadResult",
    "UploadResult",
    "UploadSession",
]
