"""The upload state machine behind ``UploadClient.upload_file``.

START -> HASH -> SINGLE | CREATE -> SLICE* -> COMPLETE -> POLL* -> DONE | FAILED

Slices go out strictly one after another, numbered from 1. Progress never
reports 100 until the server has handed back a file id.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

import anyio

from .._http.pipeline import SleepFn
from ..errors import Pan123Error, UploadError
from .types import (
    CompleteResult,
    CompletionState,
    OnUploadProgressCallback,
    PollOutcome,
    UploadMode,
    UploadProgressEvent,
    UploadResult,
    UploadSession,
)
from .utils import (
    SINGLE_UPLOAD_LIMIT,
    UploadBody,
    UploadSource,
    compute_body_length,
    compute_etag,
    count_slices,
    iter_slices,
    md5_hex,
    open_source,
    read_all,
)

if TYPE_CHECKING:
    from .api import UploadClient

# Share of the bar reserved for server-side finalization.
TRANSFER_CEILING = 95.0
POLL_CEILING = 99.0


async def _await_if_necessary(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class _ProgressReporter:
    """Emits progress events, clamping so the sequence never goes backwards."""

    def __init__(
        self,
        callback: OnUploadProgressCallback | None,
        total: int,
    ) -> None:
        self._callback = callback
        self.total = total
        self.total_slices: int | None = None
        self._loaded = 0
        self._percent = 0.0

    async def emit(self, loaded: int, percent: float, *, current_slice: int | None = None) -> None:
        self._loaded = max(self._loaded, min(loaded, self.total))
        self._percent = max(self._percent, min(percent, 100.0))
        if self._callback is None:
            return
        event = UploadProgressEvent(
            loaded=self._loaded,
            total=self.total,
            percent=round(self._percent, 2),
            current_slice=current_slice,
            total_slices=self.total_slices,
        )
        await _await_if_necessary(self._callback(event))

    async def transferred(self, loaded: int, *, current_slice: int | None = None) -> None:
        percent = (loaded / self.total) * 100 if self.total else TRANSFER_CEILING
        await self.emit(loaded, min(percent, TRANSFER_CEILING), current_slice=current_slice)

    async def finished(self) -> None:
        await self.emit(self.total, 100.0, current_slice=self.total_slices)


class FileUploader:
    def __init__(
        self,
        api: UploadClient,
        *,
        sleep_fn: SleepFn = anyio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api = api
        self._sleep_fn = sleep_fn
        self._logger = logger or logging.getLogger("pan123.upload")

    async def upload(
        self,
        filename: str,
        file: UploadSource,
        *,
        etag: str | None = None,
        parent_file_id: int = 0,
        on_progress: OnUploadProgressCallback | None = None,
        poll_interval: float = 1.0,
        max_poll_attempts: int = 300,
        duplicate: int | None = None,
        contain_dir: bool | None = None,
        use_single_upload: bool | None = None,
        async_mode: bool = False,
    ) -> UploadResult:
        if not filename:
            raise ValueError("filename must not be empty")
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if max_poll_attempts < 0:
            raise ValueError("max_poll_attempts must not be negative")

        with open_source(file) as body:
            size = compute_body_length(body)
            single = use_single_upload if use_single_upload is not None else size < SINGLE_UPLOAD_LIMIT
            if single and size >= SINGLE_UPLOAD_LIMIT:
                raise ValueError("files of 1 GiB or more must be uploaded in slices")

            session = UploadSession(
                filename=filename,
                total_size=size,
                content_hash=etag or compute_etag(body),
                mode=UploadMode.SINGLE if single else UploadMode.MULTIPART,
            )
            self._logger.info("uploading %s (%d bytes) using %s upload", filename, size, session.mode.value)
            progress = _ProgressReporter(on_progress, size)
            options: dict[str, Any] = {
                "parent_file_id": parent_file_id,
                "duplicate": duplicate,
                "contain_dir": contain_dir,
            }
            try:
                if single:
                    return await self._upload_single(
                        session, body, progress, async_mode=async_mode, **options
                    )
                return await self._upload_multipart(
                    session,
                    body,
                    progress,
                    async_mode=async_mode,
                    poll_interval=poll_interval,
                    max_poll_attempts=max_poll_attempts,
                    **options,
                )
            except Exception:
                if not session.finished:
                    session.transition(CompletionState.FAILED)
                raise

    async def _upload_single(
        self,
        session: UploadSession,
        body: UploadBody,
        progress: _ProgressReporter,
        *,
        async_mode: bool,
        parent_file_id: int,
        duplicate: int | None,
        contain_dir: bool | None,
    ) -> UploadResult:
        try:
            servers = await self._api.get_upload_domain()
        except Pan123Error as exc:
            raise UploadError.from_error("domain", exc) from exc
        if not servers:
            raise UploadError("domain", "domain failed: no upload server available")
        session.upload_servers = servers

        await progress.emit(0, 0.0)
        try:
            answer = await self._api.single_upload(
                servers[0],
                parent_file_id,
                session.filename,
                session.content_hash,
                session.total_size,
                read_all(body),
                duplicate=duplicate,
                contain_dir=contain_dir,
            )
        except Pan123Error as exc:
            raise UploadError.from_error("single", exc) from exc

        if answer.completed and answer.file_id:
            session.transition(CompletionState.DONE)
            await progress.finished()
            self._logger.info("uploaded %s as file %d", session.filename, answer.file_id)
            return UploadResult(file_id=answer.file_id, is_reuse=False, is_single_upload=True)

        if async_mode:
            # No preupload session exists for single uploads, so nothing to query later.
            session.transition(CompletionState.DONE)
            await progress.transferred(session.total_size)
            return UploadResult(file_id=0, is_reuse=False, is_single_upload=True, is_async=True)

        raise UploadError(
            "single",
            "single failed: upload did not complete or returned no file id",
            details={"fileID": answer.file_id, "completed": answer.completed},
        )

    async def _upload_multipart(
        self,
        session: UploadSession,
        body: UploadBody,
        progress: _ProgressReporter,
        *,
        async_mode: bool,
        poll_interval: float,
        max_poll_attempts: int,
        parent_file_id: int,
        duplicate: int | None,
        contain_dir: bool | None,
    ) -> UploadResult:
        try:
            created = await self._api.create_file(
                parent_file_id,
                session.filename,
                session.content_hash,
                session.total_size,
                duplicate=duplicate,
                contain_dir=contain_dir,
            )
        except Pan123Error as exc:
            raise UploadError.from_error("create", exc) from exc

        if created.reuse:
            if not created.file_id:
                raise UploadError("create", "create failed: reuse reported without a file id")
            session.transition(CompletionState.DONE)
            await progress.finished()
            self._logger.info(
                "instant transfer for %s, server already holds file %d",
                session.filename,
                created.file_id,
            )
            return UploadResult(file_id=created.file_id, is_reuse=True, is_single_upload=False)

        if not created.preupload_id or not created.servers:
            raise UploadError("create", "create failed: missing preuploadID or upload servers")
        if created.slice_size <= 0:
            raise UploadError("create", "create failed: server returned no slice size")

        session.preupload_id = created.preupload_id
        session.slice_size = created.slice_size
        session.upload_servers = created.servers
        server = created.servers[0]
        total_slices = count_slices(session.total_size, created.slice_size)
        progress.total_slices = total_slices

        loaded = 0
        for slice_no, chunk in enumerate(iter_slices(body, created.slice_size), start=1):
            self._logger.debug("uploading slice %d/%d of %s", slice_no, total_slices, session.filename)
            try:
                await self._api.upload_slice(server, created.preupload_id, slice_no, md5_hex(chunk), chunk)
            except Pan123Error as exc:
                raise UploadError.from_error("slice", exc) from exc
            session.slices_uploaded = slice_no
            loaded += len(chunk)
            await progress.transferred(loaded, current_slice=slice_no)

        await progress.emit(session.total_size, TRANSFER_CEILING, current_slice=total_slices)

        try:
            first = await self._api.upload_complete(created.preupload_id)
        except Pan123Error as exc:
            raise UploadError.from_error("complete", exc) from exc

        if first.outcome is PollOutcome.COMPLETED:
            session.transition(CompletionState.DONE)
            await progress.finished()
            return UploadResult(file_id=first.file_id, is_reuse=False, is_single_upload=False)

        if async_mode:
            session.transition(CompletionState.DONE)
            self._logger.info(
                "upload of %s handed off, query preupload %s later",
                session.filename,
                created.preupload_id,
            )
            return UploadResult(
                file_id=first.file_id,
                is_reuse=False,
                is_single_upload=False,
                is_async=True,
                preupload_id=created.preupload_id,
            )

        session.transition(CompletionState.POLLING)
        return await self._poll(session, progress, first, poll_interval, max_poll_attempts)

    async def _poll(
        self,
        session: UploadSession,
        progress: _ProgressReporter,
        first: CompleteResult,
        poll_interval: float,
        max_poll_attempts: int,
    ) -> UploadResult:
        assert session.preupload_id is not None
        last = first.outcome
        if last is PollOutcome.COMPLETED_WITHOUT_ID:
            self._logger.warning("server reported completion without a file id, polling on")

        for attempt in range(max_poll_attempts):
            await _await_if_necessary(self._sleep_fn(poll_interval))
            self._logger.debug("polling upload result (attempt %d/%d)", attempt + 1, max_poll_attempts)
            try:
                answer = await self._api.upload_complete(session.preupload_id)
            except Pan123Error as exc:
                raise UploadError.from_error("poll", exc) from exc

            last = answer.outcome
            if last is PollOutcome.COMPLETED:
                session.transition(CompletionState.DONE)
                await progress.finished()
                return UploadResult(file_id=answer.file_id, is_reuse=False, is_single_upload=False)
            if last is PollOutcome.COMPLETED_WITHOUT_ID:
                self._logger.warning(
                    "server reported completion without a file id (attempt %d/%d)",
                    attempt + 1,
                    max_poll_attempts,
                )

            await progress.emit(
                session.total_size,
                min(TRANSFER_CEILING + attempt / max_poll_attempts * 4, POLL_CEILING),
                current_slice=progress.total_slices,
            )

        if last is PollOutcome.COMPLETED_WITHOUT_ID:
            message = (
                f"polling timeout: server reported completion without a file id "
                f"after {max_poll_attempts} attempts"
            )
        else:
            message = f"polling timeout: upload not completed after {max_poll_attempts} attempts"
        raise UploadError("poll", message, details={"preuploadID": session.preupload_id})


__all__ = ["FileUploader", "TRANSFER_CEILING"]
