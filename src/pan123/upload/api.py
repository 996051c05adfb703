"""Upload endpoints of the open API, one pipeline call each."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import anyio

from .._http.pipeline import RequestPipeline, SleepFn
from .._http.transport import MultipartBody
from .engine import FileUploader
from .types import (
    CompleteResult,
    CreateFileResult,
    OnUploadProgressCallback,
    SingleUploadResult,
    UploadResult,
)

if TYPE_CHECKING:
    from .utils import UploadSource

MKDIR_PATH = "/upload/v1/file/mkdir"
CREATE_FILE_PATH = "/upload/v2/file/create"
UPLOAD_DOMAIN_PATH = "/upload/v2/file/domain"
UPLOAD_COMPLETE_PATH = "/upload/v2/file/upload_complete"
SLICE_PATH = "/upload/v2/file/slice"
SINGLE_CREATE_PATH = "/upload/v2/file/single/create"
OCTET_STREAM = "application/octet-stream"


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _as_dict(data: Any) -> dict[str, Any]:
    return data if isinstance(data, dict) else {}


def _server_url(server: str, path: str) -> str:
    return server.rstrip("/") + path


def _bool_field(value: bool) -> str:
    return "true" if value else "false"


class UploadClient:
    """Folder creation, the create/slice/complete handshake and single-shot upload.

    ``upload_file`` drives the whole handshake; the remaining methods map
    one-to-one onto endpoints for callers who want to run it themselves.
    """

    def __init__(
        self,
        pipeline: RequestPipeline,
        *,
        sleep_fn: SleepFn = anyio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._sleep_fn = sleep_fn
        self._logger = logger or logging.getLogger("pan123.upload")

    async def create_folder(self, name: str, parent_id: int | str = 0) -> int:
        if not name:
            raise ValueError("name must not be empty")
        envelope = await self._pipeline.post(MKDIR_PATH, {"name": name, "parentID": int(parent_id)})
        return _as_int(_as_dict(envelope.data).get("dirID"))

    async def create_file(
        self,
        parent_file_id: int | str,
        filename: str,
        etag: str,
        size: int,
        *,
        duplicate: int | None = None,
        contain_dir: bool | None = None,
    ) -> CreateFileResult:
        payload: dict[str, Any] = {
            "parentFileID": int(parent_file_id),
            "filename": filename,
            "etag": etag,
            "size": size,
        }
        if duplicate is not None:
            payload["duplicate"] = duplicate
        if contain_dir is not None:
            payload["containDir"] = contain_dir
        envelope = await self._pipeline.post(CREATE_FILE_PATH, payload)
        data = _as_dict(envelope.data)
        servers = data.get("servers") or []
        return CreateFileResult(
            reuse=bool(data.get("reuse")),
            file_id=_as_int(data.get("fileID")),
            preupload_id=data.get("preuploadID") or None,
            slice_size=_as_int(data.get("sliceSize")),
            servers=[str(s) for s in servers] if isinstance(servers, list) else [],
        )

    async def get_upload_domain(self) -> list[str]:
        envelope = await self._pipeline.get(UPLOAD_DOMAIN_PATH)
        data = envelope.data
        if not isinstance(data, list):
            return []
        return [str(server) for server in data]

    async def upload_slice(
        self,
        server: str,
        preupload_id: str,
        slice_no: int,
        slice_md5: str,
        data: bytes,
    ) -> None:
        await self._pipeline.post_form(
            _server_url(server, SLICE_PATH),
            {
                "preuploadID": preupload_id,
                "sliceNo": str(slice_no),
                "sliceMD5": slice_md5,
            },
            {"slice": (f"slice{slice_no}", data, OCTET_STREAM)},
        )

    async def upload_complete(self, preupload_id: str) -> CompleteResult:
        envelope = await self._pipeline.post(UPLOAD_COMPLETE_PATH, {"preuploadID": preupload_id})
        data = _as_dict(envelope.data)
        return CompleteResult(
            completed=bool(data.get("completed")),
            file_id=_as_int(data.get("fileID")),
        )

    async def query_upload_result(self, preupload_id: str) -> CompleteResult:
        """Ask again whether an async-mode upload has been finalized."""
        return await self.upload_complete(preupload_id)

    async def single_upload(
        self,
        server: str,
        parent_file_id: int | str,
        filename: str,
        etag: str,
        size: int,
        data: bytes,
        *,
        duplicate: int | None = None,
        contain_dir: bool | None = None,
    ) -> SingleUploadResult:
        fields = {
            "parentFileID": str(int(parent_file_id)),
            "filename": filename,
            "etag": etag,
            "size": str(size),
        }
        if duplicate is not None:
            fields["duplicate"] = str(duplicate)
        if contain_dir is not None:
            fields["containDir"] = _bool_field(contain_dir)
        envelope = await self._pipeline.request(
            "POST",
            _server_url(server, SINGLE_CREATE_PATH),
            body=MultipartBody(fields, {"file": (filename, data, OCTET_STREAM)}),
        )
        payload = _as_dict(envelope.data)
        return SingleUploadResult(
            file_id=_as_int(payload.get("fileID")),
            completed=bool(payload.get("completed")),
        )

    async def upload_file(
        self,
        filename: str,
        file: UploadSource,
        *,
        etag: str | None = None,
        parent_file_id: int | str = 0,
        on_progress: OnUploadProgressCallback | None = None,
        poll_interval: float = 1.0,
        max_poll_attempts: int = 300,
        duplicate: int | None = None,
        contain_dir: bool | None = None,
        use_single_upload: bool | None = None,
        async_mode: bool = False,
    ) -> UploadResult:
        """Upload ``file`` under ``parent_file_id`` and return the new file id.

        Files under 1 GiB go through the single-shot endpoint unless
        ``use_single_upload=False``; larger ones are sliced. In the default
        synchronous mode the call polls ``upload_complete`` every
        ``poll_interval`` seconds until the server finalizes the file. With
        ``async_mode=True`` it returns after the first completion request and
        the caller follows up with ``query_upload_result(preupload_id)``.

        Raises:
            UploadError: a step of the handshake failed; ``step`` names it.
        """
        uploader = FileUploader(self, sleep_fn=self._sleep_fn, logger=self._logger)
        return await uploader.upload(
            filename,
            file,
            etag=etag,
            parent_file_id=int(parent_file_id),
            on_progress=on_progress,
            poll_interval=poll_interval,
            max_poll_attempts=max_poll_attempts,
            duplicate=duplicate,
            contain_dir=contain_dir,
            use_single_upload=use_single_upload,
            async_mode=async_mode,
        )


__all__ = ["UploadClient"]
