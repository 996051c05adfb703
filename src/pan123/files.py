"""File listing, metadata and batch maintenance."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

from ._http.pipeline import RequestPipeline
from .errors import ApiError
from .types import (
    BatchRenameResult,
    FileItem,
    FileListPage,
    RenameFailure,
    RenameItem,
    RenameSuccess,
    build_file_item,
    to_int,
)

FILE_LIST_PATH = "/api/v2/file/list"
FILE_INFOS_PATH = "/api/v1/file/infos"
DOWNLOAD_INFO_PATH = "/api/v1/file/download_info"
RENAME_PATH = "/api/v1/file/rename"
TRASH_PATH = "/api/v1/file/trash"
DELETE_PATH = "/api/v1/file/delete"
MOVE_PATH = "/api/v1/file/move"

MAX_LIST_LIMIT = 100
# The endpoint accepts 30 names per call; 20 leaves headroom.
RENAME_BATCH_SIZE = 20
ID_BATCH_SIZE = 100

T = TypeVar("T")


def _batches(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _file_ids(ids: Sequence[int | str]) -> list[int]:
    return [int(file_id) for file_id in ids]


class FilesClient:
    def __init__(self, pipeline: RequestPipeline, *, logger: logging.Logger | None = None) -> None:
        self._pipeline = pipeline
        self._logger = logger or logging.getLogger("pan123.files")

    async def get_file_list(
        self,
        parent_file_id: int | str = 0,
        limit: int = MAX_LIST_LIMIT,
        *,
        search_data: str | None = None,
        search_mode: int | None = None,
        last_file_id: int | None = None,
    ) -> FileListPage:
        """List one page of a folder.

        Results include trashed files; check ``FileItem.trashed``. When
        ``search_data`` is given the folder is ignored and the whole drive is
        searched (``search_mode`` 0 fuzzy, 1 exact).
        """
        if limit <= 0:
            raise ValueError("limit must be positive")
        params: dict[str, Any] = {
            "parentFileId": int(parent_file_id),
            "limit": min(limit, MAX_LIST_LIMIT),
        }
        if search_data is not None:
            params["searchData"] = search_data
        if search_mode is not None:
            params["searchMode"] = search_mode
        if last_file_id is not None:
            params["lastFileId"] = last_file_id

        envelope = await self._pipeline.get(FILE_LIST_PATH, params)
        data = envelope.data if isinstance(envelope.data, dict) else {}
        return FileListPage(
            last_file_id=to_int(data.get("lastFileId"), -1),
            file_list=[build_file_item(item) for item in data.get("fileList") or []],
        )

    async def get_file_infos(self, file_ids: Sequence[int | str]) -> list[FileItem]:
        envelope = await self._pipeline.post(FILE_INFOS_PATH, {"fileIds": _file_ids(file_ids)})
        data = envelope.data if isinstance(envelope.data, dict) else {}
        return [build_file_item(item) for item in data.get("list") or []]

    async def get_download_info(self, file_id: int | str) -> str:
        envelope = await self._pipeline.get(DOWNLOAD_INFO_PATH, {"fileId": int(file_id)})
        data = envelope.data if isinstance(envelope.data, dict) else {}
        return str(data.get("downloadUrl") or "")

    async def batch_rename(self, items: Sequence[RenameItem]) -> BatchRenameResult:
        """Rename files in batches of 20.

        A batch the server rejects does not raise: its items are reported in
        ``fail_list`` with the server's message and later batches still run.
        """
        result = BatchRenameResult()
        for batch in _batches(items, RENAME_BATCH_SIZE):
            rename_list = [f"{item.file_id}|{item.new_name}" for item in batch]
            try:
                envelope = await self._pipeline.post(RENAME_PATH, {"renameList": rename_list})
            except ApiError as exc:
                self._logger.warning("rename batch of %d failed: %s", len(batch), exc.message)
                result.fail_list.extend(
                    RenameFailure(file_id=int(item.file_id), message=exc.message or "rename failed")
                    for item in batch
                )
                continue

            data = envelope.data if isinstance(envelope.data, dict) else {}
            result.success_list.extend(
                RenameSuccess(file_id=to_int(entry.get("fileID")), update_at=entry.get("updateAt"))
                for entry in data.get("successList") or []
            )
            result.fail_list.extend(
                RenameFailure(file_id=to_int(entry.get("fileID")), message=str(entry.get("message") or ""))
                for entry in data.get("failList") or []
            )
        return result

    async def delete_files(self, file_ids: Sequence[int | str], *, permanent: bool = False) -> None:
        """Move files to the trash, or erase them for good with ``permanent=True``.

        Permanent deletion only applies to files already in the trash. Batches
        of 100 are sent in order and the first failing batch raises.
        """
        path = DELETE_PATH if permanent else TRASH_PATH
        for batch in _batches(_file_ids(file_ids), ID_BATCH_SIZE):
            await self._pipeline.post(path, {"fileIDs": list(batch)})

    async def move_files(self, file_ids: Sequence[int | str], to_parent_file_id: int | str) -> None:
        target = int(to_parent_file_id)
        for batch in _batches(_file_ids(file_ids), ID_BATCH_SIZE):
            await self._pipeline.post(MOVE_PATH, {"fileIDs": list(batch), "toParentFileID": target})


__all__ = ["FilesClient", "RENAME_BATCH_SIZE", "ID_BATCH_SIZE"]
