"""Offline (server-side URL) download tasks."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

from ._http.pipeline import RequestPipeline
from .errors import Pan123Error
from .types import (
    BatchTaskResult,
    DownloadProcess,
    OfflineTask,
    OfflineTaskDetail,
    OfflineTaskFailure,
    OfflineTaskPage,
    build_offline_task,
    to_int,
)

OFFLINE_DOWNLOAD_PATH = "/api/v1/offline/download"
OFFLINE_PROCESS_PATH = "/api/v1/offline/download/process"
OFFLINE_LIST_PATH = "/api/v1/offline/list"
OFFLINE_INFO_PATH = "/api/v1/offline/info/"
OFFLINE_DELETE_PATH = "/api/v1/offline/delete/"
OFFLINE_PAUSE_PATH = "/api/v1/offline/pause/"
OFFLINE_RESUME_PATH = "/api/v1/offline/resume/"


def _task_path(prefix: str, task_id: int | str) -> str:
    task = str(task_id).strip()
    if not task:
        raise ValueError("task_id must not be empty")
    return prefix + quote(task, safe="")


class OfflineClient:
    def __init__(self, pipeline: RequestPipeline, *, logger: logging.Logger | None = None) -> None:
        self._pipeline = pipeline
        self._logger = logger or logging.getLogger("pan123.offline")

    async def create_task(self, url: str, parent_id: int | str | None = None) -> OfflineTask:
        if not url:
            raise ValueError("url must not be empty")
        payload: dict[str, Any] = {"url": url}
        if parent_id is not None:
            payload["parentId"] = int(parent_id)
        envelope = await self._pipeline.post(OFFLINE_DOWNLOAD_PATH, payload)
        data = envelope.data if isinstance(envelope.data, dict) else {}
        return OfflineTask(task_id=to_int(data.get("taskID")), url=url)

    async def batch_create_tasks(
        self, urls: Iterable[str], parent_id: int | str | None = None
    ) -> BatchTaskResult:
        """Create one task per URL, one after another.

        Failures are collected per URL instead of raised; check
        ``BatchTaskResult.ok``.
        """
        result = BatchTaskResult()
        for url in urls:
            try:
                result.tasks.append(await self.create_task(url, parent_id))
            except (Pan123Error, ValueError) as exc:
                self._logger.warning("offline task for %s failed: %s", url, exc)
                result.failures.append(OfflineTaskFailure(url=url, error=getattr(exc, "message", str(exc))))
        return result

    async def get_download_process(self, task_id: int | str) -> DownloadProcess:
        envelope = await self._pipeline.get(OFFLINE_PROCESS_PATH, {"taskID": int(task_id)})
        data = envelope.data if isinstance(envelope.data, dict) else {}
        return DownloadProcess(
            process=float(data.get("process") or 0),
            status_code=to_int(data.get("status")),
        )

    async def get_task_list(self, page: int | None = None, limit: int | None = None) -> OfflineTaskPage:
        params: dict[str, Any] = {}
        if page is not None:
            if page < 1:
                raise ValueError("page must be at least 1")
            params["page"] = page
        if limit is not None:
            if limit < 1:
                raise ValueError("limit must be positive")
            params["limit"] = limit
        envelope = await self._pipeline.get(OFFLINE_LIST_PATH, params or None)
        data = envelope.data if isinstance(envelope.data, dict) else {}
        entries = data.get("list") or []
        tasks = [build_offline_task(entry) for entry in entries if isinstance(entry, dict)]
        return OfflineTaskPage(
            tasks=tasks,
            total=to_int(data.get("total", len(tasks))),
            page=to_int(data.get("page", page or 1)),
            limit=to_int(data.get("limit", limit or len(tasks))),
        )

    async def get_task_info(self, task_id: int | str) -> OfflineTaskDetail:
        envelope = await self._pipeline.get(_task_path(OFFLINE_INFO_PATH, task_id))
        data = envelope.data if isinstance(envelope.data, dict) else {}
        return build_offline_task(data)

    async def delete_task(self, task_id: int | str) -> None:
        await self._pipeline.delete(_task_path(OFFLINE_DELETE_PATH, task_id))
        self._logger.debug("deleted offline task %s", task_id)

    async def pause_task(self, task_id: int | str) -> None:
        await self._pipeline.post(_task_path(OFFLINE_PAUSE_PATH, task_id))

    async def resume_task(self, task_id: int | str) -> None:
        await self._pipeline.post(_task_path(OFFLINE_RESUME_PATH, task_id))


__all__ = ["OfflineClient"]
