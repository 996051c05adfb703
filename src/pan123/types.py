from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

SHARE_URL_PREFIX = "https://www.123pan.com/s/"
PAID_SHARE_URL_PREFIX = "https://www.123pan.com/ps/"

ShareExpireDays = Literal[0, 1, 7, 30]
DownloadStatus = Literal["downloading", "failed", "succeeded", "retrying"]
OfflineTaskStatus = Literal["pending", "downloading", "completed", "failed", "paused"]


def to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(slots=True)
class FileItem:
    file_id: int
    filename: str
    type: int
    size: int
    etag: str
    status: int
    parent_file_id: int
    category: int
    trashed: bool
    create_at: str | None = None
    update_at: Any = None

    @property
    def is_folder(self) -> bool:
        return self.type == 1


@dataclass(slots=True)
class FileListPage:
    last_file_id: int
    file_list: list[FileItem]

    @property
    def has_more(self) -> bool:
        return self.last_file_id != -1


@dataclass(slots=True)
class RenameItem:
    file_id: int | str
    new_name: str


@dataclass(slots=True)
class RenameSuccess:
    file_id: int
    update_at: Any = None


@dataclass(slots=True)
class RenameFailure:
    file_id: int
    message: str


@dataclass(slots=True)
class BatchRenameResult:
    success_list: list[RenameSuccess] = field(default_factory=list)
    fail_list: list[RenameFailure] = field(default_factory=list)


@dataclass(slots=True)
class ShareLink:
    share_id: int
    share_key: str
    paid: bool = False

    @property
    def url(self) -> str:
        prefix = PAID_SHARE_URL_PREFIX if self.paid else SHARE_URL_PREFIX
        return prefix + self.share_key


@dataclass(slots=True)
class UserInfo:
    uid: int
    nickname: str
    space_used: int
    space_permanent: int
    space_temp: int
    space_temp_expr: Any
    vip: bool
    direct_traffic: int
    is_hide_uid: bool
    https_count: int
    head_image: str | None = None
    passport: str | None = None
    mail: str | None = None
    vip_info: list[Any] = field(default_factory=list)
    developer_info: Any = None


@dataclass(slots=True)
class OfflineTask:
    task_id: int
    url: str


@dataclass(slots=True)
class OfflineTaskFailure:
    url: str
    error: str


@dataclass(slots=True)
class BatchTaskResult:
    tasks: list[OfflineTask] = field(default_factory=list)
    failures: list[OfflineTaskFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


_DOWNLOAD_STATUS: dict[int, DownloadStatus] = {
    0: "downloading",
    1: "failed",
    2: "succeeded",
    3: "retrying",
}


@dataclass(slots=True)
class DownloadProcess:
    # Percentage; drops back to 0 when the download fails.
    process: float
    status_code: int

    @property
    def status(self) -> DownloadStatus | None:
        return _DOWNLOAD_STATUS.get(self.status_code)


@dataclass(slots=True)
class OfflineTaskDetail:
    task_id: str
    task_name: str
    task_url: str
    task_status: str
    progress: float
    create_time: str | None = None
    file_size: int | None = None
    download_speed: int | None = None
    complete_time: str | None = None
    error_message: str | None = None


@dataclass(slots=True)
class OfflineTaskPage:
    tasks: list[OfflineTaskDetail]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.limit > 0 and self.page * self.limit < self.total


def build_file_item(data: dict[str, Any]) -> FileItem:
    return FileItem(
        file_id=to_int(data.get("fileId", data.get("fileID"))),
        filename=str(data.get("filename") or ""),
        type=to_int(data.get("type")),
        size=to_int(data.get("size")),
        etag=str(data.get("etag") or ""),
        status=to_int(data.get("status")),
        parent_file_id=to_int(data.get("parentFileId", data.get("parentFileID"))),
        category=to_int(data.get("category")),
        trashed=bool(to_int(data.get("trashed"))),
        create_at=data.get("createAt"),
        update_at=data.get("updateAt"),
    )


def _optional_int(value: Any) -> int | None:
    return None if value is None else to_int(value)


def build_offline_task(data: dict[str, Any]) -> OfflineTaskDetail:
    return OfflineTaskDetail(
        task_id=str(data.get("taskId", data.get("taskID", ""))),
        task_name=str(data.get("taskName") or ""),
        task_url=str(data.get("taskUrl") or ""),
        task_status=str(data.get("taskStatus") or ""),
        progress=float(data.get("progress") or 0),
        create_time=data.get("createTime"),
        file_size=_optional_int(data.get("fileSize")),
        download_speed=_optional_int(data.get("downloadSpeed")),
        complete_time=data.get("completeTime"),
        error_message=data.get("errorMessage"),
    )


def build_user_info(data: dict[str, Any]) -> UserInfo:
    return UserInfo(
        uid=to_int(data.get("uid")),
        nickname=str(data.get("nickname") or ""),
        space_used=to_int(data.get("spaceUsed")),
        space_permanent=to_int(data.get("spacePermanent")),
        space_temp=to_int(data.get("spaceTemp")),
        space_temp_expr=data.get("spaceTempExpr"),
        vip=bool(data.get("vip")),
        direct_traffic=to_int(data.get("directTraffic")),
        is_hide_uid=bool(data.get("isHideUID")),
        https_count=to_int(data.get("httpsCount")),
        head_image=data.get("headImage"),
        passport=data.get("passport"),
        mail=data.get("mail"),
        vip_info=list(data.get("vipInfo") or []),
        developer_info=data.get("developerInfo"),
    )


__all__ = [
    "ShareExpireDays",
    "DownloadStatus",
    "FileItem",
    "FileListPage",
    "RenameItem",
    "RenameSuccess",
    "RenameFailure",
    "BatchRenameResult",
    "ShareLink",
    "UserInfo",
    "OfflineTask",
    "OfflineTaskFailure",
    "BatchTaskResult",
    "DownloadProcess",
    "OfflineTaskStatus",
    "OfflineTaskDetail",
    "OfflineTaskPage",
    "build_offline_task",
    "build_file_item",
    "build_user_info",
    "to_int",
]
