"""Share links, free and paid."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from ._http.pipeline import RequestPipeline
from .types import ShareExpireDays, ShareLink, to_int

CREATE_SHARE_PATH = "/api/v1/share/create"
CREATE_PAID_SHARE_PATH = "/api/v1/share/content-payment/create"

MAX_SHARE_FILES = 100
SHARE_EXPIRE_DAYS = (0, 1, 7, 30)
MAX_PAID_SHARE_NAME = 35
MIN_PAY_AMOUNT = 1
MAX_PAY_AMOUNT = 1000


@dataclass(frozen=True, slots=True)
class ExplicitIds:
    ids: Sequence[int | str]

    def ids_as_strings(self) -> list[str]:
        return [str(file_id).strip() for file_id in self.ids]


@dataclass(frozen=True, slots=True)
class JoinedIds:
    """IDs already joined with commas, e.g. ``"1,2,3"``."""

    value: str

    def ids_as_strings(self) -> list[str]:
        return [part.strip() for part in self.value.split(",") if part.strip()]


IdList = Union[ExplicitIds, JoinedIds]


def normalize_id_list(file_ids: IdList | Sequence[int | str] | str) -> str:
    """Return the comma-joined form the share endpoints expect.

    Raises:
        ValueError: more than 100 IDs, or none at all.
    """
    if isinstance(file_ids, str):
        file_ids = JoinedIds(file_ids)
    elif not isinstance(file_ids, (ExplicitIds, JoinedIds)):
        file_ids = ExplicitIds(list(file_ids))

    ids = file_ids.ids_as_strings()
    if not ids:
        raise ValueError("file_ids must name at least one file")
    if len(ids) > MAX_SHARE_FILES:
        raise ValueError(f"file_ids supports at most {MAX_SHARE_FILES} files, got {len(ids)}")
    return ",".join(ids)


def _traffic_options(
    traffic_switch: int | None,
    traffic_limit_switch: int | None,
    traffic_limit: int | None,
) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if traffic_switch is not None:
        if traffic_switch not in (1, 2, 3, 4):
            raise ValueError("traffic_switch must be 1, 2, 3 or 4")
        options["trafficSwitch"] = traffic_switch
    if traffic_limit_switch is not None:
        if traffic_limit_switch not in (1, 2):
            raise ValueError("traffic_limit_switch must be 1 or 2")
        options["trafficLimitSwitch"] = traffic_limit_switch
    if traffic_limit is not None:
        options["trafficLimit"] = traffic_limit
    return options


def _share_link(data: Any, *, paid: bool) -> ShareLink:
    data = data if isinstance(data, dict) else {}
    return ShareLink(
        share_id=to_int(data.get("shareID")),
        share_key=str(data.get("shareKey") or ""),
        paid=paid,
    )


class ShareClient:
    def __init__(self, pipeline: RequestPipeline) -> None:
        self._pipeline = pipeline

    async def create_share(
        self,
        name: str,
        expire_days: ShareExpireDays,
        file_ids: IdList | Sequence[int | str] | str,
        *,
        share_pwd: str | None = None,
        traffic_switch: int | None = None,
        traffic_limit_switch: int | None = None,
        traffic_limit: int | None = None,
    ) -> ShareLink:
        """Create a share link; ``expire_days=0`` never expires."""
        if expire_days not in SHARE_EXPIRE_DAYS:
            raise ValueError("expire_days must be one of 0, 1, 7 or 30")
        payload: dict[str, Any] = {
            "shareName": name,
            "shareExpire": expire_days,
            "fileIDList": normalize_id_list(file_ids),
        }
        if share_pwd is not None:
            payload["sharePwd"] = share_pwd
        payload.update(_traffic_options(traffic_switch, traffic_limit_switch, traffic_limit))

        envelope = await self._pipeline.post(CREATE_SHARE_PATH, payload)
        return _share_link(envelope.data, paid=False)

    async def create_paid_share(
        self,
        name: str,
        file_ids: IdList | Sequence[int | str] | str,
        pay_amount: int,
        *,
        is_reward: bool | None = None,
        resource_desc: str | None = None,
        traffic_switch: int | None = None,
        traffic_limit_switch: int | None = None,
        traffic_limit: int | None = None,
    ) -> ShareLink:
        if len(name) >= MAX_PAID_SHARE_NAME:
            raise ValueError(f"paid share name must be shorter than {MAX_PAID_SHARE_NAME} characters")
        if (
            isinstance(pay_amount, bool)
            or not isinstance(pay_amount, int)
            or not MIN_PAY_AMOUNT <= pay_amount <= MAX_PAY_AMOUNT
        ):
            raise ValueError(f"pay_amount must be an integer between {MIN_PAY_AMOUNT} and {MAX_PAY_AMOUNT}")
        payload: dict[str, Any] = {
            "shareName": name,
            "fileIDList": normalize_id_list(file_ids),
            "payAmount": pay_amount,
        }
        if is_reward is not None:
            payload["isReward"] = 1 if is_reward else 0
        if resource_desc is not None:
            payload["resourceDesc"] = resource_desc
        payload.update(_traffic_options(traffic_switch, traffic_limit_switch, traffic_limit))

        envelope = await self._pipeline.post(CREATE_PAID_SHARE_PATH, payload)
        return _share_link(envelope.data, paid=True)


__all__ = [
    "ShareClient",
    "ExplicitIds",
    "JoinedIds",
    "IdList",
    "normalize_id_list",
]
