from __future__ import annotations

from ._http.pipeline import RequestPipeline
from .types import UserInfo, build_user_info

USER_INFO_PATH = "/api/v1/user/info"


class UserClient:
    def __init__(self, pipeline: RequestPipeline) -> None:
        self._pipeline = pipeline

    async def get_user_info(self) -> UserInfo:
        envelope = await self._pipeline.get(USER_INFO_PATH)
        return build_user_info(envelope.data if isinstance(envelope.data, dict) else {})


__all__ = ["UserClient"]
