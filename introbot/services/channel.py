# introbot/services/channel.py
"""
チャットプラットフォーム（Discord）のチャンネル操作。

REST API を httpx で直接叩くだけの薄いラッパー。
タイムアウトによる打ち切りはしない（遅延はそのイベントの処理だけが待つ）。
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from ..errors import ArtifactNotFound, ChannelError, ChannelUnreachable, PublishFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelHandle:
    channel_id: str
    name: Optional[str] = None

    def mention(self) -> str:
        return f"<#{self.channel_id}>"


@dataclass(frozen=True)
class Artifact:
    channel_id: str
    artifact_id: str


class Channel(Protocol):
    def resolve(self, channel_id: str) -> ChannelHandle:
        ...

    def send(self, handle: ChannelHandle, content: dict[str, Any]) -> str:
        ...

    def fetch_message(self, handle: ChannelHandle, artifact_id: str) -> Artifact:
        ...

    def delete_message(self, artifact: Artifact) -> None:
        ...


class DiscordChannel:
    def __init__(
        self,
        token: Optional[str],
        api_base: str = "https://discord.com/api/v10",
        client: Optional[httpx.Client] = None,
    ):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bot {token}"
        self._client = client or httpx.Client(
            base_url=api_base,
            headers=headers,
            timeout=None,
        )

    def close(self) -> None:
        self._client.close()

    def resolve(self, channel_id: str) -> ChannelHandle:
        try:
            res = self._client.get(f"/channels/{channel_id}")
            res.raise_for_status()
        except httpx.HTTPError as e:
            raise ChannelUnreachable(f"channel {channel_id} could not be fetched: {e}") from e
        data = res.json()
        return ChannelHandle(channel_id=str(data.get("id", channel_id)), name=data.get("name"))

    def send(self, handle: ChannelHandle, content: dict[str, Any]) -> str:
        try:
            res = self._client.post(f"/channels/{handle.channel_id}/messages", json=content)
            res.raise_for_status()
        except httpx.HTTPError as e:
            raise PublishFailed(f"send to channel {handle.channel_id} failed: {e}") from e
        return str(res.json()["id"])

    def fetch_message(self, handle: ChannelHandle, artifact_id: str) -> Artifact:
        try:
            res = self._client.get(f"/channels/{handle.channel_id}/messages/{artifact_id}")
        except httpx.HTTPError as e:
            raise ChannelError(f"fetch message {artifact_id} failed: {e}") from e
        if res.status_code == 404:
            raise ArtifactNotFound(f"message {artifact_id} not found in {handle.channel_id}")
        if res.is_error:
            raise ChannelError(f"fetch message {artifact_id} failed: HTTP {res.status_code}")
        return Artifact(channel_id=handle.channel_id, artifact_id=artifact_id)

    def delete_message(self, artifact: Artifact) -> None:
        try:
            res = self._client.delete(
                f"/channels/{artifact.channel_id}/messages/{artifact.artifact_id}"
            )
            res.raise_for_status()
        except httpx.HTTPError as e:
            raise ChannelError(f"delete message {artifact.artifact_id} failed: {e}") from e
