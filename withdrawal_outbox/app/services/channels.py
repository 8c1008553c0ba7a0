"""Message channels the outbox publisher can deliver to.

A channel is anything with ``publish(message, *, kind) -> bool``. Returning
``False`` or raising both count as a failed delivery; the event stays pending
and is retried on the next publisher run.
"""

from __future__ import annotations

import logging
from typing import Protocol

import redis

from ..core.config import Settings


logger = logging.getLogger(__name__)


class MessageChannel(Protocol):
    def publish(self, message: str, *, kind: str) -> bool:
        ...


class LoggingChannel:
    """Writes every message to the log. Development default."""

    def __init__(self, log_level: int = logging.INFO) -> None:
        self._log_level = log_level

    def publish(self, message: str, *, kind: str) -> bool:
        logger.log(self._log_level, "channel.message", extra={"kind": kind, "body": message})
        return True


class InMemoryChannel:
    """Keeps published messages in a list; can be switched to failing."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.messages: list[tuple[str, str]] = []
        self.attempts = 0

    def publish(self, message: str, *, kind: str) -> bool:
        self.attempts += 1
        if self.fail:
            return False
        self.messages.append((kind, message))
        return True

    @property
    def bodies(self) -> list[str]:
        return [message for _, message in self.messages]

    def clear(self) -> None:
        self.messages.clear()
        self.attempts = 0


class RedisStreamChannel:
    """Appends messages to a Redis stream with ``XADD``."""

    def __init__(
        self,
        client: redis.Redis,
        stream: str,
        max_length: int = 100_000,
    ) -> None:
        self._client = client
        self._stream = stream
        self._max_length = max_length

    @classmethod
    def from_url(
        cls,
        url: str,
        stream: str,
        max_length: int = 100_000,
        timeout_seconds: float = 2.0,
    ) -> "RedisStreamChannel":
        # A stuck broker fails the publish instead of stalling the run.
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client, stream, max_length)

    def publish(self, message: str, *, kind: str) -> bool:
        try:
            self._client.xadd(
                self._stream,
                {"kind": kind, "payload": message},
                maxlen=self._max_length,
                approximate=True,
            )
        except redis.RedisError as exc:
            logger.warning(
                "channel.redis.publish_failed",
                extra={"stream": self._stream, "error": str(exc)},
            )
            return False
        return True

    def close(self) -> None:
        self._client.close()


def build_channel(settings: Settings) -> MessageChannel:
    if settings.channel_backend == "redis":
        return RedisStreamChannel.from_url(
            settings.redis_url,
            settings.channel_stream,
            settings.channel_max_length,
            settings.channel_timeout_seconds,
        )
    return LoggingChannel()
