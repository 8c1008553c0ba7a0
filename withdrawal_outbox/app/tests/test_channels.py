from unittest.mock import MagicMock

import redis

from ..core.config import Settings
from ..services import LoggingChannel, RedisStreamChannel, build_channel


def test_redis_channel_appends_to_stream() -> None:
    client = MagicMock(spec=redis.Redis)
    channel = RedisStreamChannel(client, "bank-account-events", max_length=500)

    assert channel.publish('{"requestId": "r-1"}', kind="WITHDRAWAL") is True

    client.xadd.assert_called_once_with(
        "bank-account-events",
        {"kind": "WITHDRAWAL", "payload": '{"requestId": "r-1"}'},
        maxlen=500,
        approximate=True,
    )


def test_redis_errors_report_failure() -> None:
    client = MagicMock(spec=redis.Redis)
    client.xadd.side_effect = redis.ConnectionError("connection refused")
    channel = RedisStreamChannel(client, "bank-account-events")

    assert channel.publish("{}", kind="WITHDRAWAL") is False


def test_logging_channel_always_succeeds(caplog) -> None:
    with caplog.at_level("INFO"):
        assert LoggingChannel().publish("{}", kind="WITHDRAWAL") is True
    assert "channel.message" in caplog.text


def test_build_channel_defaults_to_logging() -> None:
    assert isinstance(build_channel(Settings(channel_backend="logging")), LoggingChannel)


def test_build_channel_redis_bounds_socket_waits() -> None:
    channel = build_channel(
        Settings(
            channel_backend="redis",
            redis_url="redis://localhost:1/0",
            channel_timeout_seconds=1.5,
        )
    )
    assert isinstance(channel, RedisStreamChannel)
    connection_kwargs = channel._client.connection_pool.connection_kwargs
    assert connection_kwargs["socket_timeout"] == 1.5
    assert connection_kwargs["socket_connect_timeout"] == 1.5
    channel.close()
