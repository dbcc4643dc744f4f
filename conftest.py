import os
from typing import Any

import pytest
import pytest_asyncio

TEST_REDIS_DB = 15
TEST_REDIS_URL = os.getenv("TEST_REDIS_URL", f"redis://localhost:6379/{TEST_REDIS_DB}")


class RecordingRedis:
    """Stand-in for ``redis.asyncio.Redis`` that records commands.

    Replies are queued per command name; an exception instance in the queue
    is raised instead of returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.replies: dict[str, list[Any]] = {}
        self.ping_reply: Any = True
        self.closed = False

    def reply(self, command: str, *values: Any) -> None:
        self.replies.setdefault(command, []).extend(values)

    @property
    def last_args(self) -> list[Any]:
        return list(self.calls[-1][0][1:])

    async def execute_command(self, *args: Any, **options: Any) -> Any:
        self.calls.append((args, options))
        queue = self.replies.get(args[0], [])
        value = queue.pop(0) if queue else None
        if isinstance(value, BaseException):
            raise value
        return value

    async def ping(self) -> Any:
        if isinstance(self.ping_reply, BaseException):
            raise self.ping_reply
        return self.ping_reply

    async def aclose(self) -> None:
        self.closed = True


def _redis_bloom_available() -> bool:
    """Check if an external Redis with RedisBloom is reachable."""
    try:
        import redis

        r = redis.Redis.from_url(TEST_REDIS_URL, decode_responses=True)
        r.ping()
        modules = r.module_list()
        r.close()
    except Exception:
        return False
    return any(str(m.get("name", "")).lower() == "bf" for m in modules)


def pytest_addoption(parser):
    parser.addoption(
        "--use-external-redis",
        action="store_true",
        default=False,
        help="run integration tests against the Redis server at TEST_REDIS_URL",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "redis: mark test as requiring Redis with RedisBloom")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--use-external-redis") and _redis_bloom_available():
        return
    skip_redis = pytest.mark.skip(
        reason="need --use-external-redis and a RedisBloom server at TEST_REDIS_URL"
    )
    for item in items:
        if item.get_closest_marker("redis") is not None:
            item.add_marker(skip_redis)


@pytest.fixture
def fake_redis() -> RecordingRedis:
    return RecordingRedis()


@pytest.fixture
def bloom_service(fake_redis):
    from redis_bloom_service import BloomFilterOptions, BloomFilterService, RedisConnectionProvider

    provider = RedisConnectionProvider(BloomFilterOptions.from_client(fake_redis))
    return BloomFilterService(provider)


@pytest_asyncio.fixture
async def live_service():
    """Service bound to the external test server, flushed before and after."""
    import redis

    from redis_bloom_service import BloomFilterOptions, BloomFilterService, RedisConnectionProvider

    def _flush() -> None:
        r = redis.Redis.from_url(TEST_REDIS_URL)
        r.flushdb()
        r.close()

    _flush()
    provider = RedisConnectionProvider(BloomFilterOptions.from_redis_url(TEST_REDIS_URL))
    yield BloomFilterService(provider)
    await provider.close()
    _flush()
