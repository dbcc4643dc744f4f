from __future__ import annotations

import json

import pytest
from redis.exceptions import ResponseError
from typer.testing import CliRunner

from redis_bloom_service import BloomFilterOptions, BloomFilterService, RedisConnectionProvider
from redis_bloom_service import cli


@pytest.fixture
def recorded(monkeypatch, fake_redis):
    seen: dict[str, BloomFilterOptions] = {}

    def fake_create_service(options: BloomFilterOptions) -> BloomFilterService:
        seen["options"] = options
        provider = RedisConnectionProvider(BloomFilterOptions.from_client(fake_redis))
        return BloomFilterService(provider)

    monkeypatch.setattr(cli, "_create_service", fake_create_service)
    return seen


def test_reserve_passes_connection_options(recorded, fake_redis) -> None:
    fake_redis.reply("BF.RESERVE", "OK")
    runner = CliRunner()
    result = runner.invoke(
        cli.app,
        ["--host", "cache", "--port", "7000", "--db", "2"]
        + ["reserve", "users", "0.01", "1000", "--expansion", "0"],
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "true"
    assert fake_redis.last_args == ["users", 0.01, 1000, "NONSCALING"]
    connection = recorded["options"].connection
    assert (connection.host, connection.port, connection.db) == ("cache", 7000, 2)


def test_url_option_overrides_host(recorded, fake_redis) -> None:
    fake_redis.reply("BF.CARD", 3)
    result = CliRunner().invoke(cli.app, ["--url", "redis://cache:6379/1", "card", "users"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "3"
    assert recorded["options"].connection.url == "redis://cache:6379/1"


def test_madd_prints_json_list(recorded, fake_redis) -> None:
    fake_redis.reply("BF.MADD", [1, 0])
    result = CliRunner().invoke(cli.app, ["madd", "users", "a", "b"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [1, 0]


def test_info_single_attribute(recorded, fake_redis) -> None:
    fake_redis.reply("BF.INFO", [100])
    result = CliRunner().invoke(cli.app, ["info", "users", "capacity"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "100"
    assert fake_redis.last_args == ["users", "CAPACITY"]


def test_insert_flags(recorded, fake_redis) -> None:
    fake_redis.reply("BF.INSERT", [1])
    result = CliRunner().invoke(
        cli.app, ["insert", "users", "a", "--capacity", "500", "--flag", "nocreate"]
    )
    assert result.exit_code == 0, result.output
    assert fake_redis.last_args == ["users", "CAPACITY", "500", "NOCREATE", "ITEMS", "a"]


def test_typed_error_exits_with_code_one(recorded, fake_redis) -> None:
    fake_redis.reply("BF.RESERVE", ResponseError("item exists"))
    result = CliRunner().invoke(cli.app, ["reserve", "users", "0.01", "1000"])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_ping_failure_exits_with_code_one(recorded, fake_redis) -> None:
    fake_redis.ping_reply = False
    result = CliRunner().invoke(cli.app, ["ping"])
    assert result.exit_code == 1
    assert result.output.strip() == "false"
