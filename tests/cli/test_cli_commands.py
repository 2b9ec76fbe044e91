import json

import pytest
from click.testing import CliRunner

from bullscope import __version__
from bullscope.cli.__main__ import app
from bullscope.conf import settings
from bullscope.exceptions import StoreUnavailable
from bullscope.stores.memory import InMemoryStore

runner = CliRunner()


class UnreachableStore(InMemoryStore):
    async def scan(self, cursor, match, count):
        raise StoreUnavailable("connection refused")


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("queue", "job", "info", "raw", "serve"):
        assert command in result.output


def test_queue_group_without_command():
    result = runner.invoke(app, ["queue"])
    assert result.exit_code == 0
    assert "bullscope queue list" in result.output


def test_info_version():
    result = runner.invoke(app, ["info", "version"])
    assert result.exit_code == 0
    assert f"bullscope version: {__version__}" in result.output


def test_info_store(configured_store):
    result = runner.invoke(app, ["info", "store"])
    assert result.exit_code == 0
    assert "InMemoryStore" in result.output
    assert "reachable" in result.output


def test_queue_list(configured_store):
    result = runner.invoke(app, ["queue", "list"])
    assert result.exit_code == 0
    assert "orders" in result.output
    assert "emails" in result.output


def test_queue_info(configured_store):
    result = runner.invoke(app, ["queue", "info", "orders"])
    assert result.exit_code == 0
    assert "Queue 'orders'" in result.output
    assert "orphaned" in result.output
    assert "11" in result.output


def test_job_list(configured_store):
    result = runner.invoke(app, ["job", "list", "orders", "--state", "failed"])
    assert result.exit_code == 0
    assert "Jobs of 'orders' (failed)" in result.output
    assert "No jobs found" not in result.output


def test_job_list_no_match(configured_store):
    result = runner.invoke(app, ["job", "list", "orders", "--query", "nothing-like-this"])
    assert result.exit_code == 0
    assert "No jobs found" in result.output


def test_job_list_unknown_state(configured_store):
    result = runner.invoke(app, ["job", "list", "orders", "--state", "bogus"])
    assert result.exit_code == 1
    assert "unknown state: bogus" in result.output


def test_job_inspect(configured_store):
    result = runner.invoke(app, ["job", "inspect", "6", "--queue", "orders"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["state"] == "failed"
    assert data["failedReason"] == "connection timeout"


def test_job_inspect_missing(configured_store):
    result = runner.invoke(app, ["job", "inspect", "404", "--queue", "orders"])
    assert result.exit_code == 1
    assert "job not found: 404" in result.output


def test_raw_keys(configured_store):
    result = runner.invoke(app, ["raw", "keys", "bull:*:id"])
    assert result.exit_code == 0
    assert "bull:orders:id" in result.output
    assert "bull:emails:id" in result.output


def test_raw_hgetall(configured_store):
    result = runner.invoke(app, ["raw", "hgetall", "bull:orders:3"])
    assert result.exit_code == 0
    assert json.loads(result.output)["name"] == "ship"


@pytest.mark.parametrize(
    "key, members",
    [
        ("bull:orders:wait", ["1", "2", "3"]),
        ("bull:orders:failed", ["5", "6"]),
    ],
)
def test_raw_range(configured_store, key, members):
    result = runner.invoke(app, ["raw", "range", key])
    assert result.exit_code == 0
    for member in members:
        assert f"• {member}" in result.output


def test_raw_range_not_a_collection(configured_store):
    result = runner.invoke(app, ["raw", "range", "bull:orders:1"])
    assert result.exit_code == 0
    assert "not a collection" in result.output


def test_raw_range_of_a_set_with_negative_stop(configured_store):
    configured_store.sadd("bull:orders:archived", "c", "a", "b")
    result = runner.invoke(app, ["raw", "range", "bull:orders:archived", "--start", "0", "--stop", "-2"])
    assert result.exit_code == 0
    assert "2 members" in result.output
    assert "• a" in result.output
    assert "• b" in result.output
    assert "• c" not in result.output


def test_unreachable_store(configured_store):
    settings.store = UnreachableStore()
    result = runner.invoke(app, ["queue", "list"])
    assert result.exit_code == 1
    assert "Store unavailable" in result.output
