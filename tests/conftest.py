"""Shared fixtures for the streamstats test suite."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402
import structlog  # noqa: E402

from streamstats.common import redis as redis_store  # noqa: E402


class FakeRedis:
    """The handful of list / sorted-set commands the partial store uses."""

    def __init__(self) -> None:
        self.lists: dict[str, list[str]] = {}
        self.zsets: dict[str, dict[str, float]] = {}

    def rpush(self, key: str, value: str) -> int:
        self.lists.setdefault(key, []).append(value)
        return len(self.lists[key])

    def lrange(self, key: str, start: int, end: int) -> list[str]:
        items = self.lists.get(key, [])
        return items[start:] if end == -1 else items[start : end + 1]

    def zadd(self, key: str, mapping: dict[str, float], nx: bool = False) -> int:
        zset = self.zsets.setdefault(key, {})
        added = 0
        for member, score in mapping.items():
            if member in zset and nx:
                continue
            added += member not in zset
            zset[member] = score
        return added

    def zrange(self, key: str, start: int, end: int) -> list[str]:
        members = sorted(self.zsets.get(key, {}).items(), key=lambda kv: kv[1])
        names = [m for m, _ in members]
        return names[start:] if end == -1 else names[start : end + 1]

    def zrem(self, key: str, member: str) -> int:
        return int(self.zsets.get(key, {}).pop(member, None) is not None)

    def delete(self, key: str) -> int:
        return int(self.lists.pop(key, None) is not None)


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(redis_store, "get_redis", lambda: fake)
    return fake


@pytest.fixture
def sales_csv(tmp_path: Path) -> Path:
    """A small table with a numeric, a categorical and a sparse column."""
    path = tmp_path / "sales.csv"
    path.write_text(
        "price,region,discount\n"
        "2,north,\n"
        "4,south,0.1\n"
        "4,north,\n"
        "4,east,0.2\n"
        "5,north,n/a\n"
        "5,south,\n"
        "7,north,0.1\n"
        "9,west,\n"
    )
    return path


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any configure_structlog() call a CLI test made."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
