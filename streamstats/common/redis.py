"""Redis store for partial summaries awaiting a distributed reduction.

Each machine (or process) summarising its share of the data publishes the
serialised column summaries under a job id; a reducer later fetches every
partial for that job and merges them.
"""

from __future__ import annotations

import json
import os
import time

import redis
import structlog

from streamstats.common.constants import JOBS_INDEX, KEY_PREFIX

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return a shared Redis client (lazy singleton)."""
    global _client
    if _client is None:
        _client = redis.Redis(
            host=os.environ.get("REDIS_HOST", "localhost"),
            port=int(os.environ.get("REDIS_PORT", "6379")),
            db=int(os.environ.get("REDIS_DB", "0")),
            password=os.environ.get("REDIS_PASSWORD") or None,
            decode_responses=True,
        )
    return _client


def _partials_key(job_id: str) -> str:
    return f"{KEY_PREFIX}:job:{job_id}:partials"


def store_partial(job_id: str, columns: list[dict]) -> int:
    """Append one partial (a list of serialised column summaries) to *job_id*.

    Returns the number of partials now stored for the job.
    """
    r = get_redis()
    size = r.rpush(_partials_key(job_id), json.dumps(columns))
    r.zadd(JOBS_INDEX, {job_id: time.time()}, nx=True)
    structlog.get_logger("redis_store").info(
        "partial_published", job=job_id, columns=len(columns), partials=size,
    )
    return size


def get_partials(job_id: str) -> list[list[dict]]:
    """Return every partial stored for *job_id*, oldest first."""
    raw = get_redis().lrange(_partials_key(job_id), 0, -1)
    return [json.loads(p) for p in raw]


def get_all_jobs() -> list[str]:
    """Return all job ids ordered by first publication (oldest first)."""
    return get_redis().zrange(JOBS_INDEX, 0, -1)


def clear_job(job_id: str) -> None:
    """Drop a job's partials and its index entry."""
    r = get_redis()
    r.delete(_partials_key(job_id))
    r.zrem(JOBS_INDEX, job_id)
    structlog.get_logger("redis_store").info("job_cleared", job=job_id)
