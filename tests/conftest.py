"""Pytest fixtures for sqs-jobs tests."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Ensure the package is importable when running pytest from the repo root
# without ``pip install -e .``
_src = Path(__file__).resolve().parent.parent / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from sqs_jobs.adapter import SQSJobAdapter  # noqa: E402
from sqs_jobs.memory import InMemoryTransport  # noqa: E402
from sqs_jobs.registry import QueueRegistry, WorkerRegistry  # noqa: E402

NOW = 1_700_000_000.0


@pytest.fixture
def now() -> float:
    return NOW


@pytest.fixture
def workers() -> WorkerRegistry:
    return WorkerRegistry()


@pytest.fixture
def queues() -> QueueRegistry:
    return QueueRegistry()


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def adapter(
    transport: InMemoryTransport,
    workers: WorkerRegistry,
    queues: QueueRegistry,
) -> SQSJobAdapter:
    return SQSJobAdapter(transport, workers=workers, queues=queues, clock=lambda: NOW)


@pytest.fixture(autouse=True)
def _reset_default_adapter() -> Iterator[None]:
    yield
    SQSJobAdapter.set_default(None)
