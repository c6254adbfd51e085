"""Tests for SQSJobAdapter (enqueue, enqueue_at, enqueue_all)."""

from __future__ import annotations

import hashlib
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import sqs_jobs
from sqs_jobs.adapter import SQSJobAdapter
from sqs_jobs.exceptions import InvalidDelayError, JobSerializationError
from sqs_jobs.inbound import JobWrapper
from sqs_jobs.job import BackgroundJob
from sqs_jobs.memory import InMemoryTransport
from sqs_jobs.message import MARKER_ATTRIBUTE
from sqs_jobs.options import SendMessageOptions
from sqs_jobs.registry import QueueRegistry, WorkerRegistry

NOW = 1_700_000_000.0


class ExampleJob:
    """IJob with the body from the worked example."""

    def __init__(self, queue_name: str = "orders.fifo") -> None:
        self.queue_name = queue_name
        self.scheduled_at: float | None = None
        self.send_options = SendMessageOptions()

    def serialize(self) -> dict[str, int]:
        return {"a": 1}


@pytest.mark.asyncio
async def test_enqueue_example_fifo_job(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    job = ExampleJob()
    resolved = await adapter.enqueue(job)

    [message] = transport.messages("orders.fifo")
    assert MARKER_ATTRIBUTE in message.message_attributes
    assert message.deduplication_id == hashlib.sha256(b'{"a":1}').hexdigest()
    assert "DelaySeconds" not in message.to_send_kwargs()
    assert resolved == message.options
    assert job.send_options == message.options


@pytest.mark.asyncio
async def test_returned_options_are_independent_copies(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    job = BackgroundJob(job_class="Mailer", queue_name="mail")
    resolved = await adapter.enqueue(job)
    [message] = transport.messages("mail")
    assert resolved == job.send_options == message.options
    assert resolved is not job.send_options
    assert resolved is not message.options

    resolved.message_attributes.clear()
    assert MARKER_ATTRIBUTE in job.send_options.message_attributes
    assert MARKER_ATTRIBUTE in message.message_attributes


@pytest.mark.asyncio
async def test_second_identical_enqueue_same_dedup_id(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    first = await adapter.enqueue(ExampleJob())
    second = await adapter.enqueue(ExampleJob())
    assert first.message_deduplication_id == second.message_deduplication_id
    # the FIFO queue drops the duplicate
    assert len(transport.messages("orders.fifo")) == 1
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_enqueue_merges_options_over_job_options(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    job = BackgroundJob(
        job_class="Mailer",
        queue_name="mail",
        send_options={"delay_seconds": 1, "message_group_id": "g"},
    )
    resolved = await adapter.enqueue(job, {"delay_seconds": 30})
    assert resolved.delay_seconds == 30
    assert resolved.message_group_id == "g"
    assert resolved.message_deduplication_id is None
    assert job.send_options == resolved
    assert transport.calls[0][0] == "send_one"


@pytest.mark.asyncio
async def test_enqueue_registers_worker_and_caches_queue(
    adapter: SQSJobAdapter,
    transport: InMemoryTransport,
    workers: WorkerRegistry,
    queues: QueueRegistry,
) -> None:
    await adapter.enqueue(BackgroundJob(job_class="A", queue_name="q"))
    await adapter.enqueue(BackgroundJob(job_class="B", queue_name="q"))
    assert workers.get("q") is JobWrapper
    assert queues.get("q") is not None
    assert transport.resolve_calls == ["q"]


@pytest.mark.asyncio
async def test_enqueue_at_sets_delay(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    job = BackgroundJob(job_class="Later", queue_name="q")
    resolved = await adapter.enqueue_at(job, NOW + 300.2)
    assert resolved.delay_seconds == 300
    assert transport.messages("q")[0].to_send_kwargs()["DelaySeconds"] == 300


@pytest.mark.asyncio
async def test_enqueue_at_past_time_sends_immediately(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    job = BackgroundJob(job_class="Late", queue_name="q")
    resolved = await adapter.enqueue_at(job, NOW - 10)
    assert resolved.delay_seconds == -10
    assert transport.messages("q")[0].to_send_kwargs()["DelaySeconds"] == 0


@pytest.mark.asyncio
async def test_enqueue_at_beyond_limit_raises_without_sending(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    job = BackgroundJob(job_class="TooLate", queue_name="q")
    with pytest.raises(InvalidDelayError, match="maximum allowed delay"):
        await adapter.enqueue_at(job, NOW + 901)
    assert transport.calls == []
    assert job.send_options == SendMessageOptions()


@pytest.mark.asyncio
async def test_enqueue_serialization_error_surfaces(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    job = BackgroundJob(job_class="Bad", queue_name="q", arguments=[object()])
    with pytest.raises(JobSerializationError):
        await adapter.enqueue(job)
    assert transport.calls == []


@pytest.mark.asyncio
async def test_enqueue_all_returns_count_and_writes_back(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    jobs = [
        BackgroundJob(job_class="A", queue_name="one"),
        BackgroundJob(job_class="B", queue_name="two.fifo"),
        BackgroundJob(job_class="C", queue_name="one", scheduled_at=NOW + 60),
    ]
    assert await adapter.enqueue_all(jobs) == 3
    assert len(transport.batch_calls()) == 2
    for job in jobs:
        assert MARKER_ATTRIBUTE in job.send_options.message_attributes
    assert jobs[1].send_options.message_deduplication_id is not None
    assert jobs[0].send_options.message_deduplication_id is None
    assert jobs[2].send_options.delay_seconds == 60


@pytest.mark.asyncio
async def test_transport_errors_propagate(
    workers: WorkerRegistry, queues: QueueRegistry
) -> None:
    transport = InMemoryTransport()
    transport.send_one = AsyncMock(  # type: ignore[method-assign]
        side_effect=ConnectionError("reset")
    )
    adapter = SQSJobAdapter(transport, workers=workers, queues=queues)
    with pytest.raises(ConnectionError, match="reset"):
        await adapter.enqueue(BackgroundJob(job_class="A", queue_name="q"))


@pytest.mark.asyncio
async def test_module_level_functions_use_default_adapter(
    adapter: SQSJobAdapter, transport: InMemoryTransport
) -> None:
    SQSJobAdapter.set_default(adapter)
    job = BackgroundJob(job_class="A", queue_name="q")
    await sqs_jobs.enqueue(job)
    await sqs_jobs.enqueue_at(BackgroundJob(job_class="B", queue_name="q"), NOW + 5)
    more = [BackgroundJob(job_class="C", queue_name="r")]
    assert await sqs_jobs.enqueue_all(more) == 1
    assert len(transport.messages("q")) == 2
    assert len(transport.messages("r")) == 1


def test_default_adapter_built_lazily_from_settings() -> None:
    sentinel = MagicMock(spec=SQSJobAdapter)
    with patch.object(SQSJobAdapter, "from_settings", return_value=sentinel) as build:
        assert SQSJobAdapter.default() is sentinel
        assert SQSJobAdapter.default() is sentinel
    build.assert_called_once_with()


def test_from_settings_wires_sqs_transport() -> None:
    from sqs_jobs.config import SQSJobsSettings
    from sqs_jobs.sqs import SQSTransport

    settings = SQSJobsSettings(
        region_name="eu-west-1", identity_field="id", queue_name_prefix="prod-"
    )
    adapter = SQSJobAdapter.from_settings(settings)
    assert isinstance(adapter._transport, SQSTransport)
    assert adapter._transport._prefix == "prod-"
    assert adapter._builder.serializer.identity_field == "id"
