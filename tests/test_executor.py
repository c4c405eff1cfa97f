import asyncio
import random

import pytest

from ingestion.executor import BatchExecutor, SimulatedExternalAPI
from ingestion.models import Batch, BatchStatus, IngestionError, Priority
from ingestion.repository import InMemoryBatchRepository

from tests.helpers import RecordingWork


def make_batch(ids=(1, 2, 3)):
    return Batch(
        batch_id="batch-1",
        ingestion_id="ing-1",
        ids=list(ids),
        priority=Priority.MEDIUM,
        created_at=1.0,
    )


@pytest.mark.asyncio
async def test_successful_batch_is_completed_with_ordered_results():
    work = RecordingWork()
    executor = BatchExecutor(InMemoryBatchRepository(), work)
    batch = make_batch([7, 3, 5])

    outcome = await executor.execute(batch)

    assert outcome == BatchStatus.COMPLETED
    assert batch.status == BatchStatus.COMPLETED
    assert work.seen == [7, 3, 5]
    assert [result["id"] for result in batch.results] == [7, 3, 5]
    assert batch.started_at is not None
    assert batch.completed_at >= batch.started_at
    assert batch.error is None


@pytest.mark.asyncio
async def test_status_is_triggered_while_work_runs():
    observed = []
    batch = make_batch([1, 2])
    work = RecordingWork(on_call=lambda item_id: observed.append(batch.status))
    executor = BatchExecutor(InMemoryBatchRepository(), work)

    await executor.execute(batch)

    assert observed == [BatchStatus.TRIGGERED, BatchStatus.TRIGGERED]


@pytest.mark.asyncio
async def test_failure_marks_batch_failed_and_keeps_partial_results():
    work = RecordingWork(fail_on={2})
    executor = BatchExecutor(InMemoryBatchRepository(), work)
    batch = make_batch([1, 2, 3])

    outcome = await executor.execute(batch)

    assert outcome == BatchStatus.FAILED
    assert batch.status == BatchStatus.FAILED
    assert batch.error == "external API rejected id 2"
    assert [result["id"] for result in batch.results] == [1]
    assert batch.completed_at is not None
    # no retry and no further ids after the failure
    assert work.seen == [1]


@pytest.mark.asyncio
async def test_cancelled_batch_is_marked_failed_and_cancellation_propagates():
    started = asyncio.Event()

    async def hanging_work(item_id):
        started.set()
        await asyncio.Event().wait()

    executor = BatchExecutor(InMemoryBatchRepository(), hanging_work)
    batch = make_batch([1, 2])
    task = asyncio.create_task(executor.execute(batch))
    await started.wait()
    assert batch.status == BatchStatus.TRIGGERED

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert batch.status == BatchStatus.FAILED
    assert batch.error == "cancelled"
    assert batch.completed_at is not None


@pytest.mark.asyncio
async def test_executing_a_finished_batch_is_rejected():
    executor = BatchExecutor(InMemoryBatchRepository(), RecordingWork())
    batch = make_batch()
    await executor.execute(batch)

    with pytest.raises(IngestionError):
        await executor.execute(batch)
    assert batch.status == BatchStatus.COMPLETED


@pytest.mark.asyncio
async def test_simulated_api_returns_processed_result():
    api = SimulatedExternalAPI(0.0, 0.001, rng=random.Random(1))
    result = await api(42)
    assert result["id"] == 42
    assert result["data"] == "processed"
    assert "timestamp" in result


def test_simulated_api_rejects_bad_bounds():
    with pytest.raises(ValueError):
        SimulatedExternalAPI(0.5, 0.1)
