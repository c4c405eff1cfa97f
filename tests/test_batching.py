import math

import pytest

from ingestion.batching import chunk_ids, split_into_batches
from ingestion.models import BatchStatus, Priority


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 6, 7, 9, 10, 31])
def test_batch_sizes_and_order(n):
    ids = list(range(100, 100 + n))
    batches = split_into_batches("ing-1", ids, Priority.LOW, created_at=1.0)

    assert len(batches) == math.ceil(n / 3)
    sizes = [len(batch.ids) for batch in batches]
    assert all(size == 3 for size in sizes[:-1])
    assert sizes[-1] == (n % 3 or 3)
    assert [item for batch in batches for item in batch.ids] == ids


def test_ten_ids_scenario():
    batches = split_into_batches("ing-1", list(range(1, 11)), Priority.MEDIUM, created_at=1.0)

    assert [batch.ids for batch in batches] == [[1, 2, 3], [4, 5, 6], [7, 8, 9], [10]]
    assert all(batch.status == BatchStatus.YET_TO_START for batch in batches)
    assert all(batch.priority == Priority.MEDIUM for batch in batches)
    assert all(batch.ingestion_id == "ing-1" for batch in batches)
    assert len({batch.batch_id for batch in batches}) == 4


def test_duplicate_ids_are_kept():
    batches = split_into_batches("ing-1", [5, 5, 5, 5], Priority.HIGH, created_at=1.0)
    assert [batch.ids for batch in batches] == [[5, 5, 5], [5]]


def test_custom_batch_size_and_ids():
    counter = iter(range(10))
    batches = split_into_batches(
        "ing-1", [1, 2, 3, 4, 5], Priority.HIGH, created_at=1.0, size=2,
        id_factory=lambda: f"b{next(counter)}",
    )
    assert [batch.batch_id for batch in batches] == ["b0", "b1", "b2"]
    assert [batch.ids for batch in batches] == [[1, 2], [3, 4], [5]]


def test_chunk_ids_rejects_non_positive_size():
    with pytest.raises(ValueError):
        chunk_ids([1, 2, 3], 0)


def test_batches_do_not_alias_input():
    ids = [1, 2, 3, 4]
    batches = split_into_batches("ing-1", ids, Priority.HIGH, created_at=1.0)
    ids[0] = 99
    assert batches[0].ids == [1, 2, 3]
