"""Overall ingestion status derived from batch statuses."""

from typing import Iterable

from ingestion.models import BatchStatus, IngestionOverallStatus


def aggregate_status(statuses: Iterable[BatchStatus]) -> IngestionOverallStatus:
    """Collapse batch statuses into one ingestion status.

    All ``yet_to_start`` gives ``yet_to_start`` and all ``completed`` gives
    ``completed``. Every other mix, including one with ``failed`` batches,
    reports ``triggered``.
    """
    seen = set(statuses)
    if not seen:
        raise ValueError("an ingestion always owns at least one batch")
    if seen == {BatchStatus.YET_TO_START}:
        return IngestionOverallStatus.YET_TO_START
    if seen == {BatchStatus.COMPLETED}:
        return IngestionOverallStatus.COMPLETED
    return IngestionOverallStatus.TRIGGERED
