"""Reconciliation of the local word collection with the remote store."""
import dataclasses
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from lernwort.models.word import WordRecord
from lernwort.monitoring import records_adopted, sync_duration, sync_runs
from lernwort.services.collection import WordCollection
from lernwort.services.local_store import LocalStore
from lernwort.services.sheet_client import RemoteWordStoreClient, SheetAction

logger = logging.getLogger(__name__)

LAST_SYNC_FORMAT = "%H:%M:%S %d/%m/%Y"


@dataclass
class SyncReport:
    """Outcome of one completed sync."""
    pulled: int
    adopted: int
    raised: int
    pushed: int
    synced_at: str


def find_match(record: WordRecord, candidates: Iterable[WordRecord]) -> Optional[WordRecord]:
    """First candidate with the same id or the same word, ignoring case."""
    return next((candidate for candidate in candidates if candidate.matches(record)), None)


def merge_records(local: List[WordRecord], remote: List[WordRecord]) -> Tuple[List[WordRecord], int, int]:
    """Merge remote records into copies of the local ones.

    Unmatched remote records are appended as they are. A matched local
    record keeps all of its fields except mastery, which becomes the
    larger of the two values. Returns the merged list together with the
    number of adopted and raised records.
    """
    merged = [dataclasses.replace(record) for record in local]
    adopted = 0
    raised = 0

    for remote_record in remote:
        match = find_match(remote_record, merged)
        if match is None:
            merged.append(remote_record)
            adopted += 1
            continue
        if remote_record.mastery_level > match.mastery_level:
            match.mastery_level = remote_record.mastery_level
            raised += 1

    return merged, adopted, raised


def compute_push_queue(local: List[WordRecord], remote: List[WordRecord]) -> List[WordRecord]:
    """Local records that have no counterpart in the pulled remote set."""
    return [record for record in local if find_match(record, remote) is None]


def sort_newest_first(words: List[WordRecord]) -> List[WordRecord]:
    """Order records by creation time, newest first."""
    return sorted(words, key=lambda w: w.created_at, reverse=True)


class SyncService:
    """Pull, merge and push between the local collection and the remote store.

    ``is_syncing`` is a busy flag for callers; the service itself does not
    prevent two concurrent ``sync`` calls.
    """

    def __init__(self, collection: WordCollection, client: RemoteWordStoreClient, store: LocalStore):
        """Initialize the service with its collaborators."""
        self.collection = collection
        self.client = client
        self.store = store
        self.is_syncing = False

    @property
    def last_synced_at(self) -> Optional[str]:
        """Human-readable time of the last successful sync."""
        return self.store.get_last_synced()

    async def sync(self, url: Optional[str] = None) -> Optional[SyncReport]:
        """Run one sync cycle.

        Returns None, leaving the local collection untouched, when no url is
        configured or the pull fails. Pushes of local-only records are
        dispatched in the background and are not awaited.
        """
        url = url or self.store.get_sheet_url()
        if not url:
            logger.info("No remote store configured, skipping sync")
            return None

        self.is_syncing = True
        started = time.perf_counter()
        try:
            try:
                remote = await self.client.pull_all(url)
            except Exception as e:
                logger.error(f"Sync aborted, could not pull remote records: {e}")
                sync_runs.labels(result="failed").inc()
                return None

            local = self.collection.words
            merged, adopted, raised = merge_records(local, remote)
            push_queue = compute_push_queue(local, remote)

            self.collection.replace(sort_newest_first(merged))
            synced_at = datetime.now().strftime(LAST_SYNC_FORMAT)
            self.store.set_last_synced(synced_at)

            for record in push_queue:
                self.client.push_in_background(url, SheetAction.ADD_WORD, record)

            records_adopted.inc(adopted)
            sync_runs.labels(result="ok").inc()
            sync_duration.observe(time.perf_counter() - started)
            logger.info(
                "Sync finished: %d pulled, %d adopted, %d raised, %d pushed",
                len(remote),
                adopted,
                raised,
                len(push_queue),
            )
            return SyncReport(
                pulled=len(remote),
                adopted=adopted,
                raised=raised,
                pushed=len(push_queue),
                synced_at=synced_at,
            )
        finally:
            self.is_syncing = False
