"""Client for the remote sheet-backed word store."""
import asyncio
import dataclasses
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Set

import httpx

from lernwort.config import settings
from lernwort.exceptions import TransientRemoteError
from lernwort.models.word import WordRecord, now_ms
from lernwort.monitoring import push_dispatches, records_pulled

logger = logging.getLogger(__name__)


class SheetAction(Enum):
    """Write actions understood by the remote store."""
    ADD_WORD = "ADD_WORD"
    UPDATE_PROGRESS = "UPDATE_PROGRESS"
    DELETE_WORD = "DELETE_WORD"


def build_payload(action: SheetAction, record: WordRecord) -> Dict[str, Any]:
    """Serialize only the fields the remote store needs for an action."""
    if action is SheetAction.ADD_WORD:
        data = {
            "id": record.id,
            "word": record.word,
            "gender": record.gender,
            "meaning": record.meaning,
            "ipa": record.ipa or "",
            "partOfSpeech": record.part_of_speech or "",
            "plural": record.plural or "",
            "createdAt": record.created_at,
            "masteryLevel": record.mastery_level or 0,
        }
    elif action is SheetAction.UPDATE_PROGRESS:
        data = {
            "wordId": record.id,
            "word": record.word,
            "masteryLevel": record.mastery_level,
        }
    else:
        data = {
            "id": record.id,
            "word": record.word,
        }
    return {"action": action.value, "data": data, "timestamp": now_ms()}


class RemoteWordStoreClient:
    """Pull-all and push-one operations against a caller-supplied endpoint.

    Pushes are one-way notifications: a ``True`` result from :meth:`push_one`
    only means the request was dispatched, never that the remote applied it.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        """
        Initialize the client.

        Args:
            http_client: Optional pre-configured HTTP client
            timeout: Request timeout in seconds, defaults to SYNC_TIMEOUT
        """
        self._client = http_client
        self._timeout = timeout if timeout is not None else settings.sync.timeout
        self._pending: Set[asyncio.Task] = set()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._client

    async def pull_all(self, url: str) -> List[WordRecord]:
        """Fetch the whole remote collection.

        Raises TransientRemoteError when the endpoint is unreachable or
        answers with an error status. A body that is not a JSON array is
        treated as "no remote data" and yields an empty list.
        """
        if not url:
            return []

        client = await self._get_client()
        try:
            response = await client.get(url, params={"_t": str(now_ms())})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientRemoteError(f"Remote store answered {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransientRemoteError(f"Could not reach remote store: {e}") from e

        try:
            data = json.loads(response.text)
        except json.JSONDecodeError:
            logger.error("Remote store returned invalid JSON: %.200s", response.text)
            return []

        if not isinstance(data, list):
            logger.error(f"Remote store returned {type(data).__name__} instead of a list")
            return []

        records = [WordRecord.from_dict(item) for item in data if isinstance(item, dict)]
        records_pulled.inc(len(records))
        logger.info(f"Pulled {len(records)} records from remote store")
        return records

    async def push_one(self, url: str, action: SheetAction, record: WordRecord) -> bool:
        """Send one write to the remote store without inspecting the response.

        Returns True once the request was dispatched, False when the
        transport failed. Never raises for transport problems.
        """
        if not url:
            return False

        payload = build_payload(action, record)
        client = await self._get_client()
        try:
            await client.post(
                url,
                content=json.dumps(payload, ensure_ascii=False),
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Failed to push {action.value} for word {record.word}: {e}")
            push_dispatches.labels(action=action.value, result="failed").inc()
            return False

        push_dispatches.labels(action=action.value, result="dispatched").inc()
        logger.debug(f"Dispatched {action.value} for word {record.word}")
        return True

    def push_in_background(self, url: str, action: SheetAction, record: WordRecord) -> asyncio.Task:
        """Schedule a push without waiting for it. Must be called from a running loop.

        The record is copied so the push carries its state at scheduling time.
        """
        task = asyncio.create_task(self.push_one(url, action, dataclasses.replace(record)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending_pushes(self) -> int:
        """Number of background pushes still in flight."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for all background pushes dispatched so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
