"""Tests for the remote word store client."""
import json
from typing import List
from urllib.parse import parse_qs

import httpx
import pytest

from lernwort.exceptions import TransientRemoteError
from lernwort.models.word import WordRecord
from lernwort.services.sheet_client import RemoteWordStoreClient, SheetAction, build_payload

SHEET_URL = "https://script.example.com/macros/s/abc/exec"


def make_client(handler) -> RemoteWordStoreClient:
    return RemoteWordStoreClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_pull_all_adds_cache_busting_parameter() -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=[])

    client = make_client(handler)
    await client.pull_all(SHEET_URL + "?sheet=words")

    assert requests[0].method == "GET"
    query = parse_qs(requests[0].url.query.decode())
    assert query["sheet"] == ["words"]
    assert query["_t"][0].isdigit()


@pytest.mark.asyncio
async def test_pull_all_coerces_loose_records() -> None:
    body = [
        {"id": "w1", "word": "Hund", "gender": "der", "meaning": "dog", "masteryLevel": "40",
         "createdAt": 1700000000000, "synonyms": ["Köter"], "examples": [{"german": "Der Hund bellt."}]},
        {"word": "Katze", "masteryLevel": "viel", "createdAt": "gestern", "synonyms": "none"},
    ]

    client = make_client(lambda request: httpx.Response(200, json=body))
    records = await client.pull_all(SHEET_URL)

    assert len(records) == 2
    hund, katze = records
    assert hund.id == "w1"
    assert hund.gender == "der"
    assert hund.mastery_level == 40
    assert hund.created_at == 1700000000000
    assert hund.synonyms == ["Köter"]
    assert hund.examples == [{"german": "Der Hund bellt."}]

    assert katze.id  # freshly generated
    assert katze.gender == "none"
    assert katze.meaning == ""
    assert katze.ipa == ""
    assert katze.part_of_speech == "noun"
    assert katze.plural == ""
    assert katze.mastery_level == 0
    assert katze.created_at > 1700000000000
    assert katze.synonyms == []
    assert katze.examples == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["not json", '{"error": "sheet missing"}', "42"])
async def test_pull_all_fails_open_on_unexpected_body(body: str) -> None:
    client = make_client(lambda request: httpx.Response(200, text=body))
    assert await client.pull_all(SHEET_URL) == []


@pytest.mark.asyncio
async def test_pull_all_without_url_returns_nothing() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await make_client(handler).pull_all("") == []


@pytest.mark.asyncio
async def test_pull_all_raises_on_error_status() -> None:
    client = make_client(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(TransientRemoteError):
        await client.pull_all(SHEET_URL)


@pytest.mark.asyncio
async def test_pull_all_raises_on_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(TransientRemoteError):
        await make_client(handler).pull_all(SHEET_URL)


@pytest.mark.asyncio
async def test_push_one_sends_minimal_add_payload() -> None:
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(500)  # response is never inspected

    record = WordRecord(id="w1", word="Hund", gender="der", meaning="dog", ipa="hʊnt",
                        plural="Hunde", synonyms=["Köter"], created_at=1, mastery_level=30)
    dispatched = await make_client(handler).push_one(SHEET_URL, SheetAction.ADD_WORD, record)

    assert dispatched is True
    assert bodies[0]["action"] == "ADD_WORD"
    assert isinstance(bodies[0]["timestamp"], int)
    assert bodies[0]["data"] == {
        "id": "w1",
        "word": "Hund",
        "gender": "der",
        "meaning": "dog",
        "ipa": "hʊnt",
        "partOfSpeech": "noun",
        "plural": "Hunde",
        "createdAt": 1,
        "masteryLevel": 30,
    }


def test_update_and_delete_payloads() -> None:
    record = WordRecord(id="w2", word="Katze", meaning="cat", mastery_level=55)

    update = build_payload(SheetAction.UPDATE_PROGRESS, record)
    delete = build_payload(SheetAction.DELETE_WORD, record)

    assert update["action"] == "UPDATE_PROGRESS"
    assert update["data"] == {"wordId": "w2", "word": "Katze", "masteryLevel": 55}
    assert delete["action"] == "DELETE_WORD"
    assert delete["data"] == {"id": "w2", "word": "Katze"}


@pytest.mark.asyncio
async def test_push_one_reports_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    record = WordRecord(id="w3", word="Maus")
    assert await make_client(handler).push_one(SHEET_URL, SheetAction.DELETE_WORD, record) is False


@pytest.mark.asyncio
async def test_push_one_reports_malformed_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    record = WordRecord(id="w4", word="Vogel")
    assert await make_client(handler).push_one("http://[::1", SheetAction.ADD_WORD, record) is False


@pytest.mark.asyncio
async def test_pull_all_raises_on_malformed_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(TransientRemoteError):
        await make_client(handler).pull_all("http://[::1")


@pytest.mark.asyncio
async def test_background_pushes_are_tracked_until_drained() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content)["data"]["word"])
        return httpx.Response(200)

    client = make_client(handler)
    for word in ("Hund", "Katze"):
        client.push_in_background(SHEET_URL, SheetAction.ADD_WORD, WordRecord(id=word, word=word))

    await client.drain()

    assert sorted(seen) == ["Hund", "Katze"]
    assert client.pending_pushes == 0
    await client.close()
