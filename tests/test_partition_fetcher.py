import asyncio
import json

import httpx
import pytest

from engine_client import EngineClient
from partition_fetcher import PartitionFetcher


@pytest.mark.anyio
async def test_fetch_partitions(client):
    fetcher = PartitionFetcher(client)
    assert await fetcher.fetch_partitions("/disks/A.mia") is True
    assert [p.name for p in fetcher.partitions] == ["Part1", "Part2"]
    assert fetcher.partitions[0].fit == "F"
    assert fetcher.disk_path == "/disks/A.mia"
    assert fetcher.find("Part2").size == 2048
    assert fetcher.loading is False


@pytest.mark.anyio
async def test_failed_fetch_keeps_previous_list(client):
    fetcher = PartitionFetcher(client)
    await fetcher.fetch_partitions("/disks/A.mia")

    assert await fetcher.fetch_partitions("/disks/missing.mia") is False
    assert fetcher.error
    assert [p.name for p in fetcher.partitions] == ["Part1", "Part2"]
    assert fetcher.disk_path == "/disks/A.mia"


@pytest.mark.anyio
async def test_late_response_for_older_disk_is_discarded():
    release_a = asyncio.Event()

    async def handler(request):
        path = json.loads(request.content)["path"]
        if path == "/disks/A.mia":
            await release_a.wait()
            return httpx.Response(200, json={"partitions": [{"name": "FromA"}]})
        return httpx.Response(200, json={"partitions": [{"name": "FromB"}]})

    client = EngineClient("http://engine", transport=httpx.MockTransport(handler))
    fetcher = PartitionFetcher(client)

    slow = asyncio.ensure_future(fetcher.fetch_partitions("/disks/A.mia"))
    await asyncio.sleep(0)
    assert await fetcher.fetch_partitions("/disks/B.mia") is True

    release_a.set()
    assert await slow is False

    assert [p.name for p in fetcher.partitions] == ["FromB"]
    assert fetcher.disk_path == "/disks/B.mia"
    assert fetcher.loading is False
    await client.aclose()


@pytest.mark.anyio
async def test_loading_flag_covers_request_in_flight():
    started, release = asyncio.Event(), asyncio.Event()

    async def handler(request):
        started.set()
        await release.wait()
        return httpx.Response(200, json={"partitions": [{"name": "P"}]})

    client = EngineClient("http://engine", transport=httpx.MockTransport(handler))
    fetcher = PartitionFetcher(client)
    pending = asyncio.ensure_future(fetcher.fetch_partitions("/disks/A.mia"))
    await started.wait()
    assert fetcher.loading is True

    release.set()
    assert await pending is True
    assert fetcher.loading is False
    await client.aclose()
