import asyncio
import pytest
from wizard.loader import LoadState, ResourceLoad
from conftest import settle


class Recorder:
    def __init__(self):
        self.seen = []

    def __call__(self, load):
        self.seen.append((load.state, load.value, load.error))


async def test_load_becomes_ready():
    async def fetch():
        return [1, 2]

    rec = Recorder()
    load = ResourceLoad("numbers", fetch, rec)
    load.start()
    assert load.pending
    await load.wait()
    assert load.ready
    assert load.value == [1, 2]
    assert rec.seen == [(LoadState.READY, [1, 2], "")]


async def test_load_failure_records_error():
    async def fetch():
        raise RuntimeError("boom")

    load = ResourceLoad("numbers", fetch, Recorder())
    load.start()
    await load.wait()
    assert load.failed
    assert load.error == "boom"
    assert load.value is None


async def test_failure_without_message_uses_type_name():
    async def fetch():
        raise asyncio.TimeoutError()

    load = ResourceLoad("numbers", fetch, Recorder())
    load.start()
    await load.wait()
    assert load.error == "TimeoutError"


async def test_retry_resets_to_pending_and_notifies():
    results = [RuntimeError("down"), ["ok"]]

    async def fetch():
        value = results.pop(0)
        if isinstance(value, Exception):
            raise value
        return value

    rec = Recorder()
    load = ResourceLoad("numbers", fetch, rec)
    load.start()
    await load.wait()
    assert load.failed

    load.retry()
    assert load.pending
    assert rec.seen[-1] == (LoadState.PENDING, None, "")
    await load.wait()
    assert load.ready and load.value == ["ok"]


async def test_stale_result_is_dropped_after_retry():
    first_gate = asyncio.Event()
    calls = []

    async def fetch():
        calls.append(len(calls))
        if len(calls) == 1:
            await first_gate.wait()
            return "old"
        return "new"

    rec = Recorder()
    load = ResourceLoad("numbers", fetch, rec)
    load.start()
    await settle()
    load.retry()
    await load.wait()
    assert load.value == "new"

    first_gate.set()
    await settle()
    assert load.value == "new"
    assert all(value != "old" for _, value, _ in rec.seen)


async def test_detach_suppresses_late_result():
    gate = asyncio.Event()

    async def fetch():
        await gate.wait()
        return "late"

    rec = Recorder()
    load = ResourceLoad("numbers", fetch, rec)
    load.start()
    await settle()
    load.detach()
    gate.set()
    await settle()
    assert load.pending
    assert rec.seen == []


async def test_wait_without_start_returns():
    async def fetch():
        return 1

    load = ResourceLoad("numbers", fetch, Recorder())
    await load.wait()
    assert load.generation == 0
