# tests/conftest.py
import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import pytest
from state import Image, Node, Quota


QUOTA = Quota(slots=2, ram=2048, disk=4096, cpu=100, databases=2, allocations=1)

IMAGES = [
    Image(id=11, display_id=5, name="Paper", description="Minecraft Paper server"),
    Image(id=12, display_id=7, name="Node.js", description="Generic Node.js app"),
]

NODES = [
    Node(id=21, display_id=1, name="fra-1", region_code="DE"),
    Node(id=22, display_id=3, name="nyc-1", region_code="US"),
]


class FakePanelAPI:
    """
    In-memory stand-in for PanelAPIClient.

    Each fetch returns (or raises) the configured value. Setting a ``hold_*``
    event makes the matching call wait for it, so tests can control the order
    in which loads and submissions complete.
    """

    def __init__(self, quota=QUOTA, images=None, nodes=None, create_response=None):
        self.quota = quota
        self.images = list(IMAGES) if images is None else images
        self.nodes = list(NODES) if nodes is None else nodes
        self.create_response = create_response or {"success": True, "handle": "a1b2c3d4"}
        self.hold_quota = None
        self.hold_images = None
        self.hold_nodes = None
        self.hold_create = None
        self.calls = {"quota": 0, "images": 0, "nodes": 0, "create": 0}
        self.created = []

    async def _serve(self, key, hold, value):
        self.calls[key] += 1
        if hold is not None:
            await hold.wait()
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_quota(self):
        return await self._serve("quota", self.hold_quota, self.quota)

    async def fetch_images(self):
        return await self._serve("images", self.hold_images, self.images)

    async def fetch_nodes(self):
        return await self._serve("nodes", self.hold_nodes, self.nodes)

    async def create_server(self, draft):
        self.created.append(draft)
        return await self._serve("create", self.hold_create, self.create_response)


@pytest.fixture
def api():
    return FakePanelAPI()


@pytest.fixture
def quota():
    return QUOTA


async def settle():
    """Let pending tasks run to completion."""
    for _ in range(5):
        await asyncio.sleep(0)
