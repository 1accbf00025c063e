from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Optional, Union


class Step(IntEnum):
    DETAILS = 1
    RESOURCES = 2
    SOFTWARE = 3
    NODE = 4

    @property
    def title(self) -> str:
        return self.name.capitalize()


class Dimension(str, Enum):
    RAM = "ram"
    DISK = "disk"
    CPU = "cpu"
    DATABASES = "databases"
    ALLOCATIONS = "allocations"

    @property
    def is_slider(self) -> bool:
        return self in (Dimension.RAM, Dimension.DISK, Dimension.CPU)


def _non_negative(data: dict, key: str) -> int:
    raw = data.get(key, 0)
    if raw is None:
        return 0
    return max(int(raw), 0)


@dataclass(frozen=True)
class Quota:
    slots: int = 0
    ram: int = 0           # MB
    disk: int = 0          # MB
    cpu: int = 0           # percent-points
    databases: int = 0
    allocations: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Quota":
        """Build from the panel's ``resources`` object. Raises ValueError on junk."""
        return cls(
            slots=_non_negative(data, "slots"),
            ram=_non_negative(data, "ram"),
            disk=_non_negative(data, "disk"),
            cpu=_non_negative(data, "cpu"),
            databases=_non_negative(data, "databases"),
            allocations=_non_negative(data, "allocations"),
        )

    def limit(self, dimension: Dimension) -> int:
        return getattr(self, dimension.value)


@dataclass(frozen=True)
class Image:
    id: int
    display_id: int
    name: str
    description: str = ""
    icon_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Image":
        return cls(
            id=int(data["id"]),
            display_id=int(data["eggId"]),
            name=str(data.get("name", "")),
            description=str(data.get("description") or ""),
            icon_url=data.get("img") or None,
        )


@dataclass(frozen=True)
class Node:
    id: int
    display_id: int
    name: str
    region_code: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        return cls(
            id=int(data["id"]),
            display_id=int(data["nodeId"]),
            name=str(data.get("name", "")),
            region_code=str(data.get("location") or ""),
        )


@dataclass
class Draft:
    # Step 1
    name: str = ""
    description: str = ""

    # Step 2
    ram: int = 512
    disk: int = 1024
    cpu: int = 25
    databases: int = 0
    allocations: int = 0

    # Step 3 / 4 (display ids)
    image_id: Optional[int] = None
    node_id: Optional[int] = None

    def copy(self) -> "Draft":
        return replace(self)

    def to_payload(self) -> dict:
        """Body for ``POST /api/servers``."""
        return {
            "name": self.name,
            "description": self.description,
            "ram": self.ram,
            "disk": self.disk,
            "cpu": self.cpu,
            "databases": self.databases,
            "allocations": self.allocations,
            "egg": self.image_id,
            "node": self.node_id,
        }


DRAFT_FIELDS = frozenset(Draft.__dataclass_fields__)


@dataclass(frozen=True)
class Success:
    handle: str


@dataclass(frozen=True)
class Failure:
    reason: str


SubmissionResult = Union[Success, Failure]
