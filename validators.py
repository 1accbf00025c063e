from __future__ import annotations
from typing import List, NamedTuple, Optional, Sequence, Tuple
from state import Dimension, Draft, Quota

# (minimum, step) per dimension; the maximum always comes from the quota.
_SCALE = {
    Dimension.RAM: (512, 512),
    Dimension.DISK: (1024, 1024),
    Dimension.CPU: (25, 25),
    Dimension.DATABASES: (0, 1),
    Dimension.ALLOCATIONS: (0, 1),
}

UNITS = {
    Dimension.RAM: "MB",
    Dimension.DISK: "MB",
    Dimension.CPU: "%",
    Dimension.DATABASES: "",
    Dimension.ALLOCATIONS: "",
}


class Bounds(NamedTuple):
    minimum: int
    maximum: int
    step: int

    @property
    def satisfiable(self) -> bool:
        return self.maximum >= self.minimum

    @property
    def top(self) -> int:
        """Largest legal value, i.e. ``maximum`` rounded down onto the step grid."""
        return self.minimum + ((self.maximum - self.minimum) // self.step) * self.step


def bounds(quota: Quota, dimension: Dimension) -> Bounds:
    minimum, step = _SCALE[dimension]
    return Bounds(minimum, quota.limit(dimension), step)


def clamp(value: int, b: Bounds) -> int:
    """
    Snap ``value`` to the nearest ``minimum + k*step`` inside [minimum, maximum].
    Returns 0 when the range is empty (quota below the dimension's minimum).
    """
    if not b.satisfiable:
        return 0
    if value <= b.minimum:
        return b.minimum
    top = b.top
    if value >= top:
        return top
    steps = (value - b.minimum + b.step // 2) // b.step
    return min(b.minimum + steps * b.step, top)


def choices(b: Bounds) -> List[int]:
    if not b.satisfiable:
        return []
    return list(range(b.minimum, b.top + 1, b.step))


def can_create(quota: Quota) -> bool:
    if quota.slots == 0:
        return False
    return not (quota.ram == 0 or quota.disk == 0 or quota.cpu == 0)


def blocked_reason(quota: Quota) -> str:
    if quota.slots == 0:
        return "Can't create server while having no server slots."
    if quota.ram == 0 or quota.disk == 0 or quota.cpu == 0:
        return "Can't create server while having no server resources."
    return ""


def reclamp(draft: Draft, quota: Quota) -> List[str]:
    """Pull every resource field of ``draft`` back inside ``quota``. Returns changed fields."""
    changed = []
    for dim in Dimension:
        current = getattr(draft, dim.value)
        fixed = clamp(current, bounds(quota, dim))
        if fixed != current:
            setattr(draft, dim.value, fixed)
            changed.append(dim.value)
    return changed


# -- Step gates ------------------------------------------------------------

def validate_name(name: str) -> Tuple[bool, str]:
    if not name.strip():
        return False, "Server name is required."
    return True, ""


def validate_resources(draft: Draft) -> Tuple[bool, str]:
    for dim in (Dimension.RAM, Dimension.DISK, Dimension.CPU):
        if getattr(draft, dim.value) <= 0:
            return False, f"Not enough {dim.value.upper()} quota for a server."
    return True, ""


def validate_selection(
    selected: Optional[int], catalog: Sequence, label: str
) -> Tuple[bool, str]:
    if selected is None:
        return False, f"Please select a {label}."
    if not any(entry.display_id == selected for entry in catalog):
        return False, f"{label.capitalize()} #{selected} is not available."
    return True, ""
