"""
Server-creation wizard state machine.

The controller owns the current step and the draft, starts the three remote
loads on ``mount()``, gates every ``advance()`` on the current step's
predicate and hands the final draft to the SubmissionController. It knows
nothing about rendering: hosts read its properties, call its commands and
subscribe to snapshots.
"""
from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple
from logger import log
from state import (
    DRAFT_FIELDS, Dimension, Draft, Failure, Image, Node, Quota, Step,
    SubmissionResult, Success,
)
from validators import (
    Bounds, blocked_reason, bounds, can_create, reclamp,
    validate_name, validate_resources, validate_selection,
)
from wizard.loader import LoadState, ResourceLoad
from wizard.submission import SubmissionBusy, SubmissionController

SOURCES = ("quota", "images", "nodes")

_TEXT_FIELDS = {"name", "description"}
_ID_FIELDS = {"image_id", "node_id"}


class QuotaExhausted(Exception):
    """The account cannot create a server at all."""


class ValidationBlocked(Exception):
    """An action was attempted while its step gate is false."""


class PanelAPI(Protocol):
    async def fetch_quota(self) -> Quota: ...
    async def fetch_images(self) -> List[Image]: ...
    async def fetch_nodes(self) -> List[Node]: ...
    async def create_server(self, draft: Draft) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class WizardSnapshot:
    step: Step
    draft: Draft
    loads: Dict[str, LoadState]
    errors: Dict[str, str]
    blocked: bool
    blocked_reason: str
    can_proceed: bool
    submitting: bool
    failure: Optional[str]
    handle: Optional[str]


Listener = Callable[[WizardSnapshot], None]


class WizardController:

    def __init__(self, api: PanelAPI) -> None:
        self.current_step = Step.DETAILS
        self.draft = Draft()
        self.quota: ResourceLoad[Quota] = ResourceLoad("quota", api.fetch_quota, self._on_load_changed)
        self.images: ResourceLoad[List[Image]] = ResourceLoad("images", api.fetch_images, self._on_load_changed)
        self.nodes: ResourceLoad[List[Node]] = ResourceLoad("nodes", api.fetch_nodes, self._on_load_changed)
        self.submission = SubmissionController(api.create_server, on_change=self._emit)
        self.handle: Optional[str] = None
        self._listeners: List[Listener] = []
        self._mounted = False
        self._closed = False

    # -- Lifecycle ---------------------------------------------------------

    def mount(self) -> None:
        """Fire the three independent loads. Safe to call more than once."""
        if self._mounted or self._closed:
            return
        self._mounted = True
        log.info("Wizard mounted: loading quota, images and nodes")
        for load in self._loads():
            load.start()

    def close(self) -> None:
        """Tear down: late load results are dropped from here on."""
        if self._closed:
            return
        self._closed = True
        for load in self._loads():
            load.detach()
        self._listeners.clear()
        log.info("Wizard closed at step %d", self.current_step)

    async def wait_loaded(self) -> None:
        await asyncio.gather(*(load.wait() for load in self._loads()))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def retry(self, source: str) -> None:
        if source not in SOURCES:
            raise ValueError(f"Unknown data source: {source}")
        if self._closed:
            return
        getattr(self, source).retry()

    # -- Queries -----------------------------------------------------------

    @property
    def blocked(self) -> bool:
        return self.quota.ready and not can_create(self.quota.value)

    @property
    def blocked_reason(self) -> str:
        return blocked_reason(self.quota.value) if self.blocked else ""

    @property
    def completed(self) -> bool:
        return self.handle is not None

    @property
    def last_failure(self) -> Optional[str]:
        result = self.submission.last_result
        return result.reason if isinstance(result, Failure) else None

    def reachable_steps(self) -> List[Step]:
        if self.blocked:
            return []
        return [s for s in Step if s <= self.current_step]

    def bounds(self, dimension: Dimension) -> Optional[Bounds]:
        if not self.quota.ready:
            return None
        return bounds(self.quota.value, dimension)

    def load_for(self, step: Step) -> ResourceLoad:
        """The dataset a step needs before it can render or advance."""
        if step is Step.SOFTWARE:
            return self.images
        if step is Step.NODE:
            return self.nodes
        return self.quota

    def step_error(self, step: Step) -> str:
        load = self.load_for(step)
        if load.failed:
            return f"Failed to load {load.name}: {load.error}"
        return ""

    def check_step(self, step: Optional[Step] = None) -> Tuple[bool, str]:
        step = self.current_step if step is None else step
        if step is Step.DETAILS:
            ok, msg = validate_name(self.draft.name)
            if not ok:
                return ok, msg
            return self._needs(self.quota)
        if step is Step.RESOURCES:
            ok, msg = self._needs(self.quota)
            if not ok:
                return ok, msg
            return validate_resources(self.draft)
        if step is Step.SOFTWARE:
            ok, msg = self._needs(self.images)
            if not ok:
                return ok, msg
            return validate_selection(self.draft.image_id, self.images.value, "software")
        # The submitted draft must still fit a resolved quota after any reclamp.
        ok, msg = self._needs(self.quota)
        if ok:
            ok, msg = validate_resources(self.draft)
        if not ok:
            return ok, msg
        ok, msg = self._needs(self.nodes)
        if not ok:
            return ok, msg
        return validate_selection(self.draft.node_id, self.nodes.value, "node")

    def can_proceed(self, step: Optional[Step] = None) -> bool:
        return self.check_step(step)[0]

    def snapshot(self) -> WizardSnapshot:
        return WizardSnapshot(
            step=self.current_step,
            draft=self.draft.copy(),
            loads={load.name: load.state for load in self._loads()},
            errors={load.name: load.error for load in self._loads() if load.failed},
            blocked=self.blocked,
            blocked_reason=self.blocked_reason,
            can_proceed=not self.blocked and self.can_proceed(),
            submitting=self.submission.pending,
            failure=self.last_failure,
            handle=self.handle,
        )

    # -- Commands ----------------------------------------------------------

    def advance(self) -> bool:
        if self.blocked:
            log.info("Advance ignored: %s", self.blocked_reason)
            return False
        if self.current_step is Step.NODE:
            return False
        ok, msg = self.check_step()
        if not ok:
            log.debug("Advance blocked at step %d: %s", self.current_step, msg)
            return False
        self.current_step = Step(self.current_step + 1)
        log.info("Step %d: %s", self.current_step, self.current_step.title)
        self._emit()
        return True

    def retreat(self) -> bool:
        if self.current_step is Step.DETAILS:
            return False
        self.current_step = Step(self.current_step - 1)
        log.info("Back to step %d: %s", self.current_step, self.current_step.title)
        self._emit()
        return True

    def update_field(self, name: str, value: Any) -> None:
        """
        Replace one draft field. Resource values are expected to come from
        ``bounds()``-derived choices already; they are re-clamped only when
        the quota (re)loads.
        """
        if name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field: {name}")
        if name in _TEXT_FIELDS:
            value = str(value)
        elif name in _ID_FIELDS:
            value = None if value is None else int(value)
        else:
            value = int(value)
        setattr(self.draft, name, value)
        self._emit()

    def select_image(self, display_id: int) -> bool:
        return self._select("image_id", display_id, self.images)

    def select_node(self, display_id: int) -> bool:
        return self._select("node_id", display_id, self.nodes)

    async def submit(self) -> SubmissionResult:
        if self.blocked:
            raise QuotaExhausted(self.blocked_reason)
        if self.completed:
            raise ValidationBlocked("This server has already been created.")
        if self.submission.pending:
            raise SubmissionBusy("A server is already being created.")
        if self.current_step is not Step.NODE:
            raise ValidationBlocked("Submit is only available on the last step.")
        ok, msg = self.check_step(Step.NODE)
        if not ok:
            raise ValidationBlocked(msg)

        result = await self.submission.submit(self.draft)
        if isinstance(result, Success) and not self._closed:
            self.handle = result.handle
            self.draft = Draft()
        self._emit()
        return result

    # -- Internals ---------------------------------------------------------

    def _loads(self) -> Tuple[ResourceLoad, ResourceLoad, ResourceLoad]:
        return self.quota, self.images, self.nodes

    @staticmethod
    def _needs(load: ResourceLoad) -> Tuple[bool, str]:
        if load.ready:
            return True, ""
        if load.failed:
            return False, f"Failed to load {load.name}: {load.error}"
        return False, f"Loading {load.name}…"

    def _select(self, field_name: str, display_id: int, load: ResourceLoad) -> bool:
        if not load.ready:
            return False
        if not any(entry.display_id == display_id for entry in load.value):
            log.warning("Ignoring unknown %s selection #%s", load.name, display_id)
            return False
        self.update_field(field_name, display_id)
        return True

    def _on_load_changed(self, load: ResourceLoad) -> None:
        if self._closed:
            return
        if load is self.quota and load.ready:
            changed = reclamp(self.draft, load.value)
            if changed:
                log.info("Quota reload re-clamped %s", ", ".join(changed))
            if self.blocked:
                log.warning("Wizard blocked: %s", self.blocked_reason)
        self._emit()

    def _emit(self) -> None:
        if self._closed or not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
