from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, Optional
from logger import log
from state import Draft, Failure, SubmissionResult, Success


class SubmissionBusy(Exception):
    """A create-server call is already in flight."""


class SubmissionController:
    """Serializes the terminal create-server call: at most one in flight."""

    def __init__(
        self,
        create_server: Callable[[Draft], Awaitable[Dict[str, Any]]],
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._create_server = create_server
        self._on_change = on_change
        self.pending = False
        self.last_result: Optional[SubmissionResult] = None

    async def submit(self, draft: Draft) -> SubmissionResult:
        if self.pending:
            log.warning("Submission rejected: one is already in flight")
            raise SubmissionBusy("A server is already being created.")
        self.pending = True
        try:
            self._notify()
            log.info(
                "Submitting server %r ram=%s disk=%s cpu=%s db=%s alloc=%s image=%s node=%s",
                draft.name, draft.ram, draft.disk, draft.cpu,
                draft.databases, draft.allocations, draft.image_id, draft.node_id,
            )
            try:
                response = await self._create_server(draft.copy())
            except Exception as e:
                log.error("Server creation failed: %s", e)
                result: SubmissionResult = Failure(f"Failed to create server: {e}")
            else:
                result = self._interpret(response)
        finally:
            self.pending = False

        self.last_result = result
        self._notify()
        return result

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()

    @staticmethod
    def _interpret(response: Dict[str, Any]) -> SubmissionResult:
        if response.get("success") and response.get("handle") is not None:
            handle = str(response["handle"])
            log.info("Server created: %s", handle)
            return Success(handle)
        reason = str(response.get("error") or "Server creation failed")
        log.warning("Server creation rejected: %s", reason)
        return Failure(reason)
