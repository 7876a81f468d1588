"""
Grant workflow state machine.

Three stages: Object Selection -> Privilege Selection -> Review. Forward
moves are guarded, backward moves are not. Entering Review requests one
statement preview; finishing applies the grants. All state is owned by one
GrantWorkflow instance, built when the wizard opens and torn down when it is
completed or cancelled.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Iterable

from grantwizard.config import ConnectionConfig
from grantwizard.domain.errors import GrantWizardDomainError
from grantwizard.domain.results import CommandResult, GuardResult
from grantwizard.edit_model import GrantEditModel
from grantwizard.models import CapabilityCatalog, DatabaseObject, PrivilegeGrantRow
from grantwizard.resolver import resolve_privileges
from grantwizard.selection import ObjectSelection
from grantwizard.services.contracts import GrantService, Notifier, RecordingNotifier

NO_SELECTION_MESSAGE = "Please select any database object."
NO_PRIVILEGES_MESSAGE = "No privileges can be granted on the selected objects."
STALE_PREVIEW_MESSAGE = "The statement preview does not match the current edits; refresh it first."


class WorkflowClosedError(RuntimeError):
    """Raised when a completed or cancelled workflow is mutated"""


class Stage(IntEnum):
    SELECT_OBJECTS = 0
    EDIT_PRIVILEGES = 1
    REVIEW = 2

    @property
    def title(self) -> str:
        return STAGE_TITLES[self]


STAGE_TITLES = {
    Stage.SELECT_OBJECTS: "Object Selection",
    Stage.EDIT_PRIVILEGES: "Privilege Selection",
    Stage.REVIEW: "Review",
}


class PreviewStatus(str, Enum):
    ABSENT = "absent"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class PreviewState:
    status: PreviewStatus = PreviewStatus.ABSENT
    text: str = ""
    error: str | None = None


class GrantWorkflow:
    """Drives object selection, privilege editing, preview and apply

    Usage:
        workflow = GrantWorkflow(service, config, notifier)
        await workflow.start()
        workflow.select_ids(["16384"])
        await workflow.next_step()
        workflow.set_rows([PrivilegeGrantRow(grantee="app_role", privileges=["SELECT"])])
        await workflow.next_step()      # enters Review and loads the preview
        await workflow.finish()
    """

    def __init__(
        self,
        service: GrantService,
        config: ConnectionConfig,
        notifier: Notifier | None = None,
    ) -> None:
        self.service = service
        self.config = config
        self.notifier: Notifier = notifier or RecordingNotifier()

        self.stage = Stage.SELECT_OBJECTS
        self.catalog: CapabilityCatalog = {}
        self.available_objects: list[DatabaseObject] = []
        self.selection = ObjectSelection()
        self.edits = GrantEditModel()
        self.preview = PreviewState()
        self.error_message = ""

        self.loaded = False
        self.closed = False
        self.applying = False

        # Bumped whenever an in-flight preview response would no longer match the view
        self._preview_generation = 0
        self._completed_listeners: list[Callable[[CommandResult], None]] = []
        self._cancelled_listeners: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def on_completed(self, callback: Callable[[CommandResult], None]) -> None:
        self._completed_listeners.append(callback)

    def on_cancelled(self, callback: Callable[[], None]) -> None:
        self._cancelled_listeners.append(callback)

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> CommandResult:
        """Load the capability catalog and the object catalog concurrently

        Both must succeed; a partial catalog is never kept.
        """
        if self.closed:
            return _closed_result()

        results = await asyncio.gather(
            self.service.load_capability_catalog(self.config),
            self.service.load_object_catalog(self.config),
            return_exceptions=True,
        )
        for outcome in results:
            if isinstance(outcome, GrantWizardDomainError):
                self.notifier.error(f"Error while fetching grant wizard data: {outcome.message}")
                return CommandResult(success=False, code=outcome.code, message=outcome.message)
            if isinstance(outcome, BaseException):
                raise outcome

        catalog, objects = results
        self.catalog = {key: list(value) for key, value in catalog.items()}
        self.available_objects = list(objects)
        self.loaded = True
        return CommandResult(
            success=True,
            code="loaded",
            message=f"Loaded {len(self.available_objects)} objects",
            data={"objects": len(self.available_objects), "classes": len(self.catalog)},
        )

    # ------------------------------------------------------------------
    # Selection and privilege edits
    # ------------------------------------------------------------------

    @property
    def effective_privileges(self) -> list[str]:
        return self.edits.available_privileges

    def set_selection(self, objects: Iterable[DatabaseObject]) -> None:
        """Replace the selection and recompute the offered privileges

        Existing rows are kept. Rows still holding privileges that are no
        longer offered are reported with a warning.
        """
        self._ensure_open()
        self.selection.set_selection(objects)
        changed = self.edits.set_available_privileges(
            resolve_privileges(self.selection, self.catalog)
        )
        self._invalidate_preview()
        self.error_message = NO_SELECTION_MESSAGE if self.selection.is_empty() else ""

        if changed:
            stale = self.edits.stale_privileges()
            if stale:
                names = sorted({p for privileges in stale.values() for p in privileges})
                self.notifier.warning(
                    "Privileges not available for the selected objects: " + ", ".join(names)
                )

    def select_ids(self, ids: Iterable[str]) -> list[str]:
        """Select catalog objects by id, in the given order; returns unknown ids"""
        by_id = {obj.id: obj for obj in self.available_objects}
        wanted = list(ids)
        self.set_selection(by_id[object_id] for object_id in wanted if object_id in by_id)
        return [object_id for object_id in wanted if object_id not in by_id]

    def set_rows(self, rows: Iterable[PrivilegeGrantRow]) -> None:
        self._ensure_open()
        self.edits.set_rows(rows)
        self._invalidate_preview()
        self.error_message = ""

    # ------------------------------------------------------------------
    # Stage transitions
    # ------------------------------------------------------------------

    def can_advance(self) -> GuardResult:
        """Guard for moving past the current stage"""
        if self.closed:
            return GuardResult.block("The grant wizard is closed.")
        if not self.loaded:
            return GuardResult.block("Grant wizard data is not loaded.")
        if self.stage == Stage.SELECT_OBJECTS:
            if self.selection.is_empty():
                return GuardResult.block(NO_SELECTION_MESSAGE)
            return GuardResult.allow()
        if self.stage == Stage.EDIT_PRIVILEGES:
            if not self.effective_privileges:
                return GuardResult.block(NO_PRIVILEGES_MESSAGE)
            message = self.edits.validation_message()
            if message:
                return GuardResult.block(message)
            return GuardResult.allow()
        return GuardResult.block("Review is the last step.")

    async def next_step(self) -> GuardResult:
        """Advance one stage; entering Review loads the statement preview"""
        guard = self.can_advance()
        if not guard.allowed:
            self.error_message = guard.message
            return guard

        self.error_message = ""
        self.stage = Stage(self.stage + 1)
        if self.stage == Stage.REVIEW:
            await self.refresh_preview()
        return guard

    def previous_step(self) -> GuardResult:
        if self.closed:
            return GuardResult.block("The grant wizard is closed.")
        if self.stage == Stage.SELECT_OBJECTS:
            return GuardResult.block("Object Selection is the first step.")
        if self.stage == Stage.REVIEW:
            self._invalidate_preview()
        self.stage = Stage(self.stage - 1)
        self.error_message = ""
        return GuardResult.allow()

    # ------------------------------------------------------------------
    # Preview and apply
    # ------------------------------------------------------------------

    async def refresh_preview(self) -> CommandResult:
        """Request a statement preview for the current selection and rows

        A response is dropped if anything it was based on changed, or the
        Review stage was left, while it was in flight.
        """
        if self.closed:
            return _closed_result()
        if self.stage != Stage.REVIEW:
            return CommandResult(
                success=False, code="not_in_review", message="Preview is only shown in Review."
            )

        self._preview_generation += 1
        token = self._preview_generation
        self.preview = PreviewState(status=PreviewStatus.PENDING)
        objects = self.selection.objects
        rows = self.edits.rows

        try:
            text = await self.service.preview_statements(self.config, objects, rows)
        except GrantWizardDomainError as err:
            if not self._preview_is_current(token):
                return _stale_result()
            self.preview = PreviewState(status=PreviewStatus.FAILED, error=err.message)
            self.notifier.error(f"Error while fetching SQL: {err.message}")
            return CommandResult(success=False, code=err.code, message=err.message)

        if not self._preview_is_current(token):
            return _stale_result()
        self.preview = PreviewState(status=PreviewStatus.READY, text=text)
        return CommandResult(
            success=True, code="preview_ready", message="Preview loaded", data={"sql": text}
        )

    def finish_guard(self) -> GuardResult:
        """Guard for finish: every stage before Review must be satisfied

        In Review the shown preview must also be current, so edits made
        after it was loaded are never applied unseen.
        """
        if self.closed:
            return GuardResult.block("The grant wizard is closed.")
        if not self.loaded:
            return GuardResult.block("Grant wizard data is not loaded.")
        if self.selection.is_empty():
            return GuardResult.block(NO_SELECTION_MESSAGE)
        if not self.effective_privileges:
            return GuardResult.block(NO_PRIVILEGES_MESSAGE)
        message = self.edits.validation_message()
        if message:
            return GuardResult.block(message)
        if self.stage == Stage.REVIEW and self.preview.status != PreviewStatus.READY:
            return GuardResult.block(STALE_PREVIEW_MESSAGE)
        return GuardResult.allow()

    async def finish(self) -> CommandResult:
        """Apply the grants once; on failure all state is left as it was"""
        if self.closed:
            return _closed_result()
        if self.applying:
            return CommandResult(
                success=False, code="apply_in_progress", message="Grants are already being applied."
            )
        guard = self.finish_guard()
        if not guard.allowed:
            self.error_message = guard.message
            return CommandResult(success=False, code="validation_failed", message=guard.message)

        objects = self.selection.objects
        rows = self.edits.rows
        self.applying = True
        try:
            await self.service.apply_grants(self.config, objects, rows)
        except GrantWizardDomainError as err:
            self.notifier.error(f"Error while saving grant wizard data: {err.message}")
            return CommandResult(success=False, code=err.code, message=err.message)
        finally:
            self.applying = False

        result = CommandResult(
            success=True,
            code="applied",
            message=f"Privileges applied to {len(objects)} object(s)",
            data={
                "objects": [obj.id for obj in objects],
                "grantees": [row.grantee for row in rows],
            },
        )
        if self.closed:
            return result
        self.notifier.info(result.message)
        self._close()
        for listener in list(self._completed_listeners):
            listener(result)
        return result

    def cancel(self) -> None:
        """Abandon the workflow and discard all state"""
        if self.closed:
            return
        self._close()
        for listener in list(self._cancelled_listeners):
            listener()

    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Machine-readable view of the current state"""
        return {
            "stage": self.stage.name.lower(),
            "selection": self.selection.ids(),
            "privileges": self.effective_privileges,
            "rows": [row.model_dump(by_alias=True) for row in self.edits.rows],
            "valid": self.edits.is_valid(),
            "preview": {
                "status": self.preview.status.value,
                "sql": self.preview.text,
                "error": self.preview.error,
            },
            "error": self.error_message,
            "closed": self.closed,
        }

    def _preview_is_current(self, token: int) -> bool:
        return token == self._preview_generation and self.stage == Stage.REVIEW and not self.closed

    def _invalidate_preview(self) -> None:
        self._preview_generation += 1
        self.preview = PreviewState()

    def _ensure_open(self) -> None:
        if self.closed:
            raise WorkflowClosedError("The grant wizard is closed")

    def _close(self) -> None:
        self.closed = True
        self._invalidate_preview()
        self.selection.set_selection([])
        self.edits.set_available_privileges([])
        self.edits.clear()
        self.catalog = {}
        self.available_objects = []
        self.error_message = ""


def _closed_result() -> CommandResult:
    return CommandResult(success=False, code="workflow_closed", message="The grant wizard is closed.")


def _stale_result() -> CommandResult:
    return CommandResult(
        success=False, code="preview_superseded", message="Preview response was superseded."
    )
