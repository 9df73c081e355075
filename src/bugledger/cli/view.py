"""
Presentation Adapter - Turns projections and command results into rows,
affordances and notifications for a renderer.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..application.commands import CommandResult
from ..application.sync import BugSyncEngine
from ..core.domain.entities import Bug, BugDraft, Projection
from ..core.exceptions import CommandError
from ..core.domain.events import (
    CommandFailed,
    DeleteRefused,
    DomainEvent,
    ProjectionLoadFailed,
)


@dataclass(frozen=True)
class BugRow:
    """One rendered bug with the actions it offers."""
    
    index: int
    bug_id: str
    description: str
    criticality: str
    resolved: str
    can_resolve: bool
    can_delete: bool = True
    
    @classmethod
    def from_bug(cls, bug: Bug) -> "BugRow":
        return cls(
            index=bug.index,
            bug_id=bug.bug_id,
            description=bug.description,
            criticality=bug.criticality.label,
            resolved="Yes" if bug.is_resolved else "No",
            can_resolve=not bug.is_resolved,
        )
    
    def cells(self) -> list[str]:
        return [str(self.index), self.bug_id, self.description, self.criticality, self.resolved]


@dataclass(frozen=True)
class BugListView:
    """Rows for a projection. Records with an empty id are not rendered."""
    
    HEADERS = ["#", "Bug ID", "Description", "Criticality", "Resolved"]
    
    rows: tuple[BugRow, ...] = ()
    hidden: int = 0
    
    @classmethod
    def from_projection(cls, projection: Projection) -> "BugListView":
        rows = tuple(BugRow.from_bug(bug) for bug in projection if bug.bug_id)
        return cls(rows=rows, hidden=len(projection) - len(rows))
    
    def __len__(self) -> int:
        return len(self.rows)
    
    def table(self) -> list[list[str]]:
        return [row.cells() for row in self.rows]


@dataclass
class Notification:
    """An out-of-band message for the user."""
    
    level: str
    message: str


@dataclass
class BugTrackerPresenter:
    """
    Binds the engine to a renderer: holds the draft form, exposes the
    command callbacks and collects notifications from domain events.
    """
    
    engine: BugSyncEngine
    draft: BugDraft = field(default_factory=BugDraft)
    notifications: list[Notification] = field(default_factory=list)
    
    def __post_init__(self):
        self.engine.event_bus.subscribe(DomainEvent, self._on_event)
    
    @property
    def view(self) -> BugListView:
        """Rows for the engine's current projection."""
        return BugListView.from_projection(self.engine.projection)
    
    def row(self, index: int) -> Optional[BugRow]:
        """Row at ledger position `index` in the freshest projection."""
        for row in self.view.rows:
            if row.index == index:
                return row
        return None
    
    async def submit_draft(self) -> CommandResult:
        return await self.engine.add_bug(self.draft)
    
    async def resolve(self, index: int) -> CommandResult:
        """Resolve a row; only offered for unresolved rows of the current view."""
        row = self.row(index)
        if row is None or not row.can_resolve:
            message = f"Bug #{index} is not offered for resolution"
            self.notifications.append(Notification("warning", message))
            return CommandResult.fail(CommandError(message, command="UpdateStatus"))
        return await self.engine.update_status(index)
    
    async def delete(self, index: int) -> CommandResult:
        if self.row(index) is None:
            message = f"Bug #{index} is not in the current list"
            self.notifications.append(Notification("warning", message))
            return CommandResult.fail(CommandError(message, command="DeleteBug"))
        return await self.engine.delete_bug(index)
    
    def drain_notifications(self) -> list[Notification]:
        notes, self.notifications = self.notifications, []
        return notes
    
    def _on_event(self, event: DomainEvent) -> None:
        if isinstance(event, CommandFailed):
            self.notifications.append(Notification("error", event.error))
        elif isinstance(event, DeleteRefused):
            self.notifications.append(Notification(
                "warning",
                f"Bug #{event.index} cannot be deleted because it is not resolved",
            ))
        elif isinstance(event, ProjectionLoadFailed):
            self.notifications.append(Notification(
                "error",
                f"Could not refresh bug list: {event.error}",
            ))
