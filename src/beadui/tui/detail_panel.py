"""Issue detail/edit panel widget for the TUI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.message import Message
from textual.widget import Widget
from textual.widgets import (
    Button,
    Collapsible,
    Input,
    Label,
    Select,
    Static,
    TextArea,
)

from beadui.constants import PRIORITY_OPTIONS, STATUS_OPTIONS
from beadui.errors import SaveFailed
from beadui.tui.shared import SHARED_CSS

if TYPE_CHECKING:
    from textual.app import ComposeResult

    from beadui.edit import EditSession
    from beadui.session import IssueSession


class IssueDetailPanel(Widget, can_focus=True, can_focus_children=True):
    """Detail view of one issue; edits are tracked in an EditSession."""

    class Saved(Message):
        """Posted after a successful save and refresh."""

        def __init__(self, issue_id: str) -> None:
            super().__init__()
            self.issue_id = issue_id

    class Navigate(Message):
        """Posted when a blocker or dependent link is clicked."""

        def __init__(self, issue_id: str) -> None:
            super().__init__()
            self.issue_id = issue_id

    BINDINGS: ClassVar = [
        Binding("ctrl+s", "save", "Save", priority=True),
    ]

    DEFAULT_CSS = (
        SHARED_CSS
        + """
    IssueDetailPanel {
        height: 1fr;
        width: 1fr;
    }

    IssueDetailPanel #detail-form {
        padding: 0 2;
    }

    IssueDetailPanel #title-input {
        width: 1fr;
    }

    IssueDetailPanel #modified-display {
        width: auto;
        padding: 1 1;
        color: $warning;
    }

    IssueDetailPanel .link-row {
        height: auto;
    }

    IssueDetailPanel .link-row Button {
        min-width: 12;
    }
    """
    )

    def __init__(
        self,
        edit: EditSession,
        session: IssueSession,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._edit = edit
        self._session = session

    @property
    def edit(self) -> EditSession:
        """The edit session shown in the panel."""
        return self._edit

    def compose(self) -> ComposeResult:
        """Compose the detail/edit form."""
        issue = self._edit.issue

        with Horizontal(id="title-bar"):
            yield Static(issue.id, id="id-display")
            yield Input(value=issue.title, placeholder="Title", id="title-input")
            yield Static("", id="modified-display")
            yield Button("Save", id="save-btn", variant="primary")

        yield Static("", id="panel-error", classes="error-line")

        with VerticalScroll(id="detail-form"):
            with Horizontal(classes="field-row"):
                status_values = {value for _, value in STATUS_OPTIONS}
                status_options = list(STATUS_OPTIONS)
                if issue.status not in status_values:
                    status_options.append((issue.status, issue.status))
                yield Select(
                    options=status_options,
                    value=issue.status,
                    id="status-input",
                    allow_blank=False,
                )
                priority_options = list(PRIORITY_OPTIONS)
                if issue.priority not in {value for _, value in PRIORITY_OPTIONS}:
                    priority_options.append((f"P{issue.priority}", issue.priority))
                yield Select(
                    options=priority_options,
                    value=issue.priority,
                    id="priority-input",
                    allow_blank=False,
                )

            yield Input(
                value=issue.assignee or "",
                placeholder="Assignee",
                id="assignee-input",
            )
            yield Static(
                f"Type: {issue.issue_type or '-'}    "
                f"Directory: {issue.source_directory or '-'}\n"
                f"Created: {issue.created_at}    Updated: {issue.updated_at}",
                id="info-display",
            )

            yield Label("Description", classes="field-label")
            yield Static(issue.description or "(none)", id="description-display")

            yield Label("Notes", classes="field-label")
            yield TextArea(
                issue.notes or "",
                id="notes-input",
                classes="collapsible-textarea",
            )

            yield from self._compose_links()

    def _compose_links(self) -> ComposeResult:
        """Yield the blocker and dependent sections."""
        issue = self._edit.issue
        with Collapsible(
            title="Blockers (issues blocking this one)",
            collapsed=False,
            id="blockers-section",
        ):
            if not issue.dependencies:
                yield Static("  None")
            for dep in issue.dependencies:
                with Horizontal(classes="link-row"):
                    yield Button(dep.id, name=dep.id, classes="nav-btn")
                    yield Static(f" [{dep.status}] {dep.title}")

        dependents = self._session.dependents_of(issue.id)
        with Collapsible(
            title="Dependents (issues blocked by this one)",
            collapsed=False,
            id="dependents-section",
        ):
            if not dependents:
                yield Static("  None")
            for dependent in dependents:
                with Horizontal(classes="link-row"):
                    yield Button(dependent.id, name=dependent.id, classes="nav-btn")
                    yield Static(f" [{dependent.status}] {dependent.title}")

    def _sync_modified(self) -> None:
        label = "Unsaved changes" if self._edit.modified else ""
        self.query_one("#modified-display", Static).update(label)

    def _set(self, name: str, value: Any) -> None:
        if self._edit.set_field(name, value):
            self._sync_modified()

    def on_input_changed(self, event: Input.Changed) -> None:
        """Track title and assignee edits."""
        if event.input.id == "title-input":
            self._set("title", event.value)
        elif event.input.id == "assignee-input":
            self._set("assignee", event.value)
        event.stop()

    def on_select_changed(self, event: Select.Changed) -> None:
        """Track status and priority edits."""
        if event.value is Select.BLANK:
            return
        if event.select.id == "status-input":
            self._set("status", event.value)
        elif event.select.id == "priority-input":
            self._set("priority", event.value)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        """Track notes edits."""
        if event.text_area.id == "notes-input":
            self._set("notes", event.text_area.text)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle save and navigation buttons."""
        if event.button.id == "save-btn":
            self.do_save()
        elif event.button.has_class("nav-btn") and event.button.name:
            self.post_message(self.Navigate(event.button.name))

    def action_save(self) -> None:
        """Save the issue (Ctrl+S)."""
        self.do_save()

    def do_save(self) -> None:
        """Write the edit back through the session."""
        if not self._edit.modified:
            self.notify("No changes to save")
            return
        if not self._edit.issue.title.strip():
            self.notify("Title cannot be empty", severity="error")
            return
        try:
            self._session.save(self._edit)
        except SaveFailed as e:
            self.query_one("#panel-error", Static).update(str(e))
            self.notify(str(e), severity="error")
            return
        self._sync_modified()
        self.post_message(self.Saved(self._edit.issue.id))
