"""Textual TUI dashboard for browsing and editing issues."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Static,
)
from textual.widgets.data_table import RowDoesNotExist

from beadui.config import save_app_config
from beadui.query import UNIQUE_COLUMNS, Column
from beadui.tui.detail_panel import IssueDetailPanel
from beadui.tui.shared import make_cell, make_header

if TYPE_CHECKING:
    from pathlib import Path

    from beadui.query import IssueRow
    from beadui.session import IssueSession

PLACEHOLDER = "Select an issue to view details"


class BeadUITUI(App[None]):
    """Interactive issue dashboard over every registered directory."""

    TITLE = "beadui"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS: ClassVar = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("x", "exclude_value", "Exclude value"),
        Binding("c", "clear_column_filter", "Clear filter"),
        Binding("b", "toggle_sidebar", "Sidebar"),
        Binding("escape", "deselect", "Close", show=False),
    ]

    CSS = """
    #sidebar {
        width: 32;
        border-right: tall $accent;
        padding: 0 1;
    }

    #sidebar.collapsed {
        display: none;
    }

    #sidebar-title {
        text-style: bold;
        margin: 1 0;
    }

    #dir-list {
        height: 1fr;
    }

    #dashboard-search {
        margin: 1 2 0 2;
    }

    #error-display {
        margin: 0 2;
        color: $error;
        height: auto;
    }

    #issue-table {
        margin: 0 2 1 2;
        height: 1fr;
    }

    #left-pane {
        width: 1fr;
    }

    #right-pane {
        display: none;
        width: 1fr;
        border-left: tall $accent;
    }

    .split-active #left-pane {
        width: 55%;
    }

    .split-active #right-pane {
        display: block;
    }
    """

    def __init__(
        self,
        session: IssueSession,
        config_path: Path | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._session = session
        self._config_path = config_path

    @property
    def session(self) -> IssueSession:
        """The session backing the dashboard."""
        return self._session

    def compose(self) -> ComposeResult:
        """Build the dashboard layout."""
        yield Header()
        with Horizontal(id="main-pane"):
            with Vertical(id="sidebar"):
                yield Static("Directories", id="sidebar-title")
                with VerticalScroll(id="dir-list"):
                    for directory in self._session.config.directories:
                        yield Checkbox(
                            directory.display_name,
                            value=directory.visible,
                            name=str(directory.path),
                            classes="dir-toggle",
                        )
                yield Button("◀ Collapse", id="collapse-btn")
            with Vertical(id="left-pane"):
                yield Input(placeholder="Search issues...", id="dashboard-search")
                yield Static("", id="error-display")
                yield DataTable(id="issue-table", cursor_type="cell", zebra_stripes=True)
            with Vertical(id="right-pane"):
                yield Static(PLACEHOLDER, id="detail-placeholder")
        yield Footer()

    def on_mount(self) -> None:
        """Load the snapshot and populate the table."""
        self._apply_sidebar()
        self._session.refresh()
        self._populate_table()
        self.query_one("#issue-table", DataTable).focus()

    # -- table ---------------------------------------------------------------

    def _populate_table(self) -> None:
        """Rebuild columns and rows from the current query state."""
        table = self.query_one("#issue-table", DataTable)
        cursor_column = table.cursor_column
        table.clear(columns=True)
        for column in Column:
            table.add_column(make_header(column, self._session.query), key=column.value)
        for row in self._session.rows():
            table.add_row(
                *(make_cell(row, column) for column in Column),
                key=str(row.index),
            )
        selected = self._session.selected_index
        if selected is None or not self._move_cursor_to(selected, cursor_column):
            table.move_cursor(column=cursor_column)
        self._show_error()

    def _show_error(self) -> None:
        message = self._session.error_message or ""
        self.query_one("#error-display", Static).update(message)

    def _cursor_column(self) -> Column | None:
        table = self.query_one("#issue-table", DataTable)
        keys = list(table.columns)
        if not keys or not 0 <= table.cursor_column < len(keys):
            return None
        return Column(keys[table.cursor_column].value)

    def _cursor_cell(self) -> tuple[IssueRow, Column] | None:
        """The row and column under the table cursor."""
        table = self.query_one("#issue-table", DataTable)
        column = self._cursor_column()
        if table.row_count == 0 or column is None:
            return None
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        return self._row_for_key(row_key.value), column

    def _row_for_key(self, key: str | None) -> IssueRow:
        index = int(key or 0)
        return self._session.all_rows()[index]

    def _move_cursor_to(self, index: int, column: int | None = None) -> bool:
        """Put the cursor on the row of issue *index*, if it is displayed."""
        table = self.query_one("#issue-table", DataTable)
        try:
            row = table.get_row_index(str(index))
        except RowDoesNotExist:
            return False
        table.move_cursor(row=row, column=column)
        return True

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        """Sort by the clicked column; clicking it again flips direction."""
        column = Column(event.column_key.value)
        self._session.query.sort_by(column)
        self._populate_table()

    async def on_data_table_cell_highlighted(
        self,
        event: DataTable.CellHighlighted,
    ) -> None:
        """Select the highlighted row and show its detail."""
        table = self.query_one("#issue-table", DataTable)
        # Repopulating moves the cursor more than once; only the last one counts
        if event.coordinate != table.cursor_coordinate:
            return
        key = event.cell_key.row_key.value
        if key is None:
            return
        index = int(key)
        if index == self._session.selected_index and self._current_panel():
            return
        self._session.select(index)
        await self._show_issue_in_panel(self._session.issues[index].id)

    def on_input_changed(self, event: Input.Changed) -> None:
        """Apply the free-text filter."""
        if event.input.id != "dashboard-search":
            return
        self._session.query.set_filter_text(event.value)
        self._populate_table()

    # -- detail pane ---------------------------------------------------------

    def _current_panel(self) -> IssueDetailPanel | None:
        panels = self.query(IssueDetailPanel)
        return panels.first() if panels else None

    async def _show_issue_in_panel(self, issue_id: str) -> None:
        """Load an issue into the right-pane detail panel."""
        right_pane = self.query_one("#right-pane", Vertical)
        await right_pane.query(IssueDetailPanel).remove()
        await right_pane.query("#detail-placeholder").remove()

        edit = self._session.load_detail(issue_id)
        self._show_error()
        if edit is None:
            await right_pane.mount(Static(PLACEHOLDER, id="detail-placeholder"))
            return
        await right_pane.mount(IssueDetailPanel(edit, self._session, id="detail-panel"))
        self.query_one("#main-pane", Horizontal).add_class("split-active")

    async def _clear_detail_panel(self) -> None:
        """Remove the detail panel and collapse the split."""
        right_pane = self.query_one("#right-pane", Vertical)
        await right_pane.query(IssueDetailPanel).remove()
        if not right_pane.query("#detail-placeholder"):
            await right_pane.mount(Static(PLACEHOLDER, id="detail-placeholder"))
        self.query_one("#main-pane", Horizontal).remove_class("split-active")

    async def on_issue_detail_panel_saved(self, event: IssueDetailPanel.Saved) -> None:
        """Redraw after a save; the session has already refreshed."""
        self.notify(f"Saved {event.issue_id}")
        if self._session.select_id(event.issue_id) is None:
            self._session.deselect()
            self._populate_table()
            await self._clear_detail_panel()
            return
        self._populate_table()
        await self._show_issue_in_panel(event.issue_id)

    async def on_issue_detail_panel_navigate(
        self,
        event: IssueDetailPanel.Navigate,
    ) -> None:
        """Jump to a blocker or dependent."""
        if self._session.select_id(event.issue_id) is not None:
            self._move_cursor_to(self._session.selected_index or 0)
        await self._show_issue_in_panel(event.issue_id)

    async def action_deselect(self) -> None:
        """Close the detail pane."""
        self._session.deselect()
        await self._clear_detail_panel()

    # -- sidebar -------------------------------------------------------------

    def _apply_sidebar(self) -> None:
        sidebar = self.query_one("#sidebar", Vertical)
        sidebar.set_class(self._session.config.sidebar_collapsed, "collapsed")

    def _save_config(self) -> None:
        try:
            save_app_config(self._session.config, self._config_path)
        except OSError as e:
            self.notify(f"Could not save config: {e}", severity="error")

    def action_toggle_sidebar(self) -> None:
        """Collapse or expand the directory sidebar."""
        config = self._session.config
        config.sidebar_collapsed = not config.sidebar_collapsed
        self._save_config()
        self._apply_sidebar()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle the sidebar collapse button."""
        if event.button.id == "collapse-btn":
            self.action_toggle_sidebar()

    async def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        """Show or hide a directory's issues."""
        path = event.checkbox.name
        if path is None:
            return
        if not self._session.config.set_visible(path, event.value):
            return
        self._save_config()
        await self.action_refresh()

    # -- actions -------------------------------------------------------------

    async def action_refresh(self) -> None:
        """Reload every visible directory."""
        had_selection = self._session.selected_issue is not None
        self._session.refresh()
        if had_selection and self._session.selected_issue is None:
            await self.action_deselect()
        self._populate_table()

    def action_exclude_value(self) -> None:
        """Hide rows sharing the value under the cursor."""
        cell = self._cursor_cell()
        if cell is None:
            return
        row, column = cell
        if column in UNIQUE_COLUMNS:
            self.notify(f"{column.label} values are unique; use search instead")
            return
        if not self._session.offers_value_filter(column):
            count = self._session.cardinality(column)
            self.notify(f"{column.label} has {count} distinct values; use search instead")
            return
        value = row.value(column)
        self._session.query.toggle_exclude(column, value)
        self._populate_table()
        self.notify(f"Hiding {column.label} = {value or '(empty)'}")

    def action_clear_column_filter(self) -> None:
        """Show every value of the column under the cursor again."""
        column = self._cursor_column()
        if column is None:
            return
        self._session.query.clear_column_filter(column)
        self._populate_table()
