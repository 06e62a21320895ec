"""Textual TUI components for beadui."""

from beadui.tui.dashboard import BeadUITUI
from beadui.tui.detail_panel import IssueDetailPanel
from beadui.tui.shared import make_cell, make_header

__all__ = [
    "BeadUITUI",
    "IssueDetailPanel",
    "make_cell",
    "make_header",
]
