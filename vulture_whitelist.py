"""Vulture whitelist: false positives that should not be flagged as dead code."""

# Typer registers these through decorators inside register()
list_issues  # type: ignore[name-defined]  # noqa: B018
show  # type: ignore[name-defined]  # noqa: B018
update  # type: ignore[name-defined]  # noqa: B018
tui  # type: ignore[name-defined]  # noqa: B018
dirs_list  # type: ignore[name-defined]  # noqa: B018
dirs_add  # type: ignore[name-defined]  # noqa: B018
dirs_remove  # type: ignore[name-defined]  # noqa: B018
dirs_show  # type: ignore[name-defined]  # noqa: B018
dirs_hide  # type: ignore[name-defined]  # noqa: B018
_global_options  # type: ignore[name-defined]  # noqa: B018

# Textual TUI framework uses these via introspection
TITLE  # type: ignore[name-defined]  # noqa: B018
ENABLE_COMMAND_PALETTE  # type: ignore[name-defined]  # noqa: B018
BINDINGS  # type: ignore[name-defined]  # noqa: B018
CSS  # type: ignore[name-defined]  # noqa: B018
DEFAULT_CSS  # type: ignore[name-defined]  # noqa: B018
compose  # type: ignore[name-defined]  # noqa: B018
on_mount  # type: ignore[name-defined]  # noqa: B018
on_button_pressed  # type: ignore[name-defined]  # noqa: B018
on_input_changed  # type: ignore[name-defined]  # noqa: B018
on_select_changed  # type: ignore[name-defined]  # noqa: B018
on_text_area_changed  # type: ignore[name-defined]  # noqa: B018
on_checkbox_changed  # type: ignore[name-defined]  # noqa: B018
on_data_table_header_selected  # type: ignore[name-defined]  # noqa: B018
on_data_table_cell_highlighted  # type: ignore[name-defined]  # noqa: B018
on_issue_detail_panel_saved  # type: ignore[name-defined]  # noqa: B018
on_issue_detail_panel_navigate  # type: ignore[name-defined]  # noqa: B018
action_save  # type: ignore[name-defined]  # noqa: B018
action_refresh  # type: ignore[name-defined]  # noqa: B018
action_exclude_value  # type: ignore[name-defined]  # noqa: B018
action_clear_column_filter  # type: ignore[name-defined]  # noqa: B018
action_toggle_sidebar  # type: ignore[name-defined]  # noqa: B018
action_deselect  # type: ignore[name-defined]  # noqa: B018

# Public engine API used by embedders and tests
get_readiness  # type: ignore[name-defined]  # noqa: B018
