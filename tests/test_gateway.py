"""Tests for the bd subprocess gateway."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Any

import orjson
import pytest

from beadui.errors import GatewayRejected, GatewayUnavailable, MalformedResponse
from beadui.gateway import BdGateway, resolve_db_path
from conftest import make_record


class FakeRun:
    """Stand-in for ``subprocess.run`` that records argv."""

    def __init__(
        self,
        stdout: str = "[]",
        stderr: str = "",
        returncode: int = 0,
        raises: BaseException | None = None,
    ) -> None:
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.raises = raises
        self.calls: list[list[str]] = []
        self.kwargs: dict[str, Any] = {}

    def __call__(self, argv: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(argv)
        self.kwargs = kwargs
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(
            argv,
            self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
        )


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> FakeRun:
    """Patch subprocess.run inside the gateway module."""
    runner = FakeRun()
    monkeypatch.setattr("beadui.gateway.subprocess.run", runner)
    return runner


def _beads_dir(root: Path, *db_names: str) -> Path:
    beads = root / ".beads"
    beads.mkdir(parents=True)
    for name in db_names:
        (beads / name).write_text("")
    return root


class TestResolveDbPath:
    """Test location hint resolution."""

    def test_first_db_in_sorted_order(self, tmp_path: Path) -> None:
        """The alphabetically first .db file wins."""
        root = _beads_dir(tmp_path, "zeta.db", "alpha.db", "notes.txt")
        assert resolve_db_path(root) == root / ".beads" / "alpha.db"

    def test_no_beads_dir(self, tmp_path: Path) -> None:
        """A directory without .beads has no database."""
        assert resolve_db_path(tmp_path) is None

    def test_no_location(self) -> None:
        """No hint, no database."""
        assert resolve_db_path(None) is None


class TestBdGatewayCommands:
    """Test the argv sent to bd."""

    def test_list_with_db_hint(self, fake_run: FakeRun, tmp_path: Path) -> None:
        """List passes --db when the location has a database."""
        root = _beads_dir(tmp_path, "beads.db")
        BdGateway(command="bd").list(root)
        assert fake_run.calls == [
            ["bd", "list", "--json", "--db", str(root / ".beads" / "beads.db")],
        ]
        assert fake_run.kwargs["timeout"] == 30.0

    def test_list_without_hint(self, fake_run: FakeRun, tmp_path: Path) -> None:
        """Without a database the process inherits the current directory."""
        BdGateway(command="bd").list(tmp_path)
        assert fake_run.calls == [["bd", "list", "--json"]]

    def test_update_argv(self, fake_run: FakeRun) -> None:
        """Update sets exactly one field."""
        fake_run.stdout = ""
        BdGateway(command="bd").update("x-1", "assignee", "alice")
        assert fake_run.calls == [["bd", "update", "x-1", "--assignee", "alice"]]

    def test_command_from_environment(
        self,
        fake_run: FakeRun,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """BEADUI_BD overrides the executable."""
        monkeypatch.setenv("BEADUI_BD", "/opt/bd")
        monkeypatch.setenv("BEADUI_BD_TIMEOUT", "5")
        gateway = BdGateway()
        gateway.list()
        assert fake_run.calls[0][0] == "/opt/bd"
        assert gateway.timeout == 5.0


class TestBdGatewayDecoding:
    """Test parsing of bd output."""

    def test_list_decodes_issues(self, fake_run: FakeRun) -> None:
        """Each array element becomes an Issue."""
        fake_run.stdout = orjson.dumps([make_record("x-1"), make_record("x-2")]).decode()
        issues = BdGateway(command="bd").list()
        assert [i.id for i in issues] == ["x-1", "x-2"]

    def test_list_null_is_empty(self, fake_run: FakeRun) -> None:
        """bd prints null for an empty database."""
        fake_run.stdout = "null"
        assert BdGateway(command="bd").list() == []

    def test_list_object_is_malformed(self, fake_run: FakeRun) -> None:
        """A list command must print an array."""
        fake_run.stdout = "{}"
        with pytest.raises(MalformedResponse):
            BdGateway(command="bd").list()

    def test_invalid_json(self, fake_run: FakeRun) -> None:
        """Unparseable output is a malformed response."""
        fake_run.stdout = "not json"
        with pytest.raises(MalformedResponse, match="Failed to parse JSON"):
            BdGateway(command="bd").list()

    def test_record_missing_priority(self, fake_run: FakeRun) -> None:
        """Records without a priority are malformed."""
        fake_run.stdout = orjson.dumps([{"id": "x-1", "title": "t"}]).decode()
        with pytest.raises(MalformedResponse, match="priority"):
            BdGateway(command="bd").list()

    def test_show_accepts_object(self, fake_run: FakeRun) -> None:
        """Show may print the issue object itself."""
        fake_run.stdout = orjson.dumps(make_record("x-1")).decode()
        assert BdGateway(command="bd").get("x-1").id == "x-1"

    def test_show_accepts_array(self, fake_run: FakeRun) -> None:
        """Show may print a one-element array."""
        fake_run.stdout = orjson.dumps(
            [make_record("x-2", blockers=[("x-1", "open")])],
        ).decode()
        issue = BdGateway(command="bd").get("x-2")
        assert issue.id == "x-2"
        assert [dep.id for dep in issue.dependencies] == ["x-1"]

    def test_show_empty_array(self, fake_run: FakeRun) -> None:
        """An empty array means the issue was not returned."""
        fake_run.stdout = "[]"
        with pytest.raises(MalformedResponse, match="x-1"):
            BdGateway(command="bd").get("x-1")

    def test_output_decoded_leniently(self, fake_run: FakeRun) -> None:
        """Output is decoded as UTF-8 with replacement, never strictly."""
        BdGateway(command="bd").list()
        assert fake_run.kwargs["encoding"] == "utf-8"
        assert fake_run.kwargs["errors"] == "replace"
        assert "text" not in fake_run.kwargs

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    def test_undecodable_bytes_replaced(self, tmp_path: Path) -> None:
        """Invalid UTF-8 from bd becomes U+FFFD instead of an exception."""
        script = tmp_path / "bd"
        script.write_text(
            "#!/bin/sh\n"
            "printf '[{\"id\":\"x-1\",\"title\":\"bad \\377 byte\",\"priority\":1}]'\n",
        )
        script.chmod(0o755)
        issues = BdGateway(command=str(script)).list()
        assert [i.id for i in issues] == ["x-1"]
        assert issues[0].title == "bad \ufffd byte"


class TestBdGatewayFailures:
    """Test process failures."""

    def test_missing_executable(self, fake_run: FakeRun) -> None:
        """A missing binary makes the store unavailable."""
        fake_run.raises = FileNotFoundError(2, "No such file", "bd")
        with pytest.raises(GatewayUnavailable, match="Failed to execute bd"):
            BdGateway(command="bd").list()

    def test_timeout(self, fake_run: FakeRun) -> None:
        """A hung process makes the store unavailable."""
        fake_run.raises = subprocess.TimeoutExpired(["bd"], 2.0)
        with pytest.raises(GatewayUnavailable, match="timed out"):
            BdGateway(command="bd", timeout=2.0).list()

    def test_nonzero_exit_uses_stderr(self, fake_run: FakeRun) -> None:
        """The diagnostic comes from stderr."""
        fake_run.returncode = 1
        fake_run.stderr = "Error: issue x-9 not found\n"
        with pytest.raises(GatewayRejected) as excinfo:
            BdGateway(command="bd").get("x-9")
        assert excinfo.value.diagnostic == "Error: issue x-9 not found"
        assert excinfo.value.returncode == 1

    def test_nonzero_exit_without_output(self, fake_run: FakeRun) -> None:
        """A silent failure still gets a diagnostic."""
        fake_run.returncode = 3
        fake_run.stdout = ""
        with pytest.raises(GatewayRejected, match="exited with status 3"):
            BdGateway(command="bd").update("x-1", "title", "t")
