"""Tests for CLI commands."""

import json

import pytest
import yaml

from catalog_lens.cli import ExitCode, main


class TestStatusCommand:
    """Tests for the status command."""

    def test_with_workspace(self, workspace_project, capsys):
        """Status lists catalog counts."""
        exit_code = main(["--root", str(workspace_project), "status"])
        out = capsys.readouterr().out
        assert exit_code == ExitCode.SUCCESS
        assert "Default catalog: 2 entries" in out
        assert "react17: 2 entries" in out

    def test_without_workspace(self, tmp_path, capsys):
        """Status reports a missing document without failing."""
        exit_code = main(["--root", str(tmp_path), "status"])
        assert exit_code == ExitCode.SUCCESS
        assert "NOT FOUND" in capsys.readouterr().out

    def test_invalid_document(self, tmp_path, capsys):
        """Status reports unusable documents."""
        (tmp_path / "pnpm-workspace.yaml").write_text("catalog: [unterminated")
        exit_code = main(["--root", str(tmp_path), "status"])
        assert exit_code == ExitCode.SUCCESS
        assert "unavailable" in capsys.readouterr().out


class TestShowCommand:
    """Tests for the show command."""

    def test_json_output(self, workspace_project, capsys):
        """--json prints both sections."""
        exit_code = main(["--root", str(workspace_project), "show", "--json"])
        assert exit_code == ExitCode.SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["catalog"] == {"react": "^18.3.1", "redux": "^5.0.1"}
        assert data["catalogs"]["react18"]["react-dom"] == "^18.2.0"

    def test_text_output(self, workspace_project, capsys):
        """Text output lists every catalog."""
        exit_code = main(["--root", str(workspace_project), "show"])
        out = capsys.readouterr().out
        assert exit_code == ExitCode.SUCCESS
        assert "  react: ^18.3.1" in out
        assert "catalog:react17" in out

    def test_without_workspace(self, tmp_path):
        """Show fails when there is no document."""
        assert main(["--root", str(tmp_path), "show"]) == ExitCode.FILE_SYSTEM_ERROR


class TestResolveCommand:
    """Tests for the resolve command."""

    def test_resolves_default(self, workspace_project, capsys):
        """Default references print the version."""
        exit_code = main(["--root", str(workspace_project), "resolve", "react", "catalog:"])
        assert exit_code == ExitCode.SUCCESS
        assert capsys.readouterr().out.strip() == "^18.3.1"

    def test_resolves_named(self, workspace_project, capsys):
        """Named references print the version."""
        exit_code = main(["--root", str(workspace_project), "resolve", "react-dom", "catalog:react17"])
        assert exit_code == ExitCode.SUCCESS
        assert capsys.readouterr().out.strip() == "^17.0.2"

    def test_unresolved(self, workspace_project):
        """Unknown packages exit with NOT_FOUND."""
        exit_code = main(["--root", str(workspace_project), "resolve", "vue", "catalog:"])
        assert exit_code == ExitCode.NOT_FOUND

    def test_not_a_reference(self, workspace_project, capsys):
        """Plain versions are rejected."""
        exit_code = main(["--root", str(workspace_project), "resolve", "react", "^18.0.0"])
        assert exit_code == ExitCode.NOT_FOUND
        assert "Not a catalog reference" in capsys.readouterr().err

    def test_uses_cwd_by_default(self, workspace_project, monkeypatch, capsys):
        """Without --root the current directory is the project root."""
        monkeypatch.chdir(workspace_project)
        assert main(["resolve", "redux", "catalog"]) == ExitCode.SUCCESS
        assert capsys.readouterr().out.strip() == "^5.0.1"


class TestLocateCommand:
    """Tests for the locate command."""

    def test_locates_entry(self, workspace_project, workspace_file, capsys):
        """Locations print as path:line:column."""
        exit_code = main(["--root", str(workspace_project), "locate", "react", "catalog:react17"])
        assert exit_code == ExitCode.SUCCESS
        assert capsys.readouterr().out.startswith(f"{workspace_file}:")

    def test_missing_entry(self, workspace_project):
        """Missing entries exit with NOT_FOUND."""
        exit_code = main(["--root", str(workspace_project), "locate", "react", "catalog:nope"])
        assert exit_code == ExitCode.NOT_FOUND


class TestHintsCommand:
    """Tests for the hints command."""

    def test_prints_hints(self, workspace_project, capsys):
        """Every resolvable dependency gets a hint line."""
        manifest = workspace_project / "packages" / "example-app" / "package.json"
        exit_code = main(["--root", str(workspace_project), "hints", str(manifest)])
        out = capsys.readouterr().out
        assert exit_code == ExitCode.SUCCESS
        assert 'dependencies react catalog: -> "^18.3.1"' in out
        assert 'dependencies react-dom catalog:react17 -> "^17.0.2"' in out

    def test_reports_unresolved(self, workspace_project, tmp_path, capsys):
        """Unresolved references are counted on stderr."""
        manifest = tmp_path / "package.json"
        manifest.write_text(json.dumps({"dependencies": {"vue": "catalog:"}}))
        exit_code = main(["--root", str(workspace_project), "hints", str(manifest)])
        assert exit_code == ExitCode.SUCCESS
        assert "1 catalog reference(s) unresolved" in capsys.readouterr().err

    def test_missing_manifest(self, workspace_project, tmp_path):
        """Missing manifests exit with FILE_SYSTEM_ERROR."""
        exit_code = main(["--root", str(workspace_project), "hints", str(tmp_path / "nope.json")])
        assert exit_code == ExitCode.FILE_SYSTEM_ERROR


class TestConfigHandling:
    """Tests for configuration errors and overrides."""

    def test_invalid_config_exits_1(self, workspace_project, capsys):
        """Invalid config should exit with code 1 and JSON on stderr."""
        config_file = workspace_project / "bad.yaml"
        config_file.write_text("{ invalid yaml: [")
        exit_code = main(["--root", str(workspace_project), "--config", str(config_file), "status"])
        assert exit_code == ExitCode.CONFIG_ERROR
        assert json.loads(capsys.readouterr().err)["error"] == "config_invalid"

    def test_config_in_root_changes_document_name(self, tmp_path, capsys):
        """The workspace file name comes from the project config."""
        (tmp_path / ".catalog-lens.yaml").write_text(yaml.dump({"workspace_filename": "ws.yaml"}))
        (tmp_path / "ws.yaml").write_text("catalog:\n  react: ^19.0.0\n")
        exit_code = main(["--root", str(tmp_path), "resolve", "react", "catalog:"])
        assert exit_code == ExitCode.SUCCESS
        assert capsys.readouterr().out.strip() == "^19.0.0"


class TestWatchCommand:
    """Tests for the watch command."""

    def test_reports_changes_until_interrupted(self, workspace_project, workspace_file, monkeypatch, capsys):
        """Edits between polls are reported; Ctrl-C ends the loop."""
        polls = []

        def fake_sleep(seconds):
            polls.append(seconds)
            if len(polls) == 1:
                workspace_file.write_text("catalog:\n  react: ^19.0.0\n")
            else:
                raise KeyboardInterrupt

        monkeypatch.setattr("catalog_lens.cli.time.sleep", fake_sleep)
        exit_code = main(["--root", str(workspace_project), "watch", "--interval", "0.5"])
        out = capsys.readouterr().out.splitlines()
        assert exit_code == ExitCode.SUCCESS
        assert polls == [0.5, 0.5]
        assert out == [
            "catalog: 2 entries, catalogs: 2",
            "catalog: 1 entries, catalogs: 0",
        ]

    @pytest.mark.parametrize("interval", ["-1", "0", "nan", "soon"])
    def test_rejects_bad_interval(self, workspace_project, interval, capsys):
        """Intervals that are not positive numbers are usage errors."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--root", str(workspace_project), "watch", "--interval", interval])
        assert exc_info.value.code == 2
        assert "--interval" in capsys.readouterr().err

    def test_uses_config_interval_by_default(self, workspace_project, monkeypatch):
        """Without --interval the configured poll interval is used."""
        (workspace_project / ".catalog-lens.yaml").write_text(yaml.dump({"poll_interval": 0.25}))
        polls = []

        def fake_sleep(seconds):
            polls.append(seconds)
            raise KeyboardInterrupt

        monkeypatch.setattr("catalog_lens.cli.time.sleep", fake_sleep)
        assert main(["--root", str(workspace_project), "watch"]) == ExitCode.SUCCESS
        assert polls == [0.25]
