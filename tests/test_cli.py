"""Tests for CLI interface."""

import json
import os

from typer.testing import CliRunner

from diskprobe.cli import app, build_payload

runner = CliRunner()


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "diskprobe version" in result.stdout

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert "diskprobe version" in result.stdout


class TestHelp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "analyze" in result.stdout
        assert "preview" in result.stdout
        assert "run" in result.stdout

    def test_analyze_help(self):
        result = runner.invoke(app, ["analyze", "--help"])
        assert result.exit_code == 0
        assert "Analyze disk usage" in result.stdout
        assert "--max-depth" in result.stdout


class TestBuildPayload:
    def test_only_set_options_are_included(self):
        payload = build_payload("/data", 3, None, None, None, 30, False)
        assert payload == {"path": "/data", "maxDepth": 3, "timeoutSeconds": 30}

    def test_follow_symlinks(self):
        payload = build_payload("/data", None, None, None, None, None, True)
        assert payload == {"path": "/data", "followSymlinks": True}

    def test_home_is_expanded_for_the_shell(self):
        payload = build_payload("~", None, None, None, None, None, False)
        assert payload["path"] == os.path.expanduser("~")


class TestAnalyze:
    def test_json_output(self, tmp_path, make_file):
        make_file(tmp_path / "sub" / "data.bin", 2048)

        result = runner.invoke(app, ["analyze", str(tmp_path), "--json", "--top-files", "5"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["status"] == "completed"
        assert payload["result"]["path"] == str(tmp_path)
        assert payload["result"]["summary"]["filesScanned"] == 1
        assert payload["result"]["topLargestFiles"][0]["sizeBytes"] == 2048

    def test_rich_output(self, tmp_path, make_file):
        make_file(tmp_path / "data.bin", 2048)

        result = runner.invoke(app, ["analyze", str(tmp_path)])

        assert result.exit_code == 0
        assert "Largest Files" in result.stdout
        assert "Largest Directories" in result.stdout

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "failed to stat path" in result.stdout

    def test_bracketed_path_names(self, tmp_path, make_file):
        make_file(tmp_path / "[" / "x]", 10)

        result = runner.invoke(app, ["analyze", str(tmp_path)])

        assert result.exit_code == 0
        assert "Largest Files" in result.stdout

    def test_missing_directory_json(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing"), "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["status"] == "failed"
        assert payload["result"] is None


class TestPreview:
    def test_json_preview(self, tmp_path, make_file):
        make_file(tmp_path / "a.bin", 10)

        result = runner.invoke(app, ["preview", str(tmp_path), "--json", "-c", "temp_files"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert {"estimatedBytes", "candidateCount", "categories", "candidates"} <= payload.keys()
        assert all(c["category"] == "temp_files" for c in payload["candidates"])

    def test_rich_preview(self, tmp_path):
        result = runner.invoke(app, ["preview", str(tmp_path)])

        assert result.exit_code == 0
        assert "Cleanup Preview" in result.stdout or "Nothing safe to clean" in result.stdout

    def test_unknown_category(self, tmp_path):
        result = runner.invoke(app, ["preview", str(tmp_path), "--category", "junk"])

        assert result.exit_code == 1
        assert "unknown cleanup category" in result.stdout

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["preview", str(tmp_path / "missing")])
        assert result.exit_code == 1

    def test_from_saved_report(self, tmp_path, make_file):
        make_file(tmp_path / "data" / "a.bin", 10)
        saved = tmp_path / "report.json"
        scanned = runner.invoke(app, ["analyze", str(tmp_path / "data"), "--json"])
        assert scanned.exit_code == 0
        saved.write_text(scanned.stdout)
        expected = json.loads(scanned.stdout)["result"]["cleanupCandidates"]

        result = runner.invoke(app, ["preview", "--from", str(saved), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["candidateCount"] == len({c["path"] for c in expected})

    def test_from_failed_result(self, tmp_path):
        saved = tmp_path / "report.json"
        saved.write_text(json.dumps({"status": "failed", "error": "boom", "result": None}))

        result = runner.invoke(app, ["preview", "--from", str(saved)])

        assert result.exit_code == 1
        assert "boom" in result.stdout

    def test_needs_path_or_saved_report(self):
        result = runner.invoke(app, ["preview"])
        assert result.exit_code == 1


class TestRun:
    def test_payload_from_stdin(self, tmp_path, make_file):
        make_file(tmp_path / "a.bin", 10)

        result = runner.invoke(app, ["run"], input=json.dumps({"path": str(tmp_path), "maxDepth": 2}))

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["status"] == "completed"
        assert payload["result"]["summary"]["filesScanned"] == 1

    def test_payload_from_file(self, tmp_path):
        request = tmp_path / "request.json"
        request.write_text(json.dumps({"path": str(tmp_path)}))

        result = runner.invoke(app, ["run", str(request), "--command", "filesystem_analysis"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["status"] == "completed"

    def test_unknown_command(self):
        result = runner.invoke(app, ["run", "--command", "nope"], input="{}")

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["error"] == "Unknown command: nope"

    def test_invalid_json(self):
        result = runner.invoke(app, ["run"], input="{not json")

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["status"] == "failed"
        assert payload["error"].startswith("invalid payload")

    def test_missing_path(self):
        result = runner.invoke(app, ["run"], input="{}")

        assert result.exit_code == 1
        assert "missing required field: path" in json.loads(result.stdout)["error"]


class TestConfig:
    def test_shows_defaults(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "Config file" in result.stdout
        assert "maxDepth" in result.stdout
        assert "timeoutSeconds" in result.stdout

    def test_verbose_flag_accepted(self):
        result = runner.invoke(app, ["-vv", "config"])
        assert result.exit_code == 0
