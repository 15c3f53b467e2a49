"""Tests for the CLI: argument parsing, job loading, config, history and extract-text commands."""

from pathlib import Path
from textwrap import dedent
from unittest.mock import patch

import pytest

from main import load_job, main, parse_args


def _settings_file(tmp_path: Path) -> Path:
    cfg = tmp_path / "settings.yaml"
    cfg.write_text(f"storage:\n  path: {tmp_path / 'screening.db'}\n")
    return cfg


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code  # type: ignore[return-value]


class TestParseArgs:
    def test_screen(self) -> None:
        args = parse_args(["screen", "--job", "job.yaml", "--resume", "a.pdf", "b.txt"])
        assert args.command == "screen"
        assert args.resume == ["a.pdf", "b.txt"]
        assert args.sort == "score_desc"
        assert args.min_score == 0

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_history_show(self) -> None:
        args = parse_args(["history", "show", "abc"])
        assert args.history_command == "show"
        assert args.session_id == "abc"

    def test_bad_recommendation(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["screen", "--job", "j", "--resume", "a", "--recommendation", "YES"])


class TestLoadJob:
    def test_yaml(self, tmp_path: Path) -> None:
        p = tmp_path / "job.yaml"
        p.write_text(dedent("""\
            title: Backend Engineer
            description: Python services
        """))
        job = load_job(p)
        assert job.title == "Backend Engineer"
        assert job.description == "Python services"

    def test_plain_text(self, tmp_path: Path) -> None:
        p = tmp_path / "backend.txt"
        p.write_text("  We need a Python engineer.\n")
        job = load_job(p)
        assert job.title == "backend"
        assert job.description == "We need a Python engineer."

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Job file not found"):
            load_job(tmp_path / "nope.yaml")


class TestConfigCommands:
    def test_set_temperature_clamped(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = _settings_file(tmp_path)
        assert _run(["--settings", str(cfg), "config", "set-temperature", "1.7"]) == 0
        assert "Temperature set to 1.0" in capsys.readouterr().out

        assert _run(["--settings", str(cfg), "config", "show"]) == 0
        out = capsys.readouterr().out
        assert "Temperature: 1.0" in out
        assert "API key: not set" in out

    def test_set_and_clear_key(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = _settings_file(tmp_path)
        assert _run(["--settings", str(cfg), "config", "set-key", "abcd1234wxyz"]) == 0
        assert _run(["--settings", str(cfg), "config", "show"]) == 0
        assert "abcd...wxyz" in capsys.readouterr().out

        assert _run(["--settings", str(cfg), "config", "clear-key"]) == 0
        assert _run(["--settings", str(cfg), "config", "show"]) == 0
        assert "API key: not set" in capsys.readouterr().out

    def test_nan_temperature_rejected(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = _settings_file(tmp_path)
        assert _run(["--settings", str(cfg), "config", "set-temperature", "nan"]) == 1
        assert "temperature must be a number" in capsys.readouterr().err

        assert _run(["--settings", str(cfg), "config", "show"]) == 0
        assert "Temperature: 0.4" in capsys.readouterr().out

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        assert _run(["--settings", str(tmp_path / "nope.yaml"), "config", "show"]) == 1


class TestScreenCommand:
    def test_missing_key_exit_code(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = _settings_file(tmp_path)
        job = tmp_path / "job.yaml"
        job.write_text("title: Engineer\ndescription: Python\n")
        resume = tmp_path / "cv.txt"
        resume.write_text("Jane Doe")

        code = _run(["--settings", str(cfg), "screen", "--job", str(job), "--resume", str(resume)])
        assert code == 2
        assert "API key missing or invalid" in capsys.readouterr().err


class TestHistoryCommands:
    def test_list_empty(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = _settings_file(tmp_path)
        assert _run(["--settings", str(cfg), "history", "list"]) == 0
        assert "No saved sessions." in capsys.readouterr().out

    def test_show_missing(self, tmp_path: Path) -> None:
        cfg = _settings_file(tmp_path)
        assert _run(["--settings", str(cfg), "history", "show", "missing"]) == 1


class TestExtractTextCommand:
    def test_text_resume_printed(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = _settings_file(tmp_path)
        resume = tmp_path / "cv.txt"
        resume.write_text("Jane Doe\nPython")
        assert _run(["--settings", str(cfg), "extract-text", str(resume)]) == 0
        assert "Jane Doe" in capsys.readouterr().out

    def test_missing_sdk_reports_install_hint(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        cfg = _settings_file(tmp_path)
        assert _run(["--settings", str(cfg), "config", "set-key", "abcd1234wxyz"]) == 0
        resume = tmp_path / "cv.pdf"
        resume.write_bytes(b"%PDF-1.4")

        with patch.dict("sys.modules", {"google": None, "google.genai": None}):
            code = _run(["--settings", str(cfg), "extract-text", str(resume)])
        assert code == 1
        assert "pip install google-genai" in capsys.readouterr().err
