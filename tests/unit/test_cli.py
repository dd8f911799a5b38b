"""Unit tests for the sonarEDM command-line wrapper."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from src.cli.sonar import _build_parser, main
from src.providers.event_store.sqlite_store import SQLiteEventStore
from tests.conftest import make_event, make_profile

_CATALOG = "config/catalog.example.yaml"


@pytest.fixture(autouse=True)
def _no_upstream_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECCOBEATS_API_KEY", "")
    monkeypatch.setenv("TICKETMASTER_API_KEY", "")


def _run_main(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return int(excinfo.value.code or 0)


def _seed(db_path: Path) -> None:
    async def _write() -> None:
        store = SQLiteEventStore(db_path)
        await store.initialize()
        await store.upsert_events(
            [
                make_event("evt-1"),
                make_event("evt-2", name="Casa Loma General Admission", artists=[], genres=[]),
            ]
        )

    asyncio.run(_write())


# ======================================================================
# Argument parsing
# ======================================================================


class TestParser:
    def test_enhance_defaults(self) -> None:
        args = _build_parser().parse_args(["enhance"])
        assert args.command == "enhance"
        assert args.batch_size is None
        assert args.limit is None

    def test_ingest_requires_coordinates(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["ingest", "--lat", "43.6"])

    def test_ingest_default_radius(self) -> None:
        args = _build_parser().parse_args(["ingest", "--lat", "43.65", "--lon", "-79.38"])
        assert args.radius == 50
        assert args.keyword is None

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run_main([]) == 1
        assert "enhance" in capsys.readouterr().out

    def test_batch_size_must_be_positive(self) -> None:
        assert _run_main(["enhance", "--batch-size", "0"]) == 2

    def test_negative_limit_rejected(self) -> None:
        assert _run_main(["enhance", "--limit", "-1"]) == 2


# ======================================================================
# Subcommands
# ======================================================================


class TestEnhanceCommand:
    def test_enhances_seeded_events(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        db_path = tmp_path / "sonar.db"
        _seed(db_path)

        code = _run_main(["enhance", "--db", str(db_path), "--catalog", _CATALOG, "--batch-size", "1"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Processed:        2" in out
        assert "Errors:           0" in out
        assert "[ 50.0%] Batch 1: 1/2 events" in out
        assert "[100.0%] Batch 2: 2/2 events" in out

        code = _run_main(["enhance", "--db", str(db_path), "--catalog", _CATALOG])
        assert code == 0
        assert "Processed:        0" in capsys.readouterr().out


class TestScoreCommand:
    def test_scores_with_default_profile(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        event_file = tmp_path / "event.json"
        event_file.write_text(make_event().model_dump_json())

        code = _run_main(["score", "--db", str(tmp_path / "s.db"), "--catalog", _CATALOG, "--event", str(event_file)])

        out = capsys.readouterr().out
        assert code == 0
        assert '"event_id": "test:evt-1"' in out
        assert '"user_id": "cli"' in out

    def test_scores_with_profile_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        event_file = tmp_path / "event.json"
        event_file.write_text(make_event().model_dump_json())
        profile_file = tmp_path / "profile.json"
        profile_file.write_text(make_profile(user_id="dj-fan").model_dump_json())

        code = _run_main(
            [
                "score",
                "--db",
                str(tmp_path / "s.db"),
                "--catalog",
                _CATALOG,
                "--event",
                str(event_file),
                "--profile",
                str(profile_file),
            ]
        )

        assert code == 0
        assert '"user_id": "dj-fan"' in capsys.readouterr().out

    def test_missing_event_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = _run_main(["score", "--db", str(tmp_path / "s.db"), "--event", str(tmp_path / "nope.json")])

        assert code == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_event_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        event_file = tmp_path / "event.json"
        event_file.write_text('{"name": "missing source id"}')

        code = _run_main(["score", "--db", str(tmp_path / "s.db"), "--event", str(event_file)])

        assert code == 1
        assert "Error:" in capsys.readouterr().err


class TestIngestCommand:
    def test_requires_ticketing_key(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = _run_main(["ingest", "--db", str(tmp_path / "s.db"), "--lat", "43.65", "--lon", "-79.38"])

        assert code == 1
        assert "TICKETMASTER_API_KEY" in capsys.readouterr().err
