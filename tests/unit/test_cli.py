"""Tests for the vetscribe command line."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from tests.fakes.fake_inference import FakeInferenceBackend
from tests.fakes.payloads import facts_json, impression_json
from vetscribe.cli.main import app

runner = CliRunner()


@pytest.fixture
def transcript_file(tmp_path: Path, sample_transcript: str) -> Path:
    path = tmp_path / "exam-42.txt"
    path.write_text("[00:00.000 --> 00:02.000] " + sample_transcript, encoding="utf-8")
    return path


class TestScore:
    def test_table(self, transcript_file: Path) -> None:
        result = runner.invoke(app, ["score", str(transcript_file)])
        assert result.exit_code == 0
        assert "Transcript quality" in result.output
        assert "organ_hit_count" in result.output

    def test_json(self, transcript_file: Path) -> None:
        result = runner.invoke(app, ["score", str(transcript_file), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["score"] > 0

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["score", str(tmp_path / "nope.txt")])
        assert result.exit_code != 0


class TestNormalize:
    def test_writes_output(self, tmp_path: Path) -> None:
        src = tmp_path / "raw.txt"
        src.write_text("Netki bez zmian. Netki bez zmian. Netki bez zmian.", encoding="utf-8")
        out = tmp_path / "clean.txt"
        result = runner.invoke(app, ["normalize", str(src), "--output", str(out)])

        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == "Nerki bez zmian."


class TestProcess:
    def test_full_run_to_file(self, transcript_file: Path, tmp_path: Path) -> None:
        backend = FakeInferenceBackend(
            [
                facts_json(findings=["Nerki: poszerzona miedniczka lewej nerki"]),
                impression_json(doctorKeyConcerns=["poszerzenie miedniczki"]),
                json.dumps({"summary": "Poszerzenie miedniczki.", "confidence": 70}),
            ]
        )
        out = tmp_path / "report.txt"
        with patch("vetscribe.context.create_inference_backend", return_value=backend):
            result = runner.invoke(
                app, ["process", str(transcript_file), "--store", "memory", "--output", str(out)]
            )

        assert result.exit_code == 0, result.output
        report = out.read_text(encoding="utf-8")
        assert report.startswith("RAPORT BADANIA:")
        assert "- poszerzenie miedniczki" in report

    def test_extraction_failure_exits_nonzero(self, transcript_file: Path) -> None:
        backend = FakeInferenceBackend(["nie json", "nie json"])
        with patch("vetscribe.context.create_inference_backend", return_value=backend):
            result = runner.invoke(app, ["process", str(transcript_file), "--store", "memory"])

        assert result.exit_code == 1
        assert "MalformedOutputError" in result.output
