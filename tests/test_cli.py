import sys
from pathlib import Path

import pytest

from wayfind import cli
from wayfind.config import settings

SAMPLE = Path(__file__).resolve().parent.parent / "floors" / "sample_path.json"


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["wayfind", "--floor", str(SAMPLE), *argv])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    return exc.value.code


def test_single_path_prints_instructions_and_total(monkeypatch, capsys, tmp_path, memory_store):
    monkeypatch.setattr(settings, "redis_url", "")
    out = tmp_path / "last.json"

    assert _run(monkeypatch, "--provider", "template", "--out", str(out)) == 0

    printed = capsys.readouterr().out
    assert "Total: 41 steps at medium stride" in printed
    assert out.exists()
    assert memory_store.get("lobby-to-lab") is not None


def test_generation_failure_is_reported(monkeypatch, capsys, tmp_path, memory_store):
    monkeypatch.setattr(settings, "gemini_api_key", "")

    assert _run(monkeypatch, "--provider", "gemini", "--out", str(tmp_path / "x.json")) == 1
    assert "Failed to generate instructions" in capsys.readouterr().out
