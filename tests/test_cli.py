"""Behavior tests for the vd CLI dispatch and exit semantics."""

import json
from pathlib import Path

import pytest

import vd as cli

COMPOSITION = """
import { Sequence } from 'remotion';

const STEP = 90;

export const Onboarding = () => (
  <>
    <Sequence from={0} durationInFrames={STEP}>
      <Intro title="Welcome" />
    </Sequence>
    <Sequence from={STEP} durationInFrames={75}>
      <Caption text="Open the dashboard." theme={theme} />
    </Sequence>
    <Sequence from={STEP + 75} durationInFrames={STEP}>
      <Caption text='Click "New project".' theme={theme} />
    </Sequence>
  </>
);
"""


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda verbose=False: 0)
    for var in ("VD_FPS", "VD_PAUSE_S", "VD_VOICE", "VD_AUDIO_DIR"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def composition(tmp_path: Path) -> Path:
    path = tmp_path / "compositions" / "Onboarding.jsx"
    path.parent.mkdir()
    path.write_text(COMPOSITION, encoding="utf-8")
    return path


def _run(argv, capsys):
    code = cli.main(argv)
    return code, json.loads(capsys.readouterr().out)


def test_extract_writes_narration_next_to_composition(composition: Path, capsys) -> None:
    code, result = _run(["narration", "extract", str(composition)], capsys)

    assert code == 0
    assert result["step_count"] == 2
    narration = composition.with_name("Onboarding.narration.json")
    assert result["narration_path"] == str(narration)
    data = json.loads(narration.read_text(encoding="utf-8"))
    assert data["fps"] == 30
    assert [s["from"] for s in data["steps"]] == [90, 165]
    assert data["steps"][1]["text"] == 'Click "New project".'


def test_extract_with_custom_fps_and_output(composition: Path, tmp_path: Path, capsys) -> None:
    output = tmp_path / "out.json"

    code, result = _run(["narration", "extract", str(composition), "--fps", "60", "-o", str(output)], capsys)

    assert code == 0
    assert result["fps"] == 60
    assert result["steps"][0]["startSeconds"] == 1.5
    assert output.exists()


def test_extract_without_captions_succeeds_with_zero_steps(tmp_path: Path, capsys) -> None:
    path = tmp_path / "Empty.jsx"
    path.write_text("<AbsoluteFill />", encoding="utf-8")

    code, result = _run(["narration", "extract", str(path)], capsys)

    assert code == 0
    assert result["steps"] == []


@pytest.mark.parametrize("fps", ["0", "-1", "abc", "29.97"])
def test_invalid_fps_is_a_usage_error(composition: Path, fps: str) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["narration", "extract", str(composition), "--fps", fps])

    assert exc_info.value.code == 2


def test_missing_composition_exits_with_error(tmp_path: Path, capsys) -> None:
    code, result = _run(["narration", "extract", str(tmp_path / "Nope.jsx")], capsys)

    assert code == 1
    assert result["success"] is False
    assert result["code"] == "FILE_NOT_FOUND"


def test_pipeline_writes_voiceover_plan(composition: Path, tmp_path: Path, capsys) -> None:
    audio_dir = tmp_path / "audio"

    code, result = _run(
        ["narration", "pipeline", str(composition), "--output-dir", str(audio_dir), "--pause", "0.5"],
        capsys,
    )

    assert code == 0
    manifest = audio_dir / "Onboarding-voiceover.sync.json"
    assert result["manifest_path"] == str(manifest)
    plan = json.loads(manifest.read_text(encoding="utf-8"))
    assert plan["audioFile"] == "Onboarding-voiceover.mp3"
    assert plan["leadSilenceS"] == 3
    assert [s["type"] for s in plan["segments"]] == ["silence", "speech", "silence", "speech"]


def test_pipeline_without_captions_is_an_error(tmp_path: Path, capsys) -> None:
    path = tmp_path / "Bare.jsx"
    path.write_text('<Sequence from={0} durationInFrames={30}><Intro /></Sequence>', encoding="utf-8")

    code, result = _run(["narration", "pipeline", str(path), "--dry-run"], capsys)

    assert code == 1
    assert result["code"] == "NARRATION_ERROR"
    assert not (tmp_path / "Bare.narration.json").exists()


def test_pipeline_dry_run_stops_after_extraction(composition: Path, tmp_path: Path, capsys) -> None:
    code, result = _run(
        ["narration", "pipeline", str(composition), "--dry-run", "--output-dir", str(tmp_path / "audio")],
        capsys,
    )

    assert code == 0
    assert result["dry_run"] is True
    assert composition.with_name("Onboarding.narration.json").exists()
    assert not (tmp_path / "audio").exists()


def test_pipeline_skip_extract_requires_existing_narration(composition: Path, capsys) -> None:
    code, result = _run(["narration", "pipeline", str(composition), "--skip-extract"], capsys)

    assert code == 1
    assert result["code"] == "FILE_NOT_FOUND"


def test_pipeline_skip_extract_uses_edited_narration(composition: Path, tmp_path: Path, capsys) -> None:
    composition.with_name("Onboarding.narration.json").write_text(
        json.dumps({"fps": 30, "steps": [{"from": 0, "durationInFrames": 60, "text": "Edited."}]}),
        encoding="utf-8",
    )

    code, result = _run(
        ["narration", "pipeline", str(composition), "--skip-extract", "--output-dir", str(tmp_path / "audio")],
        capsys,
    )

    assert code == 0
    assert result["step_count"] == 1
    assert result["lead_silence_s"] == 0


def test_validate_command_reports_issues(tmp_path: Path, capsys) -> None:
    path = tmp_path / "x.narration.json"
    path.write_text(json.dumps({"fps": 30, "steps": []}), encoding="utf-8")

    code, result = _run(["narration", "validate", "--narration", str(path)], capsys)

    assert code == 1
    assert result["valid"] is False
    assert result["issues"] == ["No steps found in narration"]


def test_validate_command_rejects_non_numeric_seconds(tmp_path: Path, capsys) -> None:
    path = tmp_path / "x.narration.json"
    path.write_text(json.dumps({"fps": 30, "steps": [
        {"from": 0, "durationInFrames": 30, "text": "x", "durationSeconds": "1"}
    ]}), encoding="utf-8")

    code, result = _run(["narration", "validate", "--narration", str(path)], capsys)

    assert code == 1
    assert result["success"] is False
    assert result["code"] == "VALIDATION"


def test_captions_export(composition: Path, tmp_path: Path, capsys) -> None:
    cli.main(["narration", "extract", str(composition)])
    capsys.readouterr()
    output = tmp_path / "Onboarding.vtt"

    code, result = _run(
        ["captions", "export", "--narration", str(composition.with_name("Onboarding.narration.json")),
         "-o", str(output), "--format", "vtt"],
        capsys,
    )

    assert code == 0
    assert result["captions_count"] == 2
    assert output.read_text(encoding="utf-8").startswith("WEBVTT")


def test_no_command_prints_help(capsys) -> None:
    assert cli.main([]) == 2
