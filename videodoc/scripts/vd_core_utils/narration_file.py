"""
Narration JSON files.

A composition `compositions/Onboarding.jsx` gets its narration next to it as
`compositions/Onboarding.narration.json`. The file may be edited by hand
between extraction and voiceover generation, so loading validates it again.
"""

import json
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Union

from vd_common import ValidationError, preview_text
from .caption_extractor import NarrationDocument, NarrationStep, frames_to_seconds

NARRATION_SUFFIX = ".narration.json"
_SOURCE_SUFFIX_PATTERN = re.compile(r'\.(jsx?|tsx?)$')

# Reading speed above this is flagged (chars per second)
MAX_CHARS_PER_SECOND = 20


def narration_path_for(composition_path: Union[str, Path]) -> Path:
    """Path of the narration JSON that belongs to a composition file."""
    path = Path(composition_path)
    if _SOURCE_SUFFIX_PATTERN.search(path.name):
        return path.with_name(_SOURCE_SUFFIX_PATTERN.sub("", path.name) + NARRATION_SUFFIX)
    return path.with_name(path.stem + NARRATION_SUFFIX)


def write_narration(doc: NarrationDocument, output_path: Union[str, Path]) -> Path:
    """Write a narration document as pretty-printed UTF-8 JSON."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(doc.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return output


def _require_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) \
            or not math.isfinite(value) or value != int(value):
        raise ValidationError(f"Invalid narration file: {what} must be an integer, got {value!r}")
    return int(value)


def _optional_seconds(raw: Dict[str, Any], key: str, default: float, what: str) -> float:
    if key not in raw:
        return default
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"Invalid narration file: {what} must be a number, got {value!r}")
    return value


def narration_from_dict(data: Dict[str, Any]) -> NarrationDocument:
    """
    Build a NarrationDocument from parsed narration JSON.

    startSeconds/durationSeconds are recomputed from fps when absent.

    Raises:
        ValidationError: If the structure is not a narration document
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid narration file: top level must be an object")

    fps = _require_int(data.get("fps"), "fps")
    if fps <= 0:
        raise ValidationError(f"Invalid narration file: fps must be positive, got {fps}")

    raw_steps = data.get("steps")
    if not isinstance(raw_steps, list):
        raise ValidationError("Invalid narration file: steps must be a list")

    steps: List[NarrationStep] = []
    for i, raw in enumerate(raw_steps, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"Invalid narration file: step {i} must be an object")
        from_frame = _require_int(raw.get("from"), f"step {i} 'from'")
        duration = _require_int(raw.get("durationInFrames"), f"step {i} 'durationInFrames'")
        text = raw.get("text")
        steps.append(NarrationStep(
            from_frame=from_frame,
            duration_frames=duration,
            start_seconds=_optional_seconds(
                raw, "startSeconds", frames_to_seconds(from_frame, fps), f"step {i} 'startSeconds'"
            ),
            duration_seconds=_optional_seconds(
                raw, "durationSeconds", frames_to_seconds(duration, fps), f"step {i} 'durationSeconds'"
            ),
            text=text.strip() if isinstance(text, str) else "",
        ))

    return NarrationDocument(fps=fps, steps=steps)


def load_narration(narration_path: Union[str, Path]) -> NarrationDocument:
    """Load and validate a narration JSON file."""
    path = Path(narration_path)
    if not path.exists():
        raise FileNotFoundError(f"Narration file not found: {path}")
    return narration_from_dict(json.loads(path.read_text(encoding="utf-8")))


def validate_narration(doc: NarrationDocument) -> Dict[str, Any]:
    """
    Check a narration document before it is sent to speech synthesis.

    Issues block generation (no steps, empty text). Warnings do not:
    overlapping steps, steps out of time order, too-fast reading speed.
    """
    issues = []
    warnings = []

    if not doc.steps:
        issues.append("No steps found in narration")

    for i, step in enumerate(doc.steps, start=1):
        if not step.text:
            issues.append(f"Step {i} has empty text")
            continue

        if step.duration_seconds > 0:
            chars_per_sec = len(step.text) / step.duration_seconds
            if chars_per_sec > MAX_CHARS_PER_SECOND:
                warnings.append(
                    f"Step {i} ('{preview_text(step.text, 30, '...')}') is too fast: {chars_per_sec:.1f} chars/sec"
                )

    for i in range(len(doc.steps) - 1):
        current, following = doc.steps[i], doc.steps[i + 1]
        if following.from_frame < current.from_frame:
            warnings.append(f"Step {i + 2} starts before step {i + 1}")
        elif current.from_frame + current.duration_frames > following.from_frame \
                and current.from_frame != following.from_frame:
            overlap = current.from_frame + current.duration_frames - following.from_frame
            warnings.append(f"Step {i + 1} overlaps with {i + 2} by {overlap} frame(s)")

    return {
        "valid": len(issues) == 0,
        "issues": issues,
        "warnings": warnings,
        "step_count": len(doc.steps),
    }


def format_preview_table(doc: NarrationDocument, width: int = 55) -> str:
    """Console table of steps: index, start, duration and truncated text."""
    lines = [
        f"  {'Step':<5} {'Start':<7} {'Duration':<9} Text",
        f"  {'─' * 5} {'─' * 7} {'─' * 9} {'─' * 50}",
    ]
    for i, step in enumerate(doc.steps, start=1):
        lines.append(
            f"  {i:<5} {str(step.start_seconds) + 's':<7} {str(step.duration_seconds) + 's':<9} "
            f"{preview_text(step.text, width)}"
        )
    return "\n".join(lines)
