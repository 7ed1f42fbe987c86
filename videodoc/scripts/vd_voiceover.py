"""
Voiceover hand-off for the speech stage.

Speech synthesis and audio stitching happen outside this repo. This module
produces the plan that stage consumes: a lead silence so the first line lands
on its caption, then each step's text separated by fixed pauses, plus the
sync manifest the renderer uses to place the audio track.
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from vd_common import DEFAULT_PAUSE_S, DEFAULT_VOICE, ValidationError
from vd_core_utils import NarrationDocument

logger = logging.getLogger(__name__)


def sync_manifest_path_for(audio_path: Union[str, Path]) -> Path:
    """`voiceover.mp3` -> `voiceover.sync.json`; other names get the suffix appended."""
    path = Path(audio_path)
    if re.search(r'\.(mp3|wav)$', path.name, re.IGNORECASE):
        return path.with_name(path.stem + ".sync.json")
    return path.with_name(path.name + ".sync.json")


def build_voiceover_plan(
    doc: NarrationDocument,
    pause_s: float = DEFAULT_PAUSE_S,
    voice: Optional[str] = None,
    audio_file: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the ordered speech/silence plan for a narration.

    Args:
        doc: Narration document (steps in order)
        pause_s: Silence between consecutive spoken steps
        voice: Voice name passed through to the speech stage
        audio_file: Name of the audio file the speech stage will write

    Returns:
        Dict with lead_silence_s, segments and a per-step summary
    """
    if pause_s < 0:
        raise ValidationError(f"Invalid pause: must be >= 0, got {pause_s}")

    lead_silence_s = doc.steps[0].start_seconds if doc.steps else 0
    segments: List[Dict[str, Any]] = []

    if lead_silence_s > 0:
        segments.append({"type": "silence", "duration_s": lead_silence_s})

    spoken = []
    for i, step in enumerate(doc.steps, start=1):
        if not step.text.strip():
            logger.warning("Step %02d/%d has empty text, skipping", i, len(doc.steps))
            continue
        spoken.append((i, step))

    for n, (i, step) in enumerate(spoken):
        segments.append({"type": "speech", "step": i, "text": step.text.strip()})
        if n < len(spoken) - 1 and pause_s > 0:
            segments.append({"type": "silence", "duration_s": pause_s})

    return {
        "audioFile": audio_file,
        "delayInFrames": 0,  # lead silence carries the offset
        "leadSilenceS": lead_silence_s,
        "pauseBetweenStepsS": pause_s,
        "fps": doc.fps,
        "voice": voice or DEFAULT_VOICE,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "segments": segments,
        "steps": [
            {"step": i, "startSeconds": s.start_seconds, "text": s.text}
            for i, s in enumerate(doc.steps, start=1)
        ],
    }


def write_voiceover_plan(plan: Dict[str, Any], output_path: Union[str, Path]) -> Path:
    """Write the plan/sync manifest as JSON."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(plan, indent=2, ensure_ascii=False), encoding="utf-8")
    return output
