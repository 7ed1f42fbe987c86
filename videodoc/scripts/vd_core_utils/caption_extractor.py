"""
Caption extraction for composition sources.

Turns every <Caption text="..."/> inside a timed <Sequence> into one narration
step carrying the sequence's timing:

    {
      "fps": 30,
      "steps": [
        {"from": 90, "durationInFrames": 75, "durationSeconds": 2.5,
         "startSeconds": 3.0, "text": "Open the dashboard..."}
      ]
    }

The output is the input of the voiceover stage and is meant to be editable by
hand before audio is generated.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from vd_common import DEFAULT_FPS, ValidationError
from .constants import extract_constants, resolve_expression
from .markup_scanner import find_sequence_blocks

logger = logging.getLogger(__name__)

# Accepts literals and constant references: from={90}, from={STEP}, from={STEP * 2}
_FROM_PATTERN = re.compile(r'\bfrom=\{([^}]+)\}')
_DURATION_PATTERN = re.compile(r'\bdurationInFrames=\{([^}]+)\}')

# text="hello \"world\"" - any of the three quote styles, backslash escapes allowed
_CAPTION_TEXT_PATTERN = re.compile(r'text=(["\'`])((?:\\.|(?!\1).)*?)\1', re.DOTALL)
_ESCAPE_PATTERN = re.compile(r'\\(.)', re.DOTALL)


@dataclass
class NarrationStep:
    """One narration line with the timing of its sequence."""
    from_frame: int
    duration_frames: int
    start_seconds: float
    duration_seconds: float
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_frame,
            "durationInFrames": self.duration_frames,
            "durationSeconds": self.duration_seconds,
            "startSeconds": self.start_seconds,
            "text": self.text,
        }


@dataclass
class NarrationDocument:
    """Ordered narration steps for one composition."""
    fps: int
    steps: List[NarrationStep] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"fps": self.fps, "steps": [s.to_dict() for s in self.steps]}


def frames_to_seconds(frames: int, fps: int) -> float:
    return round(frames / fps, 2)


def make_step(from_frame: int, duration_frames: int, text: str, fps: int) -> NarrationStep:
    return NarrationStep(
        from_frame=from_frame,
        duration_frames=duration_frames,
        start_seconds=frames_to_seconds(from_frame, fps),
        duration_seconds=frames_to_seconds(duration_frames, fps),
        text=text,
    )


def validate_fps(fps: Optional[int]) -> int:
    """Return fps, or the default when None. Rejects non-positive and non-integer values."""
    if fps is None:
        return DEFAULT_FPS
    if isinstance(fps, bool) or not isinstance(fps, int) or fps <= 0:
        raise ValidationError(f"Invalid fps value: {fps!r}. Must be a positive integer.")
    return fps


def unescape_caption(raw: str) -> str:
    """Collapse backslash escapes (\\X -> X) and trim."""
    return _ESCAPE_PATTERN.sub(r'\1', raw).strip()


def find_caption_texts(body: str) -> List[str]:
    """All non-empty caption texts in a block body, in order."""
    texts = []
    for match in _CAPTION_TEXT_PATTERN.finditer(body):
        text = unescape_caption(match.group(2))
        if text:
            texts.append(text)
    return texts


def extract_narration(source: str, fps: Optional[int] = DEFAULT_FPS) -> NarrationDocument:
    """
    Extract narration steps from a composition source.

    Sequences without both timing props, with timing that does not resolve,
    or with negative start / non-positive duration are skipped.

    Args:
        source: Composition source text
        fps: Frames per second (None means the default)

    Returns:
        NarrationDocument with steps in document order

    Raises:
        ValidationError: If fps is not a positive integer
    """
    fps = validate_fps(fps)
    constants = extract_constants(source)
    steps: List[NarrationStep] = []

    for index, block in enumerate(find_sequence_blocks(source)):
        from_match = _FROM_PATTERN.search(block.attrs)
        duration_match = _DURATION_PATTERN.search(block.attrs)
        if not from_match or not duration_match:
            logger.debug("Sequence %d: missing from/durationInFrames, skipped", index + 1)
            continue

        from_frame = resolve_expression(from_match.group(1), constants)
        duration_frames = resolve_expression(duration_match.group(1), constants)
        if from_frame is None or duration_frames is None:
            logger.debug(
                "Sequence %d: unresolved timing from={%s} durationInFrames={%s}, skipped",
                index + 1, from_match.group(1).strip(), duration_match.group(1).strip()
            )
            continue
        if from_frame < 0 or duration_frames <= 0:
            logger.debug(
                "Sequence %d: invalid timing from=%d durationInFrames=%d, skipped",
                index + 1, from_frame, duration_frames
            )
            continue

        for text in find_caption_texts(block.body):
            steps.append(make_step(from_frame, duration_frames, text, fps))

    logger.debug("Extracted %d narration step(s) at %d fps", len(steps), fps)
    return NarrationDocument(fps=fps, steps=steps)
