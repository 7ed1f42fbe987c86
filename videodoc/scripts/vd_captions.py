"""
Subtitle export for narrations.

Writes SRT/WebVTT files from narration steps so the same caption timing can be
used outside the renderer (players, review tools, uploads).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from vd_common import error_response, success_response
from vd_core_utils import NarrationDocument

MAX_CHARS_PER_LINE = 42


@dataclass
class CaptionEntry:
    """Single caption entry with timing and text."""
    start_s: float
    end_s: float
    text: str

    @property
    def duration_s(self) -> float:
        """Caption duration in seconds."""
        return self.end_s - self.start_s

    @staticmethod
    def to_srt_time(seconds: float) -> str:
        """Convert seconds to SRT time format (HH:MM:SS,mmm)."""
        total_ms = int(round(seconds * 1000))
        hours, rest = divmod(total_ms, 3600 * 1000)
        minutes, rest = divmod(rest, 60 * 1000)
        secs, millis = divmod(rest, 1000)
        return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"

    def to_srt_entry(self, index: int) -> str:
        """
        Convert to SRT format entry.

        Args:
            index: 1-based caption index

        Returns:
            SRT formatted string for this caption
        """
        start_time = self.to_srt_time(self.start_s)
        end_time = self.to_srt_time(self.end_s)
        return f"{index}\n{start_time} --> {end_time}\n{wrap_text(self.text)}\n"

    def to_vtt_entry(self, index: int) -> str:
        """Convert to WebVTT format entry (same as SRT with '.' millis)."""
        start_time = self.to_srt_time(self.start_s).replace(',', '.')
        end_time = self.to_srt_time(self.end_s).replace(',', '.')
        return f"{index}\n{start_time} --> {end_time}\n{wrap_text(self.text)}\n"


def wrap_text(text: str, max_chars: int = MAX_CHARS_PER_LINE) -> str:
    """Wrap text to max characters per line on word boundaries."""
    if len(text) <= max_chars:
        return text

    lines = []
    current_line: List[str] = []
    current_length = 0

    for word in text.split():
        word_length = len(word) + (1 if current_line else 0)  # +1 for space

        if current_length + word_length <= max_chars:
            current_line.append(word)
            current_length += word_length
        else:
            if current_line:
                lines.append(' '.join(current_line))
            current_line = [word]
            current_length = len(word)

    if current_line:
        lines.append(' '.join(current_line))

    return '\n'.join(lines)


def captions_from_narration(doc: NarrationDocument) -> List[CaptionEntry]:
    """One caption per narration step, timed from frames (not the rounded seconds)."""
    return [
        CaptionEntry(
            start_s=step.from_frame / doc.fps,
            end_s=(step.from_frame + step.duration_frames) / doc.fps,
            text=step.text,
        )
        for step in doc.steps
        if step.text
    ]


def generate_srt_file(captions: List[CaptionEntry], output_path: Union[str, Path]) -> dict:
    """
    Generate SRT subtitle file from caption entries.

    Returns:
        Dict with success status and file info
    """
    try:
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        srt_text = '\n'.join(c.to_srt_entry(i) for i, c in enumerate(captions, start=1))
        output.write_text(srt_text, encoding='utf-8')

        return success_response(
            caption_file=str(output),
            format="srt",
            captions_count=len(captions),
            size_bytes=output.stat().st_size
        )

    except OSError as e:
        return error_response(e, "Failed to generate SRT file")


def generate_vtt_file(captions: List[CaptionEntry], output_path: Union[str, Path]) -> dict:
    """
    Generate WebVTT subtitle file from caption entries.

    Returns:
        Dict with success status and file info
    """
    try:
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        entries = [c.to_vtt_entry(i) for i, c in enumerate(captions, start=1)]
        vtt_text = "WEBVTT\n\n" + '\n'.join(entries)
        output.write_text(vtt_text, encoding='utf-8')

        return success_response(
            caption_file=str(output),
            format="vtt",
            captions_count=len(captions),
            size_bytes=output.stat().st_size
        )

    except OSError as e:
        return error_response(e, "Failed to generate VTT file")
