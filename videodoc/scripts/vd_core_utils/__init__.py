"""
Videodoc Core Utilities

Composition parsing and narration file handling.

This is the core utilities package. All caption extraction logic lives
here - CLI commands use these functions and only shape their output.

PIPELINE:
- `extract_narration()` turns a composition source into narration steps
- `write_narration()` / `load_narration()` persist the (hand-editable) JSON
- `validate_narration()` checks a narration before voiceover generation
"""

from .markup_scanner import (
    find_sequence_blocks,
    find_tag_end,
    SequenceBlock,
)

from .constants import (
    extract_constants,
    resolve_expression,
    evaluate_arithmetic,
    ExpressionError,
)

from .caption_extractor import (
    # Main extraction function (SINGLE SOURCE OF TRUTH)
    extract_narration,
    find_caption_texts,
    validate_fps,
    NarrationDocument,
    NarrationStep,
)

from .narration_file import (
    narration_path_for,
    write_narration,
    load_narration,
    narration_from_dict,
    validate_narration,
    format_preview_table,
)

__all__ = [
    # Scanner
    'find_sequence_blocks',
    'find_tag_end',
    'SequenceBlock',

    # Constant resolution
    'extract_constants',
    'resolve_expression',
    'evaluate_arithmetic',
    'ExpressionError',

    # Caption extraction (PREFERRED entry point)
    'extract_narration',
    'find_caption_texts',
    'validate_fps',
    'NarrationDocument',
    'NarrationStep',

    # Narration files
    'narration_path_for',
    'write_narration',
    'load_narration',
    'narration_from_dict',
    'validate_narration',
    'format_preview_table',
]
