"""
vd narration commands

Caption extraction, validation and the voiceover pipeline.
"""

import argparse
import logging
import sys
from pathlib import Path

from vd_common import (
    NarrationError, error_response, success_response, get_setting, preview_text
)
from vd_core_utils import (
    extract_narration, write_narration, load_narration, validate_narration,
    narration_path_for, format_preview_table,
)
from vd_voiceover import build_voiceover_plan, write_voiceover_plan, sync_manifest_path_for

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """argparse type for --fps."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid --fps value: {value}. Must be a positive integer.")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"Invalid --fps value: {value}. Must be a positive integer.")
    return number


def non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid value: {value}. Must be a number >= 0.")
    if number < 0:
        raise argparse.ArgumentTypeError(f"Invalid value: {value}. Must be a number >= 0.")
    return number


def register(subparsers):
    """Register narration commands."""
    narration_parser = subparsers.add_parser('narration', help='Narration extraction and voiceover planning')
    narration_sub = narration_parser.add_subparsers(dest='narration_command')

    # vd narration extract
    extract_parser = narration_sub.add_parser('extract', help='Extract <Caption> text from a composition')
    extract_parser.add_argument('composition', help='Composition file (.jsx/.tsx)')
    extract_parser.add_argument('--fps', type=positive_int, help='Frame rate (default: 30 or $VD_FPS)')
    extract_parser.add_argument('--output', '-o', help='Narration JSON path (default: <name>.narration.json)')
    extract_parser.set_defaults(func=cmd_extract)

    # vd narration validate
    validate_parser = narration_sub.add_parser('validate', help='Validate a narration JSON file')
    validate_parser.add_argument('--narration', required=True, help='Narration JSON path')
    validate_parser.set_defaults(func=cmd_validate)

    # vd narration pipeline
    pipeline_parser = narration_sub.add_parser('pipeline', help='Extract captions and write the voiceover plan')
    pipeline_parser.add_argument('composition', help='Composition file (.jsx/.tsx)')
    pipeline_parser.add_argument('--fps', type=positive_int, help='Frame rate (default: 30 or $VD_FPS)')
    pipeline_parser.add_argument('--output-dir', help='Audio output directory (default: ./assets/audio or $VD_AUDIO_DIR)')
    pipeline_parser.add_argument('--voice', help='Voice name for the speech stage')
    pipeline_parser.add_argument('--pause', type=non_negative_float, help='Seconds of silence between steps')
    pipeline_parser.add_argument('--skip-extract', action='store_true',
                                 help='Use the existing .narration.json instead of re-extracting')
    pipeline_parser.add_argument('--dry-run', action='store_true', help='Extract captions only')
    pipeline_parser.set_defaults(func=cmd_pipeline)


def _print_preview(doc):
    print(format_preview_table(doc), file=sys.stderr)
    print("", file=sys.stderr)


def _extract(composition_path: Path, fps: int):
    if not composition_path.exists():
        raise FileNotFoundError(f"Composition file not found: {composition_path}")

    source = composition_path.read_text(encoding="utf-8")
    return extract_narration(source, fps)


def cmd_extract(args) -> dict:
    """Handle vd narration extract command."""
    try:
        composition_path = Path(args.composition)
        fps = args.fps if args.fps is not None else get_setting("fps")
        output_path = Path(args.output) if args.output else narration_path_for(composition_path)

        doc = _extract(composition_path, fps)
        write_narration(doc, output_path)

        print(f"✓ Extracted {len(doc.steps)} caption(s) → {output_path}", file=sys.stderr)
        for i, step in enumerate(doc.steps, start=1):
            print(f"  {i}. [{step.start_seconds}s] \"{preview_text(step.text, 60, '...')}\"", file=sys.stderr)
        if not doc.steps:
            logger.warning("No captions found in %s", composition_path)

        return success_response(
            narration_path=str(output_path),
            step_count=len(doc.steps),
            **doc.to_dict()
        )
    except Exception as e:
        return error_response(e, "Caption extraction failed")


def cmd_validate(args) -> dict:
    """Handle vd narration validate command."""
    try:
        doc = load_narration(args.narration)
        result = validate_narration(doc)
        result["narration_path"] = args.narration
        result["success"] = result["valid"]
        if not result["valid"]:
            result["error"] = "; ".join(result["issues"])
            result["code"] = "VALIDATION"
        return result
    except Exception as e:
        return error_response(e, "Narration validation failed")


def cmd_pipeline(args) -> dict:
    """
    Handle vd narration pipeline command.

    1. Extract captions -> <name>.narration.json (unless --skip-extract)
    2. Load and validate the narration
    3. Write the voiceover plan -> <output-dir>/<name>-voiceover.sync.json

    Zero captions is an error here: the composition was not annotated.
    """
    try:
        composition_path = Path(args.composition)
        narration_path = narration_path_for(composition_path)
        fps = args.fps if args.fps is not None else get_setting("fps")

        if not args.skip_extract:
            print(f"\n📖  Extracting captions from {composition_path.name}...", file=sys.stderr)
            doc = _extract(composition_path, fps)
            if not doc.steps:
                raise NarrationError("No <Caption> components found in this composition.")
            write_narration(doc, narration_path)
            print(f"✓ Extracted {len(doc.steps)} caption(s) → {narration_path}\n", file=sys.stderr)
            _print_preview(doc)

        if args.dry_run:
            message = ("Dry run - no narration JSON was written (--skip-extract used)."
                       if args.skip_extract else "Dry run - narration JSON written, voiceover plan skipped.")
            print(f"ℹ️  {message}", file=sys.stderr)
            return success_response(
                dry_run=True,
                message=message,
                narration_path=None if args.skip_extract else str(narration_path),
            )

        if not narration_path.exists():
            raise FileNotFoundError(
                f"Narration file not found: {narration_path}. Run without --skip-extract to generate it."
            )

        doc = load_narration(narration_path)
        validation = validate_narration(doc)
        if not validation["valid"]:
            raise NarrationError("; ".join(validation["issues"]))
        for warning in validation["warnings"]:
            logger.warning(warning)

        output_dir = Path(args.output_dir or get_setting("audio_dir"))
        pause_s = args.pause if args.pause is not None else get_setting("pause_s")
        voice = args.voice or get_setting("voice")
        composition_name = narration_path.name[:-len(".narration.json")]
        audio_path = output_dir / f"{composition_name}-voiceover.mp3"

        plan = build_voiceover_plan(doc, pause_s=pause_s, voice=voice, audio_file=audio_path.name)
        manifest_path = write_voiceover_plan(plan, sync_manifest_path_for(audio_path))
        print(f"✅  Voiceover plan ready: {manifest_path}", file=sys.stderr)

        return success_response(
            narration_path=str(narration_path),
            manifest_path=str(manifest_path),
            audio_file=audio_path.name,
            step_count=len(doc.steps),
            lead_silence_s=plan["leadSilenceS"],
            warnings=validation["warnings"],
        )
    except Exception as e:
        return error_response(e, "Voiceover pipeline failed")
