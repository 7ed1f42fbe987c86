"""
Caption command handlers for vd CLI.

Commands:
- vd captions export: Write SRT/VTT from a narration JSON
"""

from pathlib import Path

from vd_captions import captions_from_narration, generate_srt_file, generate_vtt_file
from vd_common import error_response
from vd_core_utils import load_narration


def register(subparsers):
    """
    Register caption commands with argparse.

    Args:
        subparsers: argparse subparsers object
    """
    captions_parser = subparsers.add_parser('captions', help='Subtitle export')
    captions_subparsers = captions_parser.add_subparsers(dest='captions_command', help='Caption commands')

    # vd captions export
    export_parser = captions_subparsers.add_parser('export', help='Export narration steps as SRT/VTT')
    export_parser.add_argument('--narration', required=True, help='Narration JSON path')
    export_parser.add_argument('--output', '-o', required=True, help='Output caption file path')
    export_parser.add_argument('--format', choices=['srt', 'vtt'], default='srt', help='Caption format (default: srt)')
    export_parser.set_defaults(func=cmd_export)


def cmd_export(args) -> dict:
    """
    Export narration steps as a subtitle file.

    Args:
        args.narration: Path to narration JSON
        args.output: Output path for caption file
        args.format: Caption format ('srt' or 'vtt')

    Returns:
        Dict with success status and file info
    """
    try:
        doc = load_narration(Path(args.narration))
        captions = captions_from_narration(doc)

        if args.format == 'vtt':
            return generate_vtt_file(captions, args.output)
        return generate_srt_file(captions, args.output)

    except Exception as e:
        return error_response(e, "Caption export failed")
