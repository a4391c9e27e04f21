"""CLI entry point for the MIDI humanizer.

Supports two modes:
- Humanize (default): analyze, humanize and write a new MIDI file
- Analyze only (--analyze-only): print the structure report
"""

import sys
import json
import logging
import argparse
from pathlib import Path

from .analyzer import analyze_song
from .config import HumanizationConfig, load_config_file
from .constants import Style, PhraseDetectionMode
from .errors import MidiError
from .formatter import OutputFormatter
from .loader import load_midi, save_midi
from .pipeline import humanize


def default_output_path(input_file: str) -> str:
    """``song.mid`` -> ``song_humanized.mid`` next to the input."""
    path = Path(input_file)
    return str(path.with_name(f"{path.stem}_humanized{path.suffix or '.mid'}"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="midi-humanizer",
        description="Style-aware, reproducible MIDI humanization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s song.mid                          # Humanize to song_humanized.mid
  %(prog)s song.mid --style jazz --seed 42   # Reproducible jazz feel
  %(prog)s song.mid -o out.mid -i 1.5        # Stronger humanization
  %(prog)s song.mid --analyze-only --json    # Structure report only
        """,
    )

    parser.add_argument("input_file", help="Standard MIDI File to process")
    parser.add_argument(
        "-o", "--output",
        help="Output file (default: <input>_humanized.mid)",
    )

    # Humanization settings
    human_group = parser.add_argument_group("Humanization")
    human_group.add_argument(
        "--style", "-s", choices=[style.value for style in Style],
        help="Performance style (default: default)",
    )
    human_group.add_argument(
        "--intensity", "-i", type=float,
        help="Overall strength, 0 leaves notes untouched (default: 1.0)",
    )
    human_group.add_argument(
        "--seed", type=int,
        help="Random seed (default: derived from the clock)",
    )
    human_group.add_argument(
        "--phrase-mode", choices=[mode.value for mode in PhraseDetectionMode],
        dest="phrase_detection_mode",
        help="Phrase detector (default: auto)",
    )
    human_group.add_argument(
        "--velocity-scale", type=float, dest="velocity_variation_scale",
        help="Multiplier on velocity variation (default: 1.0)",
    )
    human_group.add_argument(
        "--timing-scale", type=float, dest="timing_variation_scale",
        help="Multiplier on timing variation (default: 1.0)",
    )
    human_group.add_argument(
        "--dynamic-scale", type=float, dest="dynamic_range_scale",
        help="Multiplier on phrase dynamics (default: 1.0)",
    )
    human_group.add_argument(
        "--config", "-c",
        help="JSON file with humanization settings (flags override it)",
    )

    # Output options
    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--analyze-only", "-a", action="store_true",
        help="Only analyze, do not write a file",
    )
    output_group.add_argument(
        "--quick", "-q", action="store_true",
        help="Quick summary only",
    )
    output_group.add_argument(
        "--json", action="store_true",
        help="JSON output",
    )
    output_group.add_argument(
        "-v", "--verbose", action="store_true",
        help="Verbose logging",
    )
    return parser


def main(argv=None):
    """CLI entry point for the MIDI humanizer.

    Exits with 0 on success and 1 on an unreadable or malformed input
    file or an invalid configuration.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(name)s - %(levelname)s - %(message)s',
    )

    try:
        config = load_config_file(args.config) if args.config else HumanizationConfig()
        config = config.with_overrides(
            style=args.style,
            intensity=args.intensity,
            seed=args.seed,
            phrase_detection_mode=args.phrase_detection_mode,
            velocity_variation_scale=args.velocity_variation_scale,
            timing_variation_scale=args.timing_variation_scale,
            dynamic_range_scale=args.dynamic_range_scale,
        )
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as exc:
        print(f"Error: Invalid JSON: {exc}", file=sys.stderr)
        sys.exit(1)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        song = load_midi(args.input_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.input_file}", file=sys.stderr)
        sys.exit(1)
    except MidiError as exc:
        print(f"Error: Invalid MIDI file: {exc}", file=sys.stderr)
        sys.exit(1)

    result = None
    if args.analyze_only:
        analysis = analyze_song(song, config)
    else:
        result = humanize(song, config)
        analysis = result.analysis
        output_file = args.output or default_output_path(args.input_file)
        size = save_midi(result.song, output_file)
        if not args.json:
            print(f"Wrote {output_file} ({size} bytes)")

    # Format output
    if args.json:
        print(OutputFormatter.format_json(analysis, args.input_file, result))
    elif args.quick:
        print(OutputFormatter.format_quick(analysis, args.input_file, result))
    else:
        print(OutputFormatter.format_full(analysis, args.input_file, result))

    sys.exit(0)
