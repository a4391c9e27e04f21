"""Tests for the command-line entry point."""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from conftest import decode_song, minimal_smf
from midi_humanizer.cli import build_parser, default_output_path, main


def run_cli(*argv):
    """Run main() and return (exit code, stdout, stderr)."""
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        try:
            main(list(argv))
        except SystemExit as exc:
            return exc.code, out.getvalue(), err.getvalue()
    return None, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.input = Path(self.tmp.name) / "song.mid"
        self.input.write_bytes(minimal_smf())

    def test_default_output_path(self):
        self.assertEqual(default_output_path("/music/song.mid"), "/music/song_humanized.mid")
        self.assertEqual(default_output_path("take"), "take_humanized.mid")

    def test_parser_defaults_leave_config_alone(self):
        args = build_parser().parse_args(["song.mid"])
        self.assertIsNone(args.style)
        self.assertIsNone(args.seed)
        self.assertFalse(args.analyze_only)

    def test_humanize_writes_default_output(self):
        code, out, _ = run_cli(str(self.input), "--seed", "42", "--quick")
        self.assertEqual(code, 0)
        output = self.input.with_name("song_humanized.mid")
        self.assertTrue(output.exists())
        self.assertIn("Wrote", out)
        self.assertEqual(len(decode_song(output.read_bytes()).tracks), 1)

    def test_explicit_output_and_style(self):
        output = Path(self.tmp.name) / "out.mid"
        code, _, _ = run_cli(str(self.input), "-o", str(output), "-s", "jazz", "--seed", "1")
        self.assertEqual(code, 0)
        self.assertTrue(output.exists())

    def test_analyze_only_json(self):
        code, out, _ = run_cli(str(self.input), "--analyze-only", "--json")
        self.assertEqual(code, 0)
        report = json.loads(out)
        self.assertEqual(report['ticks_per_quarter_note'], 480)
        self.assertEqual(report['tracks'][0]['note_count'], 1)
        self.assertNotIn('humanization', report)
        self.assertFalse(self.input.with_name("song_humanized.mid").exists())

    def test_json_reports_settings(self):
        code, out, _ = run_cli(str(self.input), "--json", "--seed", "42", "--style", "pop")
        self.assertEqual(code, 0)
        settings = json.loads(out)['humanization']
        self.assertEqual(settings['seed'], 42)
        self.assertEqual(settings['style'], 'pop')

    def test_config_file(self):
        config = Path(self.tmp.name) / "settings.json"
        config.write_text(json.dumps({'style': 'classical', 'seed': 3}))
        code, out, _ = run_cli(str(self.input), "-c", str(config), "--json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)['humanization']['style'], 'classical')

    def test_missing_file(self):
        code, _, err = run_cli(str(Path(self.tmp.name) / "missing.mid"))
        self.assertEqual(code, 1)
        self.assertIn("File not found", err)

    def test_invalid_midi(self):
        bad = Path(self.tmp.name) / "bad.mid"
        bad.write_bytes(b"not a midi file at all")
        code, _, err = run_cli(str(bad))
        self.assertEqual(code, 1)
        self.assertIn("Invalid MIDI file", err)

    def test_invalid_config(self):
        config = Path(self.tmp.name) / "settings.json"
        config.write_text("{broken")
        code, _, err = run_cli(str(self.input), "-c", str(config))
        self.assertEqual(code, 1)
        self.assertIn("Invalid JSON", err)

    def test_negative_intensity(self):
        code, _, err = run_cli(str(self.input), "--intensity", "-1")
        self.assertEqual(code, 1)
        self.assertIn("Error", err)


if __name__ == "__main__":
    unittest.main()
