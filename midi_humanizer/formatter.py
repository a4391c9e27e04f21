"""Output formatting for structure analysis and humanization results.

Provides multiple output format options: quick summary, per-track
detail, full report and JSON.
"""

import json
from typing import Optional

from .constants import NOTE_NAMES
from .helpers import note_name, ticks_to_seconds
from .models import SongAnalysis, TrackAnalysis
from .pipeline import HumanizeResult
from .profiles import get_profile


def _seconds(analysis: SongAnalysis, ticks: int) -> float:
    return ticks_to_seconds(ticks, analysis.ticks_per_quarter_note, analysis.bpm)


def _chord_label(chord) -> str:
    return f"{NOTE_NAMES[chord.root]} {chord.quality.value}"


class OutputFormatter:
    """Format analysis results for output.

    Every method takes the source file name for the header line and an
    optional HumanizeResult describing the transform that was run.
    """

    @staticmethod
    def format_quick(analysis: SongAnalysis, filepath: str,
                     result: Optional[HumanizeResult] = None) -> str:
        """Format quick summary output."""
        lines = [f"=== MIDI ANALYSIS: {filepath} ==="]
        note_count = sum(track.note_count for track in analysis.tracks)
        lines.append(
            f"Tracks: {len(analysis.tracks)} | Notes: {note_count} | "
            f"Phrases: {analysis.total_phrases} "
            f"(avg {analysis.average_phrase_seconds:.1f}s) | "
            f"Chords: {len(analysis.chords)}"
        )
        if result is not None:
            lines.append(OutputFormatter.format_settings(result))
        return "\n".join(lines)

    @staticmethod
    def format_settings(result: HumanizeResult) -> str:
        """One-line summary of the humanization that produced a result."""
        return (
            f"Humanized: style={get_profile(result.config.style).name} "
            f"intensity={result.config.intensity:.2f} seed={result.seed}"
        )

    @staticmethod
    def format_track(analysis: SongAnalysis, index: int) -> str:
        """Format the analysis of one track."""
        track: TrackAnalysis = analysis.tracks[index]
        lines = [f"--- Track {index} ({track.note_count} notes) ---"]
        if not track.note_count:
            lines.append("  No notes.")
            return "\n".join(lines)

        if track.melody is not None:
            contour = "".join(
                {'up': '/', 'down': '\\', 'same': '-'}[step.value]
                for step in track.melody.contour[:32]
            )
            lines.append(
                f"  Melody: range {track.melody.range} semitones, "
                f"avg {note_name(round(track.melody.average_pitch))}, contour {contour}"
            )
        if track.rhythm is not None:
            flags = [name for name, on in (("swing", track.rhythm.swing),
                                           ("syncopation", track.rhythm.syncopation)) if on]
            lines.append(
                f"  Rhythm: avg duration {track.rhythm.average_duration:.0f} ticks"
                + (f" ({', '.join(flags)})" if flags else "")
            )
        if track.dynamics is not None:
            lines.append(
                f"  Dynamics: avg velocity {track.dynamics.average_velocity:.0f}, "
                f"range {track.dynamics.dynamic_range}, {track.dynamics.trend.value}"
            )

        lines.append(f"  Phrases ({len(track.phrases)}):")
        peaks = {peak.phrase_index: peak for peak in track.dynamics.peaks} if track.dynamics else {}
        for idx, phrase in enumerate(track.phrases):
            line = (f"    {idx + 1:2d}. {_seconds(analysis, phrase.start):6.2f}s - "
                    f"{_seconds(analysis, phrase.end):6.2f}s")
            peak = peaks.get(idx)
            if peak is not None:
                line += f"  peak v{peak.velocity} ({peak.placement})"
            lines.append(line)

        if track.chords:
            labels = [_chord_label(chord) for chord in track.chords[:12]]
            more = f" ... ({len(track.chords) - 12} more)" if len(track.chords) > 12 else ""
            lines.append(f"  Chords: {', '.join(labels)}{more}")
        return "\n".join(lines)

    @staticmethod
    def format_full(analysis: SongAnalysis, filepath: str,
                    result: Optional[HumanizeResult] = None) -> str:
        """Format full analysis report."""
        lines = []
        lines.append("=" * 80)
        lines.append("MIDI STRUCTURE ANALYSIS REPORT")
        lines.append(f"File: {filepath}")
        lines.append("=" * 80)
        lines.append("")
        lines.append(
            f"Resolution: {analysis.ticks_per_quarter_note} ticks/quarter | "
            f"Assumed tempo: {analysis.bpm:.0f} BPM"
        )
        lines.append(
            f"Phrases: {analysis.total_phrases} "
            f"(avg {analysis.average_phrase_seconds:.1f}s) | Chords: {len(analysis.chords)}"
        )

        if result is not None:
            profile = get_profile(result.config.style)
            lines.append("")
            lines.append(OutputFormatter.format_settings(result))
            lines.append(f"  {profile.description}")

        for index in range(len(analysis.tracks)):
            lines.append("")
            lines.append(OutputFormatter.format_track(analysis, index))

        lines.append("")
        lines.append("=" * 80)
        return "\n".join(lines)

    @staticmethod
    def format_json(analysis: SongAnalysis, filepath: str,
                    result: Optional[HumanizeResult] = None) -> str:
        """Format as JSON."""
        output = {
            'file': filepath,
            'ticks_per_quarter_note': analysis.ticks_per_quarter_note,
            'total_phrases': analysis.total_phrases,
            'average_phrase_seconds': round(analysis.average_phrase_seconds, 3),
            'tracks': [
                {
                    'note_count': track.note_count,
                    'phrases': [
                        {'start': phrase.start, 'end': phrase.end,
                         'events': len(phrase.events)}
                        for phrase in track.phrases
                    ],
                    'chords': [
                        {
                            'time': chord.time,
                            'duration': chord.duration,
                            'pitch_classes': list(chord.pitch_classes),
                            'quality': chord.quality.value,
                            'root': chord.root,
                        }
                        for chord in track.chords
                    ],
                    'melody': None if track.melody is None else {
                        'range': track.melody.range,
                        'average_pitch': round(track.melody.average_pitch, 2),
                        'contour': [step.value for step in track.melody.contour],
                    },
                    'rhythm': None if track.rhythm is None else {
                        'average_duration': round(track.rhythm.average_duration, 2),
                        'swing': track.rhythm.swing,
                        'syncopation': track.rhythm.syncopation,
                    },
                    'dynamics': None if track.dynamics is None else {
                        'average_velocity': round(track.dynamics.average_velocity, 2),
                        'dynamic_range': track.dynamics.dynamic_range,
                        'trend': track.dynamics.trend.value,
                        'peaks': [
                            {
                                'phrase_index': peak.phrase_index,
                                'time': peak.time,
                                'velocity': peak.velocity,
                                'position': round(peak.position, 3),
                                'placement': peak.placement,
                            }
                            for peak in track.dynamics.peaks
                        ],
                    },
                }
                for track in analysis.tracks
            ],
        }
        if result is not None:
            output['humanization'] = dict(result.config.to_dict(), seed=result.seed)
        return json.dumps(output, indent=2)
