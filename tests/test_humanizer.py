"""Tests for the humanization transform."""

import unittest

from conftest import (
    HumanizationConfig, Style, ChordQuality, NoteOn, NoteOff, ControlChange,
    SetTempo, decode_song, encode_song, extract_notes, end_of_track,
    make_track, make_notes_track, make_song, note_pair, scale_melody,
)
from midi_humanizer.analyzer import StructureAnalyzer
from midi_humanizer.humanizer import Humanizer, enforce_minimum_spacing
from midi_humanizer.models import (
    ChordSegment, PhraseSegment, RhythmSummary, TrackAnalysis,
    is_end_of_track, is_note_on, is_note_off,
)
from midi_humanizer.rng import MultiplyWithCarry


def humanizer(style=Style.DEFAULT, intensity=1.0, seed=42, ticks_per_quarter=480, **kwargs):
    config = HumanizationConfig(style=style, intensity=intensity, seed=seed, **kwargs)
    return Humanizer(config, ticks_per_quarter)


def chord_track():
    """Block chords on every beat plus a melody line on top."""
    notes = []
    for beat in range(8):
        start = beat * 480
        notes.extend([(start, 48, 480), (start, 52, 480), (start, 55, 480)])
        notes.append((start, 72 + beat % 5, 240))
    return make_notes_track(notes)


def humanize(track, human):
    return human.humanize_track(track, StructureAnalyzer(track, human.ticks_per_quarter,
                                                         style=human.style).analyze())


class TestMinimumSpacing(unittest.TestCase):
    """Test the forward spacing pass."""

    def test_cascade(self):
        events = [NoteOn(time=t, channel=0, note=60, velocity=80) for t in (0, 0, 0, 10)]
        self.assertEqual([e.time for e in enforce_minimum_spacing(events)], [0, 3, 6, 10])

    def test_push_reaches_later_events(self):
        events = [NoteOn(time=t, channel=0, note=60, velocity=80) for t in (0, 1, 2, 3)]
        self.assertEqual([e.time for e in enforce_minimum_spacing(events)], [0, 3, 6, 9])

    def test_other_fields_kept(self):
        events = [NoteOn(time=0, channel=2, note=60, velocity=80),
                  NoteOff(time=1, channel=2, note=60)]
        spaced = enforce_minimum_spacing(events)
        self.assertEqual(spaced[1], NoteOff(time=3, channel=2, note=60))

    def test_empty(self):
        self.assertEqual(enforce_minimum_spacing([]), [])


class TestHumanizeTrack(unittest.TestCase):
    """Test whole-track invariants."""

    def test_zero_intensity_keeps_notes(self):
        track = make_notes_track(scale_melody(16))
        for style in Style:
            result = humanize(track, humanizer(style=style, intensity=0))
            self.assertEqual(extract_notes(result), extract_notes(track))

    def test_velocity_and_time_bounds(self):
        track = make_notes_track([(i * 120, 40 + i, 100) for i in range(32)], velocity=127)
        quiet = make_notes_track([(i * 120, 40 + i, 100) for i in range(32)], velocity=1)
        for source in (track, quiet):
            result = humanize(source, humanizer(style=Style.JAZZ, intensity=3, seed=7))
            for event in result:
                self.assertGreaterEqual(event.time, 0)
                if is_note_on(event):
                    self.assertGreaterEqual(event.velocity, 1)
                    self.assertLessEqual(event.velocity, 127)

    def test_sorted_with_minimum_spacing(self):
        result = humanize(chord_track(), humanizer(style=Style.POP, seed=11))
        times = [event.time for event in result]
        for previous, current in zip(times, times[1:]):
            self.assertGreaterEqual(current - previous, 3)

    def test_same_seed_same_output(self):
        track = chord_track()
        first = humanize(track, humanizer(style=Style.JAZZ, seed=42))
        second = humanize(track, humanizer(style=Style.JAZZ, seed=42))
        self.assertEqual(first, second)

    def test_different_seed_different_output(self):
        track = chord_track()
        first = humanize(track, humanizer(seed=1))
        second = humanize(track, humanizer(seed=2))
        self.assertNotEqual(first, second)

    def test_input_not_modified(self):
        track = chord_track()
        snapshot = tuple(track.events)
        humanize(track, humanizer(style=Style.CLASSICAL))
        self.assertEqual(track.events, snapshot)

    def test_event_count_preserved(self):
        track = chord_track()
        result = humanize(track, humanizer())
        self.assertEqual(len(result), len(track))
        self.assertEqual(sum(1 for e in result if is_note_on(e)),
                         sum(1 for e in track if is_note_on(e)))

    def test_end_of_track_stays_last(self):
        track = make_track(note_pair(0, 60) + note_pair(470, 64, 10))
        for seed in range(10):
            result = humanize(track, humanizer(style=Style.JAZZ, intensity=2, seed=seed))
            self.assertTrue(is_end_of_track(result[-1]))
            self.assertEqual(result[-1].time, max(event.time for event in result))

    def test_note_off_never_before_note_on(self):
        track = make_track(note_pair(100, 60, duration=1))
        for seed in range(20):
            result = humanize(track, humanizer(style=Style.JAZZ, intensity=3, seed=seed))
            note_on = next(event for event in result if is_note_on(event))
            note_off = next(event for event in result if is_note_off(event))
            self.assertGreaterEqual(note_off.time, note_on.time)

    def test_repeated_notes_keep_their_pairing(self):
        track = make_notes_track([(i * 240, 60, 240) for i in range(64)])
        for seed in (1, 2, 3, 42):
            result = humanize(track, humanizer(style=Style.JAZZ, intensity=2, seed=seed))
            song = decode_song(encode_song(make_song(result)))
            notes = extract_notes(song.tracks[0])
            self.assertEqual(len(notes), 64, seed)
            for previous, following in zip(notes, notes[1:]):
                self.assertLessEqual(previous.end_time, following.start_time)

    def test_release_held_before_next_attack(self):
        human = humanizer()
        events = [NoteOn(time=0, channel=0, note=60, velocity=80),
                  NoteOff(time=300, channel=0, note=60)]
        human._hold_release(events, (1, 0), 250)
        self.assertEqual(events[1].time, 250)
        human._hold_release(events, (1, 100), 50)
        self.assertEqual(events[1].time, 100)
        human._hold_release(events, None, 0)
        self.assertEqual(events[1].time, 100)

    def test_non_note_events_keep_position_at_zero(self):
        track = make_track([SetTempo(time=0, tempo=500000)] + note_pair(480, 60))
        result = humanize(track, humanizer(intensity=2))
        self.assertEqual(result[0], SetTempo(time=0, tempo=500000))


class TestRandomDraws(unittest.TestCase):
    """The draw order is part of the reproducibility contract."""

    def test_draws_per_event(self):
        track = make_track([
            SetTempo(time=0, tempo=500000),
            NoteOn(time=0, channel=0, note=60, velocity=80),
            ControlChange(time=100, channel=0, controller=64, value=127),
            NoteOff(time=480, channel=0, note=60),
        ])
        human = humanizer()
        human.humanize_track(track, TrackAnalysis())
        # NoteOn 2, control change 1, NoteOff 1, tempo at 0 and End-of-Track none
        self.assertEqual(human.rng.calls, 4)

    def test_accent_roll_for_jazz(self):
        track = make_track(note_pair(0, 60))
        human = humanizer(style=Style.JAZZ)
        human.humanize_track(track, TrackAnalysis())
        self.assertEqual(human.rng.calls, 4)

    def test_chord_tone_draws(self):
        major = TrackAnalysis(chords=[ChordSegment(0, 960, (0, 4, 7), ChordQuality.MAJOR, 0)])
        diminished = TrackAnalysis(chords=[
            ChordSegment(0, 960, (0, 3, 6), ChordQuality.DIMINISHED, 0)])
        cases = [
            (major, 60, 1),        # root: no spread draw
            (major, 64, 2),        # chord member
            (major, 62, 1),        # passing tone
            (diminished, 63, 3),   # member and diminished spread
            (diminished, 60, 2),
        ]
        for analysis, pitch, expected in cases:
            human = humanizer()
            human.humanize_velocity(NoteOn(time=0, channel=0, note=pitch, velocity=80), analysis)
            self.assertEqual(human.rng.calls, expected, (analysis.chords[0].quality, pitch))

    def test_shared_generator(self):
        rng = MultiplyWithCarry(42)
        human = Humanizer(HumanizationConfig(seed=42), 480, rng=rng)
        human.humanize_track(make_track(note_pair(0, 60)), TrackAnalysis())
        human.humanize_track(make_track(note_pair(0, 60)), TrackAnalysis())
        self.assertEqual(rng.calls, 6)


class TestTiming(unittest.TestCase):
    """Test the timing terms."""

    def test_adjustment_is_bounded(self):
        human = humanizer(style=Style.JAZZ, intensity=5, ticks_per_quarter=96)
        self.assertAlmostEqual(human.max_adjustment, 7.68)
        for _ in range(50):
            shifted = human.humanize_timing(960, TrackAnalysis(), drift=50)
            self.assertLessEqual(abs(shifted - 960), 7.68 + 1e-9)

    def test_never_negative(self):
        human = humanizer(intensity=5)
        for _ in range(50):
            self.assertGreaterEqual(human.humanize_timing(0, TrackAnalysis(), drift=-50), 0.0)

    def test_jazz_groove(self):
        analysis = TrackAnalysis(rhythm=RhythmSummary(480, swing=True, syncopation=True))
        human = humanizer(style=Style.JAZZ)
        self.assertEqual(human.groove_adjustment(240, analysis), 8)
        self.assertEqual(human.groove_adjustment(480, analysis), 0.0)
        self.assertEqual(human.groove_adjustment(240, TrackAnalysis()), 0.0)

    def test_pop_groove(self):
        analysis = TrackAnalysis(rhythm=RhythmSummary(480, syncopation=True))
        human = humanizer(style=Style.POP, intensity=2)
        self.assertEqual(human.groove_adjustment(0, analysis), -6)
        self.assertEqual(human.groove_adjustment(480, analysis), 0.0)
        self.assertEqual(human.groove_adjustment(960, analysis), -6)

    def test_zero_resolution_does_not_raise(self):
        analysis = TrackAnalysis(rhythm=RhythmSummary(480, syncopation=True))
        human = humanizer(style=Style.POP, ticks_per_quarter=0)
        self.assertEqual(human.groove_adjustment(0, analysis), -3)
        track = make_notes_track(scale_melody(4))
        self.assertEqual(len(humanize(track, human)), len(track))

    def test_phrase_edges_stretch(self):
        analysis = TrackAnalysis(phrases=[PhraseSegment(0, 1000)])
        human = humanizer()
        self.assertAlmostEqual(human.phrase_timing_adjustment(0, analysis), 2.0)
        self.assertAlmostEqual(human.phrase_timing_adjustment(500, analysis), 0.0)
        self.assertAlmostEqual(human.phrase_timing_adjustment(1000, analysis), 3.0)
        self.assertEqual(human.phrase_timing_adjustment(5000, analysis), 0.0)


class TestVelocity(unittest.TestCase):
    """Test the velocity terms."""

    def test_minor_root(self):
        analysis = TrackAnalysis(chords=[ChordSegment(0, 960, (2, 5, 9), ChordQuality.MINOR, 2)])
        human = humanizer()
        event = NoteOn(time=0, channel=0, note=62, velocity=80)
        self.assertAlmostEqual(human.chord_adjustment(event, analysis), 2.0)

    def test_short_phrase_has_no_arc(self):
        analysis = TrackAnalysis(phrases=[PhraseSegment(0, 960)])
        self.assertEqual(humanizer().phrase_velocity_adjustment(480, analysis), 0.0)

    def test_phrase_arc(self):
        # 3840 ticks is 4 s at 120 BPM: two breaths
        analysis = TrackAnalysis(phrases=[PhraseSegment(0, 3840)])
        self.assertAlmostEqual(humanizer().phrase_velocity_adjustment(960, analysis), 12.0)
        self.assertAlmostEqual(
            humanizer(style=Style.CLASSICAL).phrase_velocity_adjustment(960, analysis), 16.8)

    def test_form_arc(self):
        analysis = TrackAnalysis(phrases=[PhraseSegment(i * 1000, (i + 1) * 1000) for i in range(5)])
        human = humanizer()
        self.assertEqual(human.form_adjustment(100, analysis), -5)
        self.assertEqual(human.form_adjustment(1100, analysis), 0.0)
        self.assertEqual(human.form_adjustment(2100, analysis), 8)
        self.assertEqual(human.form_adjustment(4100, analysis), -5)

    def test_form_needs_three_phrases(self):
        analysis = TrackAnalysis(phrases=[PhraseSegment(0, 1000), PhraseSegment(1000, 2000)])
        self.assertEqual(humanizer().form_adjustment(100, analysis), 0.0)

    def test_zero_scales_remove_variation(self):
        human = humanizer(velocity_variation_scale=0, dynamic_range_scale=0)
        event = NoteOn(time=0, channel=0, note=60, velocity=64)
        self.assertEqual(human.humanize_velocity(event, TrackAnalysis()), 64)

    def test_clamped(self):
        human = humanizer(intensity=10)
        high = NoteOn(time=0, channel=0, note=60, velocity=127)
        low = NoteOn(time=0, channel=0, note=60, velocity=1)
        for _ in range(50):
            self.assertLessEqual(human.humanize_velocity(high, TrackAnalysis()), 127)
            self.assertGreaterEqual(human.humanize_velocity(low, TrackAnalysis()), 1)

    def test_end_of_track_never_draws(self):
        human = humanizer()
        human.humanize_track(make_track([end_of_track(0)], end=False), TrackAnalysis())
        self.assertEqual(human.rng.calls, 0)


if __name__ == "__main__":
    unittest.main()
