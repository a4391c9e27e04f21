"""Humanizer - seeded, style-aware timing and velocity transform.

Every random decision is drawn from one MultiplyWithCarry instance in a
fixed order per event, so the same song, configuration and seed always
give the same output. Per NoteOn the draws are: timing jitter, velocity
jitter, chord-tone spread (non-root chord members only), diminished
spread (diminished chords only) and the accent roll (styles with
accents). A NoteOff draws once for timing; other events draw once when
their time is above zero. End-of-Track events never draw.
"""

import logging
import math
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .config import AnalysisSettings, HumanizationConfig
from .constants import (
    DEFAULT_TICKS_PER_QUARTER, MAX_TIMING_ADJUSTMENT, MAX_TIMING_BEAT_FRACTION,
    DRIFT_LIMIT, DRIFT_FEEDBACK, DRIFT_WEIGHT, SWING_GRID_TICKS,
    MIN_EVENT_SPACING, PHRASE_BREATH_SECONDS, MIN_VELOCITY, MAX_VELOCITY,
    ChordQuality, Style,
)
from .helpers import clamp, round_half_up, ticks_to_seconds
from .models import (
    MidiEvent, Track, TrackAnalysis,
    is_note_on, is_note_off, is_end_of_track,
)
from .profiles import get_profile
from .rng import MultiplyWithCarry

logger = logging.getLogger(__name__)


def enforce_minimum_spacing(events: List[MidiEvent],
                            spacing: int = MIN_EVENT_SPACING) -> List[MidiEvent]:
    """Push events forward so consecutive times differ by at least ``spacing``.

    Single forward pass over time-sorted events; each push is seen by the
    next comparison, so crowded runs cascade.
    """
    result: List[MidiEvent] = []
    for event in events:
        if result and event.time - result[-1].time < spacing:
            event = replace(event, time=result[-1].time + spacing)
        result.append(event)
    return result


class Humanizer:
    """Applies the humanization transform track by track.

    Attributes:
        config: Run configuration (style, intensity, scales).
        ticks_per_quarter: Resolution of the song being transformed.
        rng: Random source shared by every track of the run.
        settings: Analysis settings; supplies the assumed tempo.
    """

    def __init__(
        self,
        config: HumanizationConfig,
        ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER,
        rng: Optional[MultiplyWithCarry] = None,
        settings: Optional[AnalysisSettings] = None,
    ):
        self.config = config
        self.ticks_per_quarter = ticks_per_quarter
        self.rng = rng or MultiplyWithCarry(config.seed)
        self.settings = settings or AnalysisSettings()
        self.profile = get_profile(config.style)
        self.max_adjustment = min(MAX_TIMING_ADJUSTMENT,
                                  ticks_per_quarter * MAX_TIMING_BEAT_FRACTION)

    @property
    def style(self) -> Style:
        return self.config.style

    @property
    def intensity(self) -> float:
        return self.config.intensity

    def humanize_track(self, track: Track,
                       analysis: Optional[TrackAnalysis] = None) -> Track:
        """Return a humanized copy of a track.

        A NoteOff stays between its own NoteOn and the next NoteOn of the
        same pitch and channel, so repeated notes keep their pairing.
        """
        analysis = analysis or TrackAnalysis()
        drift = 0.0
        # (pitch, channel) -> humanized time of the sounding NoteOn
        sounding: Dict[Tuple[int, int], int] = {}
        # (pitch, channel) -> (index in humanized, NoteOn time) of the last NoteOff
        released: Dict[Tuple[int, int], Tuple[int, int]] = {}
        humanized: List[MidiEvent] = []
        end_events: List[MidiEvent] = []

        for event in track:
            if is_end_of_track(event):
                end_events.append(event)
            elif is_note_on(event):
                shifted = self.humanize_timing(event.time, analysis, drift)
                velocity = self.humanize_velocity(event, analysis)
                new_time = round_half_up(shifted)
                key = (event.note, event.channel)
                self._hold_release(humanized, released.pop(key, None), new_time)
                sounding[key] = new_time
                humanized.append(replace(event, time=new_time, velocity=velocity))

                drift = clamp(drift + (shifted - event.time) * DRIFT_FEEDBACK,
                              -DRIFT_LIMIT, DRIFT_LIMIT)
            elif is_note_off(event):
                new_time = round_half_up(self.humanize_timing(event.time, analysis, drift))
                key = (event.note, event.channel)
                note_on_time = sounding.pop(key, None)
                if note_on_time is not None:
                    new_time = max(new_time, note_on_time)
                    released[key] = (len(humanized), note_on_time)
                humanized.append(replace(event, time=new_time))
            elif event.time > 0:
                jitter = (self.profile.timing_variation * self.intensity
                          * self.config.timing_variation_scale
                          * (self.rng() - 0.5) * 0.5)
                humanized.append(replace(event, time=max(0, event.time + round_half_up(jitter))))
            else:
                humanized.append(event)

        humanized.sort(key=lambda e: e.time)
        last_time = humanized[-1].time if humanized else 0
        for event in end_events:
            humanized.append(replace(event, time=max(event.time, last_time)))

        result = enforce_minimum_spacing(humanized)
        logger.debug("Humanized track: %d events, %d draws so far", len(result), self.rng.calls)
        return Track(tuple(result))

    @staticmethod
    def _hold_release(humanized: List[MidiEvent], released: Optional[Tuple[int, int]],
                      note_on_time: int) -> None:
        """Pull a NoteOff back to the next NoteOn of its pitch, never before its own NoteOn."""
        if released is None:
            return
        index, floor = released
        note_off = humanized[index]
        if note_off.time > note_on_time:
            humanized[index] = replace(note_off, time=max(floor, note_on_time))

    # -----------------------------------------------------------------
    # Timing
    # -----------------------------------------------------------------

    def humanize_timing(self, time: int, analysis: TrackAnalysis,
                        drift: float = 0.0) -> float:
        """Humanized, unrounded time of a note event (never negative)."""
        intensity = self.intensity
        adjustment = (self.profile.timing_variation * intensity
                      * self.config.timing_variation_scale
                      * (self.rng() - 0.5) * 2)
        adjustment += drift * intensity * DRIFT_WEIGHT
        adjustment += self.groove_adjustment(time, analysis)
        adjustment += self.phrase_timing_adjustment(time, analysis)

        if self.style is Style.JAZZ and analysis.rhythm is not None and analysis.rhythm.swing:
            if (time // SWING_GRID_TICKS) % 2 == 1:
                adjustment += intensity * 4

        adjustment = clamp(adjustment, -self.max_adjustment, self.max_adjustment)
        return max(0.0, time + adjustment)

    def groove_adjustment(self, time: int, analysis: TrackAnalysis) -> float:
        """Jazz lays back odd eighths; pop pushes beats one and three."""
        if analysis.rhythm is None or not analysis.rhythm.has_groove:
            return 0.0

        tpq = max(1, self.ticks_per_quarter)
        if self.style is Style.JAZZ:
            eighth = time // max(1, tpq // 2)
            if eighth % 2 == 1:
                return self.intensity * 8
        elif self.style is Style.POP:
            if (time // tpq) % 2 == 0:
                return -self.intensity * 3
        return 0.0

    def phrase_timing_adjustment(self, time: int, analysis: TrackAnalysis) -> float:
        _, phrase = analysis.phrase_at(time)
        if phrase is None:
            return 0.0

        position = phrase.position(time)
        if position < 0.2:
            return self.intensity * (0.2 - position) * 10
        if position > 0.8:
            return self.intensity * (position - 0.8) * 15
        return 0.0

    # -----------------------------------------------------------------
    # Velocity
    # -----------------------------------------------------------------

    def humanize_velocity(self, event, analysis: TrackAnalysis) -> int:
        """Humanized velocity of a NoteOn, within [1, 127]."""
        intensity = self.intensity
        adjustment = (self.profile.velocity_variation * intensity
                      * self.config.velocity_variation_scale
                      * (self.rng() - 0.5) * 2)
        adjustment += self.chord_adjustment(event, analysis)

        form_scale = self.config.dynamic_range_scale
        adjustment += self.phrase_velocity_adjustment(event.time, analysis) * form_scale
        adjustment += self.form_adjustment(event.time, analysis) * form_scale

        adjustment *= self.profile.velocity_scale
        if self.profile.accent_probability > 0:
            if self.rng() < self.profile.accent_probability:
                adjustment += intensity * self.profile.accent_strength

        return int(clamp(round_half_up(event.velocity + adjustment), MIN_VELOCITY, MAX_VELOCITY))

    def chord_adjustment(self, event, analysis: TrackAnalysis) -> float:
        """Roots lean louder, other chord tones spread, minor chords soften."""
        chord = analysis.chord_at(event.time)
        if chord is None:
            return 0.0

        intensity = self.intensity
        adjustment = 0.0
        pitch_class = event.note % 12
        if pitch_class == chord.root:
            adjustment += intensity * 5
        elif pitch_class in chord.pitch_classes:
            adjustment += intensity * (self.rng() - 0.5) * 8

        if chord.quality is ChordQuality.MINOR:
            adjustment -= intensity * 3
        elif chord.quality is ChordQuality.DIMINISHED:
            adjustment += intensity * (self.rng() - 0.5) * 10
        return adjustment

    def phrase_velocity_adjustment(self, time: int, analysis: TrackAnalysis) -> float:
        """Breathing arc inside the phrase holding ``time``."""
        _, phrase = analysis.phrase_at(time)
        if phrase is None:
            return 0.0

        intensity = self.intensity
        position = phrase.position(time)
        seconds = ticks_to_seconds(phrase.duration, self.ticks_per_quarter,
                                   self.settings.assumed_bpm)

        arc = 0.0
        if seconds > PHRASE_BREATH_SECONDS:
            peaks = math.floor(seconds / PHRASE_BREATH_SECONDS)
            local = position * peaks - math.floor(position * peaks)
            arc = intensity * math.sin(local * math.pi) * 10
            if position < 0.3:
                arc += intensity * position * 8
            elif position > 0.8:
                arc -= intensity * (position - 0.8) * 25

        if self.style is Style.JAZZ:
            arc *= 0.8 + math.sin(position * math.pi * 4) * 0.3
        else:
            arc *= self.profile.phrase_dynamics_scale
        return arc

    def form_adjustment(self, time: int, analysis: TrackAnalysis) -> float:
        """Louder middle phrases and softer outer phrases of the piece."""
        total = len(analysis.phrases)
        if total < 3:
            return 0.0
        index, _ = analysis.phrase_at(time)
        if index < 0:
            return 0.0

        progress = index / max(1, total - 1)
        if 0.3 < progress < 0.7:
            return self.intensity * 8
        if progress < 0.2 or progress > 0.8:
            return -self.intensity * 5
        return 0.0
