"""Run configuration for analysis and humanization.

HumanizationConfig is the per-run request coming from the caller;
AnalysisSettings holds the analyzer's window sizes and thresholds.
Both are immutable and validated on construction.
"""

import json
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from .constants import (
    CHORD_WINDOW_TICKS, HARMONIC_STRIDE_TICKS, MELODY_ONSET_TOLERANCE,
    MIN_PHRASE_SECONDS, DEFAULT_BPM,
    Style, PhraseDetectionMode,
)

# Keys used by the web front end, mapped to field names
_ALIASES = {
    'phraseDetectionMode': 'phrase_detection_mode',
    'velocityVariation': 'velocity_variation_scale',
    'velocityVariationScale': 'velocity_variation_scale',
    'timingVariation': 'timing_variation_scale',
    'timingVariationScale': 'timing_variation_scale',
    'dynamicRange': 'dynamic_range_scale',
    'dynamicRangeScale': 'dynamic_range_scale',
}


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"invalid {enum_cls.__name__} {value!r} (choose from {choices})") from None


@dataclass(frozen=True)
class HumanizationConfig:
    """Settings for one humanization run.

    Attributes:
        style: Performance style.
        intensity: Overall strength, 0 disables every perturbation.
        seed: Random seed; None picks a clock-derived seed.
        phrase_detection_mode: Fused detector (auto) or a single detector.
        velocity_variation_scale: Multiplier on the base velocity jitter.
        timing_variation_scale: Multiplier on the base timing jitter.
        dynamic_range_scale: Multiplier on phrase and form dynamics.
    """
    style: Style = Style.DEFAULT
    intensity: float = 1.0
    seed: Optional[int] = None
    phrase_detection_mode: PhraseDetectionMode = PhraseDetectionMode.AUTO
    velocity_variation_scale: float = 1.0
    timing_variation_scale: float = 1.0
    dynamic_range_scale: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, 'style', _parse_enum(Style, self.style))
        object.__setattr__(self, 'phrase_detection_mode',
                           _parse_enum(PhraseDetectionMode, self.phrase_detection_mode))
        if self.seed is not None:
            object.__setattr__(self, 'seed', int(self.seed))

        for name in ('intensity', 'velocity_variation_scale',
                     'timing_variation_scale', 'dynamic_range_scale'):
            value = float(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} must be >= 0 (got {value})")
            object.__setattr__(self, name, value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HumanizationConfig':
        """Build a config from a mapping, accepting front-end key names.

        Unknown keys are ignored; empty-string seeds mean "no seed".
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
        if kwargs.get('seed') in ('', None):
            kwargs['seed'] = None
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'style': self.style.value,
            'intensity': self.intensity,
            'seed': self.seed,
            'phrase_detection_mode': self.phrase_detection_mode.value,
            'velocity_variation_scale': self.velocity_variation_scale,
            'timing_variation_scale': self.timing_variation_scale,
            'dynamic_range_scale': self.dynamic_range_scale,
        }

    def with_overrides(self, **overrides) -> 'HumanizationConfig':
        """Copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class AnalysisSettings:
    """Window sizes and thresholds used by the structure analyzer.

    Attributes:
        chord_window_ticks: Width of the chord detection windows.
        harmonic_stride_ticks: Stride of the harmonic boundary windows.
        melody_onset_tolerance: Onsets closer than this count as simultaneous.
        min_phrase_seconds: Phrases shorter than this are merged.
        assumed_bpm: Tempo used to convert ticks to seconds.
    """
    chord_window_ticks: int = CHORD_WINDOW_TICKS
    harmonic_stride_ticks: int = HARMONIC_STRIDE_TICKS
    melody_onset_tolerance: int = MELODY_ONSET_TOLERANCE
    min_phrase_seconds: float = MIN_PHRASE_SECONDS
    assumed_bpm: float = DEFAULT_BPM

    def __post_init__(self):
        if self.chord_window_ticks <= 0 or self.harmonic_stride_ticks <= 0:
            raise ValueError("analysis windows must be positive")
        if self.assumed_bpm <= 0:
            raise ValueError("assumed_bpm must be positive")


def load_config_file(filepath: str) -> HumanizationConfig:
    """Load a HumanizationConfig from a JSON object file."""
    with open(filepath, 'r') as file_handle:
        data = json.load(file_handle)
    if not isinstance(data, dict):
        raise ValueError(f"{filepath}: expected a JSON object")
    return HumanizationConfig.from_dict(data)
