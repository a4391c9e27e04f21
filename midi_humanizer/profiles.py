"""Style profiles for style-aware humanization.

Each style has its own base timing and velocity variation plus the
multipliers used for phrase dynamics and the final velocity shaping.
Profiles are looked up by Style; unknown styles fall back to DEFAULT.
"""

from dataclasses import dataclass

from .constants import Style


@dataclass(frozen=True)
class StyleProfile:
    """Humanization parameters for one performance style.

    Attributes:
        name: Display name.
        description: One-line description for reports.
        timing_variation: Base timing jitter in ticks at intensity 1.
        velocity_variation: Base velocity jitter at intensity 1.
        phrase_dynamics_scale: Multiplier for phrase-arc dynamics
            (jazz replaces it with a modulated term).
        velocity_scale: Final multiplier applied to the velocity adjustment.
        accent_probability: Chance of a random accent per note.
        accent_strength: Accent size at intensity 1.
        swing: Style plays swung eighths.
        syncopation: Style leans on syncopated groove.
    """
    name: str
    description: str
    timing_variation: float
    velocity_variation: float
    phrase_dynamics_scale: float = 1.0
    velocity_scale: float = 1.0
    accent_probability: float = 0.0
    accent_strength: float = 0.0
    swing: bool = False
    syncopation: bool = False


STYLE_PROFILES = {
    Style.CLASSICAL: StyleProfile(
        "Classical", "Expressive phrasing with wide crescendos and diminuendos",
        timing_variation=15, velocity_variation=12,
        phrase_dynamics_scale=1.4, velocity_scale=1.2,
    ),
    Style.POP: StyleProfile(
        "Pop", "Steady groove with consistent dynamics and pushed strong beats",
        timing_variation=8, velocity_variation=6,
        phrase_dynamics_scale=0.7, velocity_scale=0.8,
        syncopation=True,
    ),
    Style.JAZZ: StyleProfile(
        "Jazz", "Swung eighths, syncopated accents and irregular dynamics",
        timing_variation=20, velocity_variation=15,
        accent_probability=0.3, accent_strength=8,
        swing=True, syncopation=True,
    ),
    Style.DEFAULT: StyleProfile(
        "Default", "Light, style-neutral variation",
        timing_variation=10, velocity_variation=8,
    ),
}


def get_profile(style: Style) -> StyleProfile:
    return STYLE_PROFILES.get(style, STYLE_PROFILES[Style.DEFAULT])
