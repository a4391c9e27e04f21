"""Domain-specific structure analyzers."""

from .base import BaseAnalyzer
from .harmonic import ChordAnalyzer, classify_chord
from .phrase import PhraseDetector, fuse_boundaries
from .melodic import MelodicAnalyzer, melodic_contour
from .rhythm import RhythmAnalyzer
from .dynamics import DynamicsAnalyzer, velocity_trend

__all__ = [
    'BaseAnalyzer',
    'ChordAnalyzer',
    'classify_chord',
    'PhraseDetector',
    'fuse_boundaries',
    'MelodicAnalyzer',
    'melodic_contour',
    'RhythmAnalyzer',
    'DynamicsAnalyzer',
    'velocity_trend',
]
