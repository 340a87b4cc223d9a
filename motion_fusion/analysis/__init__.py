"""
Motion analysis and pattern classification

- MotionAnalyzer: magnitude statistics, hand/finger correlation,
  autocorrelation periodicity proxy, spatial complexity, temporal consistency
- PatternClassifier: dominant-actor threshold rule, gesture templates
  (tap, swipe, pinch, rotation) and the combined energy classifier
"""

from .config import AnalysisConfig
from .analyzer import MagnitudeStats, MotionAnalyzer, StreamAnalysis, WindowAnalysis
from .classifier import ClassificationResult, PatternClassifier, PatternHistory
from .templates import GestureTemplate, GestureWindow, default_templates

__all__ = [
    'AnalysisConfig',
    'MagnitudeStats',
    'MotionAnalyzer',
    'StreamAnalysis',
    'WindowAnalysis',
    'ClassificationResult',
    'PatternClassifier',
    'PatternHistory',
    'GestureTemplate',
    'GestureWindow',
    'default_templates',
]
