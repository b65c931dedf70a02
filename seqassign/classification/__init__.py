"""Score aggregation and classification decisions"""

from .aggregator import ScoreAggregator
from .decider import ClassificationDecider, ClassificationThresholds

__all__ = ['ScoreAggregator', 'ClassificationDecider', 'ClassificationThresholds']
