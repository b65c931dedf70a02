"""End-to-end classification and alignment pipelines"""

from .classify import ClassificationPipeline
from .align import SubsequencePipeline, JoinPipeline

__all__ = ['ClassificationPipeline', 'SubsequencePipeline', 'JoinPipeline']
