#!/usr/bin/env python3
"""
seqassign core utilities
"""
from .logging_config import LoggingManager
from .base_pipeline import BasePipeline

__all__ = ['LoggingManager', 'BasePipeline']
