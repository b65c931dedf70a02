#!/usr/bin/env python3
"""
Score aggregation and classification models.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

from .hsp import HSP

UNASSIGNED = "unassigned"


@dataclass
class AggregateScore:
    """Summed evidence for one (model, sequence, strand) key

    Mutated while HSPs stream in and discarded once decisions are made.
    """
    model: str
    sequence: str
    strand: str
    seq_length: int
    score: float = 0.0
    bias: float = 0.0
    evalue: Optional[float] = None
    nhits: int = 0
    aligned_length: int = 0
    seq_min: Optional[int] = None
    seq_max: Optional[int] = None
    mdl_min: Optional[int] = None
    mdl_max: Optional[int] = None
    order: int = 0
    excluded: List[HSP] = field(default_factory=list)

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.model, self.sequence, self.strand

    @property
    def coverage(self) -> float:
        """Summed aligned length over sequence length (not clamped)"""
        if self.seq_length <= 0:
            return 0.0
        return self.aligned_length / self.seq_length

    @property
    def bits_per_nt(self) -> float:
        if self.seq_length <= 0:
            return 0.0
        return self.score / self.seq_length

    @property
    def bias_fraction(self) -> float:
        """Fraction of the uncorrected score attributed to biased composition"""
        total = self.score + self.bias
        if total <= 0:
            return 0.0
        return self.bias / total

    def add_hit(self, hsp: HSP) -> None:
        """Fold one HSP into the sums and the coordinate envelope"""
        self.score += hsp.bitscore
        self.bias += hsp.bias
        self.nhits += 1
        self.aligned_length += hsp.hit_length
        if self.evalue is None and hsp.evalue is not None:
            self.evalue = hsp.evalue

        seq_low, seq_high = sorted((hsp.seq_start, hsp.seq_stop))
        mdl_low, mdl_high = sorted((hsp.mdl_start, hsp.mdl_stop))
        self.seq_min = seq_low if self.seq_min is None else min(self.seq_min, seq_low)
        self.seq_max = seq_high if self.seq_max is None else max(self.seq_max, seq_high)
        self.mdl_min = mdl_low if self.mdl_min is None else min(self.mdl_min, mdl_low)
        self.mdl_max = mdl_high if self.mdl_max is None else max(self.mdl_max, mdl_high)


@dataclass(frozen=True)
class SequenceRanking:
    """Winner and runner-up aggregates for one sequence"""
    sequence: str
    seq_length: int
    winner: Optional[AggregateScore] = None
    runner_up: Optional[AggregateScore] = None

    @property
    def has_hits(self) -> bool:
        return self.winner is not None


class Outcome(Enum):
    """Terminal classification state"""
    PASS = "PASS"
    FAIL = "FAIL"


class UnexpectedFeature(Enum):
    """Reportable per-sequence conditions"""
    NO_HITS = "NoHits"
    VERY_LOW_SCORE = "VeryLowScore"
    LOW_SCORE = "LowScore"
    VERY_LOW_DIFF = "VeryLowDiff"
    LOW_DIFF = "LowDiff"
    MINUS_STRAND = "MinusStrand"
    HIGH_BIAS = "HighBias"
    LOW_COVERAGE = "LowCoverage"


@dataclass(frozen=True)
class ClassificationDecision:
    """Immutable per-sequence classification result"""
    sequence: str
    seq_length: int
    outcome: Outcome
    features: Tuple[UnexpectedFeature, ...] = ()
    failing_features: Tuple[UnexpectedFeature, ...] = ()
    model: Optional[str] = None
    strand: Optional[str] = None
    score: float = 0.0
    bias: float = 0.0
    nhits: int = 0
    bits_per_nt: float = 0.0
    diff_per_nt: Optional[float] = None
    coverage: float = 0.0
    runner_up: Optional[str] = None

    @property
    def assigned_model(self) -> str:
        return self.model if self.model is not None else UNASSIGNED

    @property
    def passed(self) -> bool:
        return self.outcome == Outcome.PASS

    def to_dict(self) -> Dict[str, Any]:
        """Flat row for tabular reports"""
        return {
            'sequence': self.sequence,
            'model': self.assigned_model,
            'strand': self.strand or '-',
            'outcome': self.outcome.value,
            'features': ",".join(f.value for f in self.features) or '-',
            'score': round(self.score, 1),
            'bits_per_nt': round(self.bits_per_nt, 4),
            'runner_up': self.runner_up or '-',
            'diff_per_nt': None if self.diff_per_nt is None else round(self.diff_per_nt, 4),
            'coverage': round(self.coverage, 3),
            'bias': round(self.bias, 1),
            'nhits': self.nhits,
        }
