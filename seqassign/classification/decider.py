#!/usr/bin/env python3
"""
ClassificationDecider - turns sequence rankings into PASS/FAIL decisions
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List

from ..exceptions import ConfigurationError
from ..models.scores import ClassificationDecision, Outcome, SequenceRanking, UnexpectedFeature


@dataclass(frozen=True)
class ClassificationThresholds:
    """Thresholds and fail switches for unexpected features"""
    lowscore: float = 0.3
    verylowscore: float = 0.2
    lowdiff: float = 0.06
    verylowdiff: float = 0.006
    highbias: float = 0.25
    lowcov: float = 0.9
    lowscore_min_length: int = 0
    lowdiff_min_length: int = 0
    allow_lowscore: bool = False
    allow_verylowscore: bool = False
    allow_lowdiff: bool = False
    allow_verylowdiff: bool = False
    minus_strand_fail: bool = True
    highbias_fail: bool = False
    lowcov_fail: bool = False

    def __post_init__(self):
        if self.verylowscore > self.lowscore:
            raise ConfigurationError(
                f"verylowscore ({self.verylowscore}) must not exceed lowscore ({self.lowscore})"
            )
        if self.verylowdiff > self.lowdiff:
            raise ConfigurationError(
                f"verylowdiff ({self.verylowdiff}) must not exceed lowdiff ({self.lowdiff})"
            )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'ClassificationThresholds':
        """Create from a dict, ignoring keys that are not thresholds"""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in names})

    @classmethod
    def from_config(cls, config_manager) -> 'ClassificationThresholds':
        """Create from the classification section of a ConfigManager"""
        return cls.from_dict(config_manager.get_section('classification'))


class ClassificationDecider:
    """Applies score, difference, strand, bias and coverage rules"""

    def __init__(self, thresholds: ClassificationThresholds = None, logger=None):
        self.thresholds = thresholds or ClassificationThresholds()
        self.logger = logger or logging.getLogger("seqassign.classification.decider")

    def decide(self, ranking: SequenceRanking) -> ClassificationDecision:
        """Decide the outcome for one sequence

        Every rule is evaluated; any failing feature makes the outcome FAIL.
        A sequence without hits always fails with NoHits.
        """
        if not ranking.has_hits:
            return ClassificationDecision(
                sequence=ranking.sequence,
                seq_length=ranking.seq_length,
                outcome=Outcome.FAIL,
                features=(UnexpectedFeature.NO_HITS,),
                failing_features=(UnexpectedFeature.NO_HITS,),
            )

        t = self.thresholds
        winner = ranking.winner
        seq_length = ranking.seq_length
        features: List[UnexpectedFeature] = []
        failing: List[UnexpectedFeature] = []

        def flag(feature: UnexpectedFeature, fails: bool) -> None:
            features.append(feature)
            if fails:
                failing.append(feature)

        bits_per_nt = winner.bits_per_nt
        if bits_per_nt < t.verylowscore:
            flag(UnexpectedFeature.VERY_LOW_SCORE, not t.allow_verylowscore)
        elif bits_per_nt < t.lowscore:
            flag(UnexpectedFeature.LOW_SCORE, seq_length > t.lowscore_min_length and not t.allow_lowscore)

        diff_per_nt = None
        if ranking.runner_up is not None:
            diff_per_nt = (winner.score - ranking.runner_up.score) / seq_length
            if diff_per_nt < t.verylowdiff:
                flag(UnexpectedFeature.VERY_LOW_DIFF, not t.allow_verylowdiff)
            elif diff_per_nt < t.lowdiff:
                flag(UnexpectedFeature.LOW_DIFF, seq_length > t.lowdiff_min_length and not t.allow_lowdiff)

        if winner.strand == '-':
            flag(UnexpectedFeature.MINUS_STRAND, t.minus_strand_fail)

        if winner.bias_fraction > t.highbias:
            flag(UnexpectedFeature.HIGH_BIAS, t.highbias_fail)

        if winner.coverage < t.lowcov:
            flag(UnexpectedFeature.LOW_COVERAGE, t.lowcov_fail)

        decision = ClassificationDecision(
            sequence=ranking.sequence,
            seq_length=seq_length,
            outcome=Outcome.FAIL if failing else Outcome.PASS,
            features=tuple(features),
            failing_features=tuple(failing),
            model=winner.model,
            strand=winner.strand,
            score=winner.score,
            bias=winner.bias,
            nhits=winner.nhits,
            bits_per_nt=bits_per_nt,
            diff_per_nt=diff_per_nt,
            coverage=winner.coverage,
            runner_up=ranking.runner_up.model if ranking.runner_up is not None else None,
        )
        if features:
            self.logger.debug(
                f"{ranking.sequence}: {decision.outcome.value} "
                f"({', '.join(f.value for f in features)})"
            )
        return decision

    def decide_all(self, rankings: Iterable[SequenceRanking]) -> List[ClassificationDecision]:
        decisions = [self.decide(ranking) for ranking in rankings]
        passed = sum(1 for d in decisions if d.passed)
        self.logger.info(f"Classified {len(decisions)} sequences: {passed} PASS, {len(decisions) - passed} FAIL")
        return decisions
