#!/usr/bin/env python3
"""
ScoreAggregator - sums HSP bit scores per (model, sequence, strand)

The first HSP of a (model, sequence) pair fixes the strand counted for that
pair; later HSPs to the same model are summed only when they share that
strand and score above zero.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..exceptions import ValidationError
from ..models.hsp import HSP
from ..models.scores import AggregateScore, SequenceRanking

AggregateKey = Tuple[str, str, str]


class ScoreAggregator:
    """Streams HSPs into per-key aggregate scores"""

    def __init__(self, seq_lengths: Optional[Dict[str, int]] = None, logger=None):
        """Initialize the aggregator

        Args:
            seq_lengths: Sequence lengths, in input order; sequences never
                hit still get a (no-hit) ranking from finalize_all()
            logger: Logger instance for output
        """
        self.seq_lengths = dict(seq_lengths or {})
        self.logger = logger or logging.getLogger("seqassign.classification.aggregator")
        self._scores: Dict[AggregateKey, AggregateScore] = {}
        self._top_strand: Dict[Tuple[str, str], str] = {}
        self._by_sequence: Dict[str, List[AggregateScore]] = {}
        self._order = 0

    def observe(self, hsp: HSP) -> None:
        """Fold one HSP into the aggregates"""
        seq_length = self._seq_length(hsp)
        pair = (hsp.model, hsp.sequence)

        if pair not in self._top_strand:
            self._top_strand[pair] = hsp.strand
            aggregate = AggregateScore(model=hsp.model, sequence=hsp.sequence, strand=hsp.strand,
                                       seq_length=seq_length, order=self._order)
            self._order += 1
            aggregate.add_hit(hsp)
            self._scores[aggregate.key] = aggregate
            self._by_sequence.setdefault(hsp.sequence, []).append(aggregate)
            return

        aggregate = self._scores[(hsp.model, hsp.sequence, self._top_strand[pair])]
        if hsp.strand == aggregate.strand and hsp.bitscore > 0:
            aggregate.add_hit(hsp)
        else:
            aggregate.excluded.append(hsp)
            self.logger.debug(
                f"Excluding {hsp.strand} strand HSP ({hsp.bitscore} bits) of {hsp.sequence} to "
                f"{hsp.model}; top hit is on the {aggregate.strand} strand"
            )

    def observe_all(self, hsps: Iterable[HSP]) -> int:
        count = 0
        for hsp in hsps:
            self.observe(hsp)
            count += 1
        return count

    def _seq_length(self, hsp: HSP) -> int:
        if hsp.sequence in self.seq_lengths:
            return self.seq_lengths[hsp.sequence]
        if hsp.seq_length is None:
            raise ValidationError(f"No length known for sequence {hsp.sequence}")
        self.seq_lengths[hsp.sequence] = hsp.seq_length
        return hsp.seq_length

    def scores(self, sequence: Optional[str] = None) -> List[AggregateScore]:
        """Aggregates in first-seen order, optionally for one sequence"""
        if sequence is not None:
            return list(self._by_sequence.get(sequence, []))
        return list(self._scores.values())

    def get(self, model: str, sequence: str, strand: str) -> Optional[AggregateScore]:
        return self._scores.get((model, sequence, strand))

    def sequences(self) -> Iterator[str]:
        """Sequences with at least one HSP, in first-seen order"""
        return iter(self._by_sequence)

    def finalize(self, sequence: str) -> SequenceRanking:
        """Winner and runner-up for one sequence

        The winner has the highest summed score; ties go to the aggregate
        seen first.
        """
        seq_length = self.seq_lengths.get(sequence)
        aggregates = self._by_sequence.get(sequence, [])
        if seq_length is None:
            raise ValidationError(f"Unknown sequence {sequence}")
        if not aggregates:
            return SequenceRanking(sequence=sequence, seq_length=seq_length)

        ranked = sorted(aggregates, key=lambda a: (-a.score, a.order))
        runner_up = ranked[1] if len(ranked) > 1 else None
        return SequenceRanking(sequence=sequence, seq_length=seq_length,
                               winner=ranked[0], runner_up=runner_up)

    def finalize_all(self) -> List[SequenceRanking]:
        """Rankings for every known sequence, in length map order then first-seen order"""
        rankings = [self.finalize(name) for name in self.seq_lengths]
        self.logger.info(
            f"Finalized {len(rankings)} sequences, "
            f"{sum(1 for r in rankings if r.has_hits)} with hits"
        )
        return rankings
