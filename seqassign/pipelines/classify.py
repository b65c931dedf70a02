#!/usr/bin/env python3
"""
ClassificationPipeline - hits in, model assignments out

Parses search hits, aggregates scores per (model, sequence, strand), decides
PASS/FAIL per sequence and writes the model summaries, per-model search
tables, per-model indel files and the decision table.
"""

import os
from typing import Dict, List, Optional

from ..classification import ClassificationDecider, ClassificationThresholds, ScoreAggregator
from ..core.base_pipeline import BasePipeline
from ..exceptions import ConfigurationError, ValidationError
from ..formats.indel_file import write_indel_file
from ..formats.reports import write_decision_table, write_outcome_summary
from ..formats.tblout import write_model_summary, write_search_tblout, write_summed_model_summary
from ..models.hsp import HSP
from ..models.scores import ClassificationDecision
from ..parsers import HitRecordParser, HmmerTbloutParser
from ..utils.file import ensure_dir, prefixed_path
from ..utils.sequence import read_sequences, sequence_lengths

HIT_FORMATS = ('stream', 'tblout')


class ClassificationPipeline(BasePipeline):
    """Classifies every sequence of a FASTA file from its search hits"""

    def __init__(self, config_manager=None):
        super().__init__(config_manager, logger_name="seqassign.pipelines.classify")

    def _load_configuration(self) -> None:
        self.min_bitscore = self.config_manager.get('search.min_bitscore', 0.0)
        self.thresholds = ClassificationThresholds.from_config(self.config_manager)

    def _validate_config(self) -> None:
        if self.min_bitscore < 0:
            raise ConfigurationError(f"search.min_bitscore must be non-negative, got {self.min_bitscore}")

    def parse_hits(self, hits_path: str, seq_lengths: Dict[str, int], hits_format: str = 'stream') -> List[HSP]:
        """Parse a hit stream or an nhmmscan table"""
        if hits_format == 'stream':
            parser = HitRecordParser(seq_lengths, min_bitscore=self.min_bitscore)
        elif hits_format == 'tblout':
            parser = HmmerTbloutParser(seq_lengths, min_bitscore=self.min_bitscore)
        else:
            raise ValidationError(f"Unknown hit format {hits_format!r}; expected one of {', '.join(HIT_FORMATS)}")
        return parser.parse_file(hits_path)

    def classify(self, hsps: List[HSP], seq_lengths: Dict[str, int]) -> List[ClassificationDecision]:
        """Aggregate HSPs and decide every sequence in the length map"""
        aggregator = ScoreAggregator(seq_lengths)
        aggregator.observe_all(hsps)
        decider = ClassificationDecider(self.thresholds)
        return decider.decide_all(aggregator.finalize_all())

    def run(self, hits_path: str, fasta_path: str, out_dir: str, hits_format: str = 'stream',
            prefix: Optional[str] = None) -> List[ClassificationDecision]:
        """Run classification and write all outputs to out_dir

        Args:
            hits_path: Hit stream or nhmmscan tblout file
            fasta_path: FASTA file of the searched sequences
            out_dir: Output directory
            hits_format: 'stream' or 'tblout'
            prefix: Output file name prefix (defaults to the FASTA base name)

        Returns:
            One decision per sequence, in FASTA order
        """
        ensure_dir(out_dir)
        prefix = prefix or os.path.splitext(os.path.basename(fasta_path))[0]
        seq_lengths = sequence_lengths(read_sequences(fasta_path))

        hsps = self.parse_hits(hits_path, seq_lengths, hits_format)
        decisions = self.classify(hsps, seq_lengths)

        summary_path = prefixed_path(out_dir, prefix, "summary", "tblout")
        totals = write_model_summary(summary_path, hsps)
        self._record_output('model_summary', summary_path)

        summed_path = prefixed_path(out_dir, prefix, "summed", "tblout")
        write_summed_model_summary(summary_path, summed_path, totals)
        self._record_output('summed_model_summary', summed_path)

        assignments = {d.sequence: d.model for d in decisions if d.model is not None}
        for model in sorted(set(assignments.values())):
            tblout_path = prefixed_path(out_dir, prefix, model, "tblout")
            write_search_tblout(tblout_path, hsps, model, assignments)
            self._record_output(f"{model}.tblout", tblout_path)

            indel_path = prefixed_path(out_dir, prefix, model, "indel")
            model_hsps = [hsp for hsp in hsps if hsp.model == model]
            write_indel_file(indel_path, model_hsps, assignments)
            self._record_output(f"{model}.indel", indel_path)

        table_path = prefixed_path(out_dir, prefix, "decisions", "tsv")
        table = write_decision_table(decisions, table_path)
        self._record_output('decisions', table_path)

        outcomes_path = prefixed_path(out_dir, prefix, "outcomes", "tsv")
        write_outcome_summary(table, outcomes_path)
        self._record_output('outcome_summary', outcomes_path)

        passed = sum(1 for d in decisions if d.passed)
        self.logger.info(
            f"Classified {len(decisions)} sequences into {len(set(assignments.values()))} models "
            f"({passed} PASS)"
        )
        return decisions
