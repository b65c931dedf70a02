#!/usr/bin/env python3
"""
Seed-and-flank alignment pipelines

SubsequencePipeline picks the flanks of each assigned sequence that need
realignment by the profile aligner; JoinPipeline splices the realigned
flanks back onto the seed regions.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from ..alignment import AlignmentJoiner, SubsequenceSelector
from ..core.base_pipeline import BasePipeline
from ..exceptions import ConfigurationError, ValidationError
from ..formats.stockholm import read_flank_alignments, write_joined_alignments
from ..models.alignment import FlankAlignment, FlankSide, JoinResult, SeedRegion, SubsequenceSpec
from ..utils.file import atomic_write, ensure_dir, prefixed_path
from ..utils.sequence import read_sequences, sequence_lengths


class SubsequencePipeline(BasePipeline):
    """Writes the flank subsequences of every sequence assigned to one model"""

    def __init__(self, config_manager=None):
        super().__init__(config_manager, logger_name="seqassign.pipelines.subseq")

    def _load_configuration(self) -> None:
        self.overhang = self.config_manager.get('alignment.overhang', 100)

    def _validate_config(self) -> None:
        if self.overhang < 0:
            raise ConfigurationError(f"alignment.overhang must be non-negative, got {self.overhang}")

    def run(self, indel_path: str, fasta_path: str, model: str, out_dir: str,
            overhang: Optional[int] = None) -> List[SubsequenceSpec]:
        """Select and write flank subsequences

        Returns:
            Subsequence specs, in indel file order
        """
        ensure_dir(out_dir)
        sequences = read_sequences(fasta_path)
        selector = SubsequenceSelector(overhang=self.overhang if overhang is None else overhang)
        _, specs = selector.select_from_indel_file(indel_path, model, sequence_lengths(sequences))

        list_path = self._record_output('subseq_list', prefixed_path(out_dir, model, "subseq", "list"))
        fasta_out = self._record_output('subseq_fasta', prefixed_path(out_dir, model, "subseq", "fa"))
        selector.write_specs(list_path, fasta_out, specs, sequences)
        self.logger.info(f"Wrote {len(specs)} subsequences for {model} to {out_dir}")
        return specs


class JoinPipeline(BasePipeline):
    """Joins flank alignments with seed regions for one model"""

    def __init__(self, config_manager=None):
        super().__init__(config_manager, logger_name="seqassign.pipelines.join")

    def _load_configuration(self) -> None:
        self.overhang = self.config_manager.get('alignment.overhang', 100)
        self.ungapped_marker = self.config_manager.get('alignment.ungapped_marker', 'x')

    def _validate_config(self) -> None:
        if not isinstance(self.ungapped_marker, str) or len(self.ungapped_marker) != 1:
            raise ConfigurationError(
                f"alignment.ungapped_marker must be a single character, got {self.ungapped_marker!r}"
            )

    def run(self, fasta_path: str, indel_path: str, model: str, out_path: str,
            stockholm_paths: Optional[List[str]] = None, model_length: Optional[int] = None,
            consensus: Optional[str] = None, overhang: Optional[int] = None) -> List[JoinResult]:
        """Join every sequence assigned to a model

        Args:
            fasta_path: FASTA file of the full sequences
            indel_path: Indel file of the model
            model: Model name
            out_path: Stockholm file for the joined alignments
            stockholm_paths: Flank alignment files (5' and/or 3')
            model_length: Model length, overriding the indel file's value
            consensus: Model consensus sequence
            overhang: Overhang used when the subsequences were selected

        Returns:
            One JoinResult per sequence
        """
        sequences = read_sequences(fasta_path)
        selector = SubsequenceSelector(overhang=self.overhang if overhang is None else overhang)
        joiner = AlignmentJoiner(ungapped_marker=self.ungapped_marker)

        seeds = selector.seeds_from_indel_file(indel_path, model, sequence_lengths(sequences))
        if model_length is not None:
            seeds = {name: replace(seed, mdl_length=model_length) for name, seed in seeds.items()}

        specs_by_seq: Dict[str, List[SubsequenceSpec]] = {
            name: selector.select(name, seed.seq_segment, seed.seq_length) for name, seed in seeds.items()
        }
        flanks = self._read_flanks(stockholm_paths or [], specs_by_seq, seeds)

        results = []
        for name, seed in seeds.items():
            results.append(self._join_one(joiner, seed, sequences[name], specs_by_seq[name], flanks, consensus))

        joined = [r.alignment for r in results if r.joined]
        write_joined_alignments(out_path, joined)
        self._record_output('joined_alignment', out_path)

        unjoinable = [r for r in results if r.boundary_mismatch]
        if unjoinable:
            report_path = self._record_output('unjoinable', f"{out_path}.unjoinable")
            with atomic_write(report_path) as f:
                for result in unjoinable:
                    f.write(f"{result.name}\t{result.message}\n")
        self.logger.info(f"Joined {len(joined)} of {len(results)} sequences for {model}")
        return results

    def _read_flanks(self, stockholm_paths: List[str], specs_by_seq: Dict[str, List[SubsequenceSpec]],
                     seeds: Dict[str, SeedRegion]) -> Dict[str, FlankAlignment]:
        flanks: Dict[str, FlankAlignment] = {}
        mdl_lengths = {seed.mdl_length for seed in seeds.values()}
        if len(mdl_lengths) > 1:
            raise ValidationError(f"Indel file records disagree on the model length: {sorted(mdl_lengths)}")
        if not mdl_lengths:
            return flanks
        mdl_length = mdl_lengths.pop()
        all_specs = [spec for specs in specs_by_seq.values() for spec in specs]
        for path in stockholm_paths:
            flanks.update(read_flank_alignments(path, all_specs, mdl_length))
        return flanks

    def _join_one(self, joiner: AlignmentJoiner, seed: SeedRegion, sequence: str,
                  specs: List[SubsequenceSpec], flanks: Dict[str, FlankAlignment],
                  consensus: Optional[str]) -> JoinResult:
        for spec in specs:
            if spec.name not in flanks:
                raise ValidationError(f"No alignment found for subsequence {spec.name}")

        by_side = {spec.side: flanks[spec.name] for spec in specs}
        if FlankSide.FULL in by_side:
            return joiner.join_full(seed, sequence, by_side[FlankSide.FULL])
        return joiner.join(seed, sequence,
                           five_prime=by_side.get(FlankSide.FIVE_PRIME),
                           three_prime=by_side.get(FlankSide.THREE_PRIME),
                           consensus=consensus)
