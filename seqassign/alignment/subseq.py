#!/usr/bin/env python3
"""
SubsequenceSelector - picks the flanks of a sequence that need realignment

The longest ungapped block of a sequence's top HSP (the seed) is trusted;
the regions before and after it, extended into the seed by an overhang, are
realigned separately and later joined back onto the seed.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..exceptions import ValidationError
from ..formats.indel_file import IndelRecord, read_indel_file
from ..models.alignment import FlankSide, SeedRegion, SubsequenceSpec
from ..models.coords import CoordinateSegment
from ..utils.file import atomic_write
from ..utils.sequence import extract_subsequence, write_fasta
from .indels import IndelReconciler


class SubsequenceSelector:
    """Selects 5' and 3' flank subsequences around seed regions"""

    def __init__(self, overhang: int = 100, reconciler: Optional[IndelReconciler] = None, logger=None):
        if overhang < 0:
            raise ValidationError(f"Overhang must be non-negative, got {overhang}")
        self.overhang = overhang
        self.reconciler = reconciler or IndelReconciler()
        self.logger = logger or logging.getLogger("seqassign.alignment.subseq")

    def select(self, seq_name: str, seq_segment: CoordinateSegment, seq_length: int) -> List[SubsequenceSpec]:
        """Flank subsequences for one sequence

        Args:
            seq_name: Source sequence name
            seq_segment: Seed region [a, b] of the sequence
            seq_length: Sequence length L

        Returns:
            No specs when the seed covers [1, L]; a single full-length spec
            when the 5' and 3' candidates would overlap; otherwise a 5' spec
            [1, a+v-1] if a > 1 and a 3' spec [b-v+1, L] if b < L
        """
        start, stop = seq_segment.start, seq_segment.stop
        if stop > seq_length:
            raise ValidationError(f"Seed {seq_segment} extends past the end of {seq_name} (length {seq_length})")
        if start == 1 and stop == seq_length:
            return []

        stop_5p = min(start + self.overhang - 1, seq_length)
        start_3p = max(stop - self.overhang + 1, 1)

        if start != 1 and stop != seq_length and stop_5p >= start_3p:
            return [SubsequenceSpec.create(seq_name, 1, seq_length, FlankSide.FULL)]

        specs = []
        if start != 1:
            specs.append(SubsequenceSpec.create(seq_name, 1, stop_5p, FlankSide.FIVE_PRIME))
        if stop != seq_length:
            specs.append(SubsequenceSpec.create(seq_name, start_3p, seq_length, FlankSide.THREE_PRIME))
        return specs

    def seed_from_record(self, record: IndelRecord) -> SeedRegion:
        """Seed region of one indel record: its longest ungapped block"""
        ungapped = self.reconciler.reconcile(record.mdl_coords, record.seq_coords,
                                             record.inserts, record.deletes)
        mdl_segment, seq_segment = ungapped.max_length_pair()
        return SeedRegion(
            sequence=record.sequence,
            seq_segment=seq_segment,
            mdl_segment=mdl_segment,
            seq_length=record.seq_length,
            mdl_length=record.mdl_length,
        )

    def seeds_from_indel_file(self, indel_path: str, model: str,
                              seq_lengths: Dict[str, int]) -> Dict[str, SeedRegion]:
        """Seed regions from the top HSP of each sequence in an indel file"""
        seeds: Dict[str, SeedRegion] = {}
        for record in read_indel_file(indel_path, model=model, seq_lengths=seq_lengths):
            if record.sequence in seeds:
                continue
            if record.seq_coords.strand != '+':
                self.logger.warning(f"Skipping {record.sequence}: top HSP is on the {record.seq_coords.strand} strand")
                continue
            if record.seq_length != seq_lengths[record.sequence]:
                raise ValidationError(
                    f"Indel file length {record.seq_length} for {record.sequence} does not match "
                    f"sequence length {seq_lengths[record.sequence]}"
                )
            seeds[record.sequence] = self.seed_from_record(record)
        self.logger.info(f"Found seed regions for {len(seeds)} sequences assigned to {model}")
        return seeds

    def select_from_indel_file(self, indel_path: str, model: str,
                               seq_lengths: Dict[str, int]) -> Tuple[Dict[str, SeedRegion], List[SubsequenceSpec]]:
        """Seed regions and flank specs for every sequence in an indel file"""
        seeds = self.seeds_from_indel_file(indel_path, model, seq_lengths)
        specs: List[SubsequenceSpec] = []
        for seq_name, seed in seeds.items():
            specs.extend(self.select(seq_name, seed.seq_segment, seed.seq_length))
        self.logger.info(f"Selected {len(specs)} subsequences for realignment to {model}")
        return seeds, specs

    def write_specs(self, list_path: str, fasta_path: str, specs: Iterable[SubsequenceSpec],
                    sequences: Dict[str, str]) -> int:
        """Write the subsequence list and the subsequences themselves

        Returns:
            Number of subsequences written
        """
        specs = list(specs)
        with atomic_write(list_path) as f:
            for spec in specs:
                f.write(spec.to_line() + "\n")

        records = []
        for spec in specs:
            if spec.source not in sequences:
                raise ValidationError(f"Subsequence {spec.name} refers to unknown sequence {spec.source}")
            records.append((spec.name, extract_subsequence(sequences[spec.source], spec.start, spec.stop)))
        count = write_fasta(fasta_path, records)
        self.logger.debug(f"Wrote {count} subsequences to {fasta_path}")
        return count
