#!/usr/bin/env python3
"""
AlignmentJoiner - splices realigned flanks onto a seed region

The joined row is the 5' flank up to its boundary column, the seed residues
annotated with the ungapped marker, and the 3' flank from its boundary
column. A boundary column is a column aligning a sequence residue to a model
position on the seed's diagonal (model position minus sequence position
equal to the seed's offset).
"""

import logging
from typing import Optional, Tuple

from ..exceptions import SanityError
from ..models.alignment import GAP_CHARS, FlankAlignment, JoinedAlignment, JoinResult, SeedRegion

DEFAULT_MARKER = 'x'
GAP = '-'


def _is_residue(char: str) -> bool:
    return char not in GAP_CHARS


class AlignmentJoiner:
    """Joins 5' and 3' flank alignments with a seed region"""

    def __init__(self, ungapped_marker: str = DEFAULT_MARKER, logger=None):
        self.ungapped_marker = ungapped_marker
        self.logger = logger or logging.getLogger("seqassign.alignment.joiner")

    def join(self, seed: SeedRegion, sequence: str,
             five_prime: Optional[FlankAlignment] = None,
             three_prime: Optional[FlankAlignment] = None,
             consensus: Optional[str] = None) -> JoinResult:
        """Join flanks and seed into one alignment of the whole sequence

        Args:
            seed: Seed region of the sequence
            sequence: Full sequence
            five_prime: Flank alignment covering [1, x], required iff the seed
                does not start at 1
            three_prime: Flank alignment covering [y, L], required iff the
                seed does not end at L
            consensus: Model consensus used as RF for unaligned model ends

        Returns:
            JoinResult; boundary_mismatch is set when a flank cannot be joined

        Raises:
            SanityError: If the inputs are inconsistent with each other
        """
        self._check_inputs(seed, sequence, five_prime, three_prime, consensus)

        seq_start, seq_stop = seed.seq_segment.start, seed.seq_segment.stop
        mdl_start, mdl_stop = seed.mdl_segment.start, seed.mdl_segment.stop
        offset = mdl_start - seq_start

        messages = []
        seed_start, seed_stop = seq_start, seq_stop
        prefix_seq = prefix_rf = suffix_seq = suffix_rf = ""

        if five_prime is not None:
            boundary = self._find_5p_boundary(five_prime, seed, offset)
            if boundary is None:
                messages.append(self._mismatch_message("5'", five_prime, seed))
            else:
                column, boundary_seqpos = boundary
                prefix_seq = five_prime.seq_row[:column + 1]
                prefix_rf = five_prime.rf_row[:column + 1]
                seed_start = boundary_seqpos + 1
        elif mdl_start != 1:
            prefix_seq, prefix_rf = self._pad(0, mdl_start - 1, consensus)

        if three_prime is not None:
            boundary = self._find_3p_boundary(three_prime, seed, offset)
            if boundary is None:
                messages.append(self._mismatch_message("3'", three_prime, seed))
            else:
                column, boundary_seqpos = boundary
                suffix_seq = three_prime.seq_row[column:]
                suffix_rf = three_prime.rf_row[column:]
                seed_stop = boundary_seqpos - 1
        elif mdl_stop != seed.mdl_length:
            suffix_seq, suffix_rf = self._pad(mdl_stop, seed.mdl_length, consensus)

        if not messages and seed_start > seed_stop + 1:
            messages.append(
                f"5' and 3' aligned regions overlap beyond the seed "
                f"(mdl:{seed.mdl_segment}, seq:{seed.seq_segment})"
            )

        if messages:
            message = "; ".join(messages)
            self.logger.warning(f"Unable to join alignment of {seed.sequence}: {message}")
            return JoinResult(name=seed.sequence, boundary_mismatch=True, message=message)

        seed_residues = sequence[seed_start - 1:seed_stop]
        joined = JoinedAlignment(
            name=seed.sequence,
            seq_row=prefix_seq + seed_residues + suffix_seq,
            rf_row=prefix_rf + self.ungapped_marker * len(seed_residues) + suffix_rf,
        )
        if joined.residues.upper() != sequence.upper():
            raise SanityError(f"Joined alignment of {seed.sequence} does not reproduce the sequence")

        self.logger.debug(
            f"Joined {seed.sequence}: seed {seed_start}..{seed_stop}, "
            f"{len(prefix_seq)} 5' columns, {len(suffix_seq)} 3' columns"
        )
        return JoinResult(name=seed.sequence, alignment=joined)

    def join_full(self, seed: SeedRegion, sequence: str, full: FlankAlignment) -> JoinResult:
        """Use the alignment of a whole-sequence subsequence as the joined alignment"""
        if full.seq_segment.start != 1 or full.seq_segment.stop != seed.seq_length:
            raise SanityError(f"Alignment {full.seq_segment} of {seed.sequence} is not full length")
        joined = JoinedAlignment(name=seed.sequence, seq_row=full.seq_row, rf_row=full.rf_row)
        if joined.residues.upper() != sequence.upper():
            raise SanityError(f"Full alignment of {seed.sequence} does not reproduce the sequence")
        return JoinResult(name=seed.sequence, alignment=joined)

    def _check_inputs(self, seed: SeedRegion, sequence: str, five_prime: Optional[FlankAlignment],
                      three_prime: Optional[FlankAlignment], consensus: Optional[str]) -> None:
        seq_segment = seed.seq_segment
        if len(sequence) != seed.seq_length:
            raise SanityError(f"Sequence {seed.sequence} has length {len(sequence)}, expected {seed.seq_length}")
        if seq_segment.stop > seed.seq_length or seed.mdl_segment.stop > seed.mdl_length:
            raise SanityError(f"Seed of {seed.sequence} extends past the sequence or model end")
        if (five_prime is not None) != (seq_segment.start != 1):
            raise SanityError(
                f"5' flank {'present' if five_prime else 'absent'} but seed of {seed.sequence} "
                f"starts at {seq_segment.start}"
            )
        if (three_prime is not None) != (seq_segment.stop != seed.seq_length):
            raise SanityError(
                f"3' flank {'present' if three_prime else 'absent'} but seed of {seed.sequence} "
                f"ends at {seq_segment.stop} of {seed.seq_length}"
            )
        if consensus is not None and len(consensus) != seed.mdl_length:
            raise SanityError(f"Consensus length {len(consensus)} differs from model length {seed.mdl_length}")

        for segment in (seq_segment, seed.mdl_segment):
            if segment.strand != '+':
                raise SanityError(f"Seed segment {segment} of {seed.sequence} is not on the + strand")

        for label, flank in (("5'", five_prime), ("3'", three_prime)):
            if flank is None:
                continue
            if flank.seq_segment.strand != '+' or flank.mdl_segment.strand != '+':
                raise SanityError(f"{label} flank of {seed.sequence} is not on the + strand")
            residues = flank.residues
            expected = sequence[flank.seq_segment.start - 1:flank.seq_segment.stop]
            if residues.upper() != expected.upper():
                raise SanityError(f"{label} flank of {seed.sequence} does not match {flank.seq_segment}")

        if five_prime is not None:
            if five_prime.seq_segment.start != 1 or five_prime.mdl_segment.start != 1:
                raise SanityError(
                    f"5' flank of {seed.sequence} must start at sequence and model position 1, "
                    f"got seq:{five_prime.seq_segment} mdl:{five_prime.mdl_segment}"
                )
            if five_prime.seq_segment.stop < seq_segment.start:
                raise SanityError(
                    f"No overlap between seed ({seq_segment}) and 5' flank ({five_prime.seq_segment})"
                )
        if three_prime is not None:
            if three_prime.seq_segment.stop != seed.seq_length or three_prime.mdl_segment.stop != seed.mdl_length:
                raise SanityError(
                    f"3' flank of {seed.sequence} must end at the sequence and model ends, "
                    f"got seq:{three_prime.seq_segment} mdl:{three_prime.mdl_segment}"
                )
            if three_prime.seq_segment.start > seq_segment.stop:
                raise SanityError(
                    f"No overlap between seed ({seq_segment}) and 3' flank ({three_prime.seq_segment})"
                )

    @staticmethod
    def _find_5p_boundary(flank: FlankAlignment, seed: SeedRegion, offset: int) -> Optional[Tuple[int, int]]:
        """Last match column on the seed diagonal at or past the position before the seed"""
        seqpos = flank.seq_segment.start - 1
        mdlpos = flank.mdl_segment.start - 1
        boundary = None
        for column, (seq_char, rf_char) in enumerate(zip(flank.seq_row, flank.rf_row)):
            seq_residue, rf_residue = _is_residue(seq_char), _is_residue(rf_char)
            if seq_residue:
                seqpos += 1
            if rf_residue:
                mdlpos += 1
            if (seq_residue and rf_residue and seqpos == mdlpos - offset
                    and seed.seq_segment.start - 1 <= seqpos <= seed.seq_segment.stop):
                boundary = (column, seqpos)
        return boundary

    @staticmethod
    def _find_3p_boundary(flank: FlankAlignment, seed: SeedRegion, offset: int) -> Optional[Tuple[int, int]]:
        """First match column on the seed diagonal at or before the position after the seed"""
        seqpos = flank.seq_segment.start - 1
        mdlpos = flank.mdl_segment.start - 1
        for column, (seq_char, rf_char) in enumerate(zip(flank.seq_row, flank.rf_row)):
            seq_residue, rf_residue = _is_residue(seq_char), _is_residue(rf_char)
            if seq_residue:
                seqpos += 1
            if rf_residue:
                mdlpos += 1
            if (seq_residue and rf_residue and seqpos == mdlpos - offset
                    and seed.seq_segment.start <= seqpos <= seed.seq_segment.stop + 1):
                return column, seqpos
        return None

    def _pad(self, mdl_from: int, mdl_to: int, consensus: Optional[str]) -> Tuple[str, str]:
        """Gap row and RF for model positions mdl_from+1..mdl_to the sequence does not reach"""
        length = mdl_to - mdl_from
        rf = consensus[mdl_from:mdl_to] if consensus is not None else self.ungapped_marker * length
        return GAP * length, rf

    @staticmethod
    def _mismatch_message(side: str, flank: FlankAlignment, seed: SeedRegion) -> str:
        return (
            f"{side} aligned region (mdl:{flank.mdl_segment}, seq:{flank.seq_segment}) unjoinable with seed "
            f"(mdl:{seed.mdl_segment.start}..{seed.mdl_segment.stop}, "
            f"seq:{seed.seq_segment.start}..{seed.seq_segment.stop})"
        )
