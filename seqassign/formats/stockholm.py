#!/usr/bin/env python3
"""
Stockholm alignment input and output for flank joins.

Flank alignments come from the profile aligner as Stockholm files with a
"#=GC RF" reference line; joined alignments are written back one block per
sequence since joined rows of different sequences need not share columns.
"""

import logging
from typing import Dict, Iterable, Tuple

from Bio import AlignIO
from Bio.Align import MultipleSeqAlignment
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from ..exceptions import FileOperationError, SanityError, ValidationError
from ..models.alignment import GAP_CHARS, FlankAlignment, FlankSide, JoinedAlignment, SubsequenceSpec
from ..models.coords import CoordinateSegment
from ..utils.file import check_input_file, safe_open

logger = logging.getLogger("seqassign.formats.stockholm")

RF_KEYS = ("reference_annotation", "RF")


def _reference_row(alignment) -> str:
    for key in RF_KEYS:
        if key in alignment.column_annotations:
            return str(alignment.column_annotations[key])
    raise ValidationError("Stockholm alignment has no #=GC RF line")


def read_stockholm_rows(file_path: str) -> Dict[str, Tuple[str, str]]:
    """Read every alignment in a Stockholm file

    Returns:
        Sequence name -> (aligned sequence row, RF row)
    """
    check_input_file(file_path, "Stockholm alignment")
    rows: Dict[str, Tuple[str, str]] = {}
    try:
        with safe_open(file_path, 'r') as handle:
            for alignment in AlignIO.parse(handle, "stockholm"):
                rf_row = _reference_row(alignment)
                for record in alignment:
                    if record.id in rows:
                        raise ValidationError(f"Sequence {record.id} appears twice in {file_path}")
                    rows[record.id] = (str(record.seq), rf_row)
    except ValueError as e:
        raise FileOperationError(f"Error reading Stockholm file {file_path}: {str(e)}",
                                 {"file_path": file_path}) from e
    logger.debug(f"Read {len(rows)} aligned sequences from {file_path}")
    return rows


def _is_residue(char: str) -> bool:
    return char not in GAP_CHARS


def flank_from_rows(seq_row: str, rf_row: str, spec: SubsequenceSpec, mdl_length: int) -> FlankAlignment:
    """Build a flank alignment from the aligned rows of one subsequence

    A 5' flank keeps every column up to its last residue and spans model
    positions from 1; a 3' flank keeps every column from its first residue
    and spans model positions up to the model length. A full-length
    subsequence keeps every column.
    """
    if len(seq_row) != len(rf_row):
        raise SanityError(f"Rows of {spec.name} differ in length ({len(seq_row)} vs {len(rf_row)})")
    residue_columns = [i for i, char in enumerate(seq_row) if _is_residue(char)]
    if len(residue_columns) != spec.length:
        raise SanityError(
            f"Aligned row of {spec.name} holds {len(residue_columns)} residues, expected {spec.length}"
        )

    if spec.side == FlankSide.FIVE_PRIME:
        first, last = 0, residue_columns[-1] + 1
    elif spec.side == FlankSide.THREE_PRIME:
        first, last = residue_columns[0], len(seq_row)
    else:
        first, last = 0, len(seq_row)

    kept_rf = rf_row[first:last]
    mdl_start = sum(1 for char in rf_row[:first] if _is_residue(char)) + 1
    mdl_stop = mdl_start + sum(1 for char in kept_rf if _is_residue(char)) - 1
    if spec.side == FlankSide.THREE_PRIME and mdl_stop != mdl_length:
        raise SanityError(f"RF row of {spec.name} spans {mdl_stop} model positions, expected {mdl_length}")

    return FlankAlignment(
        seq_row=seq_row[first:last],
        rf_row=kept_rf,
        seq_segment=CoordinateSegment(spec.start, spec.stop, '+'),
        mdl_segment=CoordinateSegment(mdl_start, mdl_stop, '+'),
    )


def read_flank_alignments(file_path: str, specs: Iterable[SubsequenceSpec],
                          mdl_length: int) -> Dict[str, FlankAlignment]:
    """Flank alignments for the given subsequences, keyed by subsequence name

    Subsequences absent from the file are left out of the result.
    """
    rows = read_stockholm_rows(file_path)
    flanks: Dict[str, FlankAlignment] = {}
    for spec in specs:
        if spec.name in rows:
            seq_row, rf_row = rows[spec.name]
            flanks[spec.name] = flank_from_rows(seq_row, rf_row, spec, mdl_length)
    return flanks


def write_joined_alignments(file_path: str, alignments: Iterable[JoinedAlignment]) -> int:
    """Write each joined alignment as its own Stockholm block with an RF line

    Returns:
        Number of alignments written
    """
    blocks = [
        MultipleSeqAlignment(
            [SeqRecord(Seq(joined.seq_row), id=joined.name, description="")],
            column_annotations={"reference_annotation": joined.rf_row},
        )
        for joined in alignments
    ]
    with safe_open(file_path, 'w') as handle:
        count = AlignIO.write(blocks, handle, "stockholm")
    logger.info(f"Wrote {count} joined alignments to {file_path}")
    return count
