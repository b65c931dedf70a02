#!/usr/bin/env python3
"""
Indel detail file reader and writer.

One line per HSP of an assigned (model, sequence) pair:

    model  sequence  mdl_coords  mdl_len  seq_coords  seq_len  inserts  deletes

Empty insert/delete lists are written as BLASTNULL.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..exceptions import InvalidCoordinateError, ParseError, ValidationError
from ..models.coords import CoordinateSegment
from ..models.hsp import HSP, IndelKind, IndelToken
from ..utils.file import atomic_write, check_input_file, safe_open
from ..utils.indel_utils import format_indel_string, parse_indel_string

logger = logging.getLogger("seqassign.formats.indel_file")

FIELD_COUNT = 8
FIELD_SEPARATOR = "  "


@dataclass(frozen=True)
class IndelRecord:
    """One line of an indel detail file"""
    model: str
    sequence: str
    mdl_coords: CoordinateSegment
    mdl_length: int
    seq_coords: CoordinateSegment
    seq_length: int
    inserts: Tuple[IndelToken, ...] = ()
    deletes: Tuple[IndelToken, ...] = ()

    @classmethod
    def from_hsp(cls, hsp: HSP) -> 'IndelRecord':
        """Build the record for one HSP; the model column uses the model length when known"""
        mdl_length = hsp.model_length if hsp.model_length is not None else hsp.alignment_length
        if mdl_length is None or hsp.seq_length is None:
            raise ValidationError(
                f"HSP {hsp.model}/{hsp.sequence} lacks the lengths needed for an indel record"
            )
        return cls(
            model=hsp.model,
            sequence=hsp.sequence,
            mdl_coords=hsp.mdl_segment,
            mdl_length=mdl_length,
            seq_coords=CoordinateSegment.from_oriented(hsp.seq_start, hsp.seq_stop, hsp.strand),
            seq_length=hsp.seq_length,
            inserts=tuple(hsp.inserts),
            deletes=tuple(hsp.deletes),
        )

    def to_line(self) -> str:
        return FIELD_SEPARATOR.join([
            self.model, self.sequence,
            str(self.mdl_coords), str(self.mdl_length),
            str(self.seq_coords), str(self.seq_length),
            format_indel_string(self.inserts), format_indel_string(self.deletes),
        ])


def write_indel_file(file_path: str, hsps: Iterable[HSP],
                     assignments: Optional[Dict[str, str]] = None) -> int:
    """Write indel records for HSPs, keeping only assigned (model, sequence) pairs

    Args:
        file_path: Output path
        hsps: HSPs in input order
        assignments: Optional sequence -> assigned model map

    Returns:
        Number of lines written
    """
    count = 0
    with atomic_write(file_path) as f:
        for hsp in hsps:
            if assignments is not None and assignments.get(hsp.sequence) != hsp.model:
                continue
            f.write(IndelRecord.from_hsp(hsp).to_line() + "\n")
            count += 1
    logger.info(f"Wrote {count} indel records to {file_path}")
    return count


def parse_indel_line(line: str, line_number: Optional[int] = None) -> IndelRecord:
    """Parse one data line of an indel detail file"""
    fields = line.split()
    if len(fields) != FIELD_COUNT:
        raise ParseError(f"Expected {FIELD_COUNT} tokens, found {len(fields)}",
                         line_number=line_number, line=line)
    model, sequence, mdl_coords, mdl_length, seq_coords, seq_length, ins_str, del_str = fields
    try:
        return IndelRecord(
            model=model,
            sequence=sequence,
            mdl_coords=CoordinateSegment.from_string(mdl_coords),
            mdl_length=int(mdl_length),
            seq_coords=CoordinateSegment.from_string(seq_coords),
            seq_length=int(seq_length),
            inserts=tuple(parse_indel_string(ins_str, IndelKind.INSERT)),
            deletes=tuple(parse_indel_string(del_str, IndelKind.DELETE)),
        )
    except ValueError as e:
        raise ParseError(f"Invalid length field: {e}", line_number=line_number, line=line) from e
    except (ParseError, InvalidCoordinateError) as e:
        raise ParseError(e.message, line_number=line_number, line=line) from e


def read_indel_file(file_path: str, model: Optional[str] = None,
                    seq_lengths: Optional[Dict[str, int]] = None) -> List[IndelRecord]:
    """Read an indel detail file

    Args:
        file_path: Path to the indel file
        model: If given, every record must belong to this model
        seq_lengths: If given, every record's sequence must be a key

    Returns:
        Records in file order

    Raises:
        ParseError: On malformed lines, unexpected models or unknown sequences
    """
    check_input_file(file_path, "indel file")
    records: List[IndelRecord] = []
    with safe_open(file_path, 'r') as f:
        for line_number, raw_line in enumerate(f, start=1):
            line = raw_line.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            record = parse_indel_line(line, line_number)
            if model is not None and record.model != model:
                raise ParseError(f"Unexpected model {record.model}, expected {model}",
                                 line_number=line_number, line=line)
            if seq_lengths is not None and record.sequence not in seq_lengths:
                raise ParseError(f"Unexpected sequence {record.sequence}",
                                 line_number=line_number, line=line)
            records.append(record)
    logger.debug(f"Read {len(records)} indel records from {file_path}")
    return records
