#!/usr/bin/env python3
"""
Model-summary tables.

The per-HSP model summary lists one fixed-width row per HSP. The summed
variant replaces the score of the first row of each (model, sequence,
strand) key with the key's total and zeroes the rest, so that a reader
taking per-row scores recovers per-key totals. The per-model search table
mirrors the tabular layout of profile search programs for HSPs of
sequences assigned to that model.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..exceptions import ParseError, SanityError
from ..models.hsp import HSP
from ..utils.file import atomic_write, check_input_file, safe_open

logger = logging.getLogger("seqassign.formats.tblout")

SUMMARY_ROW_FORMAT = "%-30s  %-30s  %8.1f  %9d  %9d  %6s  %6s  %3s  %11s"
SUMMARY_HEADER_FORMAT = "%-30s  %-30s  %8s  %9s  %9s  %6s  %6s  %3s  %11s"
SUMMARY_COLUMNS = ("#modelname/subject", "sequence/query", "bitscore", "start", "end",
                   "strand", "bounds", "ovp", "seqlen")
SEARCH_ROW_FORMAT = "%-s  -  %-s  -  blastn  %d  %d  %d  %d  %s  -  -  -  0.0  %8.1f  %s  ?  -"
SEARCH_HEADER = ("#target name  accession  query name  accession  mdl  mdl from  mdl to  "
                 "seq from  seq to  strand  trunc  pass  gc  bias  score  E-value  inc  description of target")

UNKNOWN_OVERLAP = "?"


def format_bounds(start: int, stop: int, seq_length: int) -> str:
    """Boundary markers: "[" when the hit reaches position 1, "]" when it reaches the end"""
    return "    %s%s" % ("[" if start == 1 else ".", "]" if stop == seq_length else ".")


@dataclass(frozen=True)
class SummaryRow:
    """One data row of a model summary"""
    model: str
    sequence: str
    bitscore: float
    start: int
    stop: int
    strand: str
    bounds: str
    overlap: str
    seq_length: int

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.model, self.sequence, self.strand

    @classmethod
    def from_hsp(cls, hsp: HSP) -> 'SummaryRow':
        if hsp.seq_length is None:
            raise SanityError(f"HSP {hsp.model}/{hsp.sequence} has no sequence length")
        return cls(
            model=hsp.model,
            sequence=hsp.sequence,
            bitscore=hsp.bitscore,
            start=hsp.seq_start,
            stop=hsp.seq_stop,
            strand=hsp.strand,
            bounds=format_bounds(hsp.seq_start, hsp.seq_stop, hsp.seq_length).strip(),
            overlap=UNKNOWN_OVERLAP,
            seq_length=hsp.seq_length,
        )

    def with_score(self, bitscore: float) -> 'SummaryRow':
        return SummaryRow(self.model, self.sequence, bitscore, self.start, self.stop,
                          self.strand, self.bounds, self.overlap, self.seq_length)

    def to_line(self) -> str:
        return SUMMARY_ROW_FORMAT % (self.model, self.sequence, self.bitscore, self.start, self.stop,
                                     self.strand, "    " + self.bounds, self.overlap, self.seq_length)

    def to_hsp(self) -> HSP:
        """HSP equivalent of the row

        Model coordinates are not recorded in the summary, so the model span
        is taken as 1..hit length.
        """
        hit_length = abs(self.stop - self.start) + 1
        return HSP(
            sequence=self.sequence,
            model=self.model,
            strand=self.strand,
            bitscore=self.bitscore,
            seq_start=self.start,
            seq_stop=self.stop,
            mdl_start=1,
            mdl_stop=hit_length,
            seq_length=self.seq_length,
        )


def summary_header() -> str:
    return SUMMARY_HEADER_FORMAT % SUMMARY_COLUMNS


def parse_summary_line(line: str, line_number: Optional[int] = None) -> SummaryRow:
    """Parse one data line of a model summary"""
    fields = line.split()
    if len(fields) != len(SUMMARY_COLUMNS):
        raise ParseError(
            f"Expected {len(SUMMARY_COLUMNS)} whitespace-delimited tokens, found {len(fields)}",
            line_number=line_number, line=line
        )
    model, sequence, bitscore, start, stop, strand, bounds, overlap, seq_length = fields
    try:
        return SummaryRow(model, sequence, float(bitscore), int(start), int(stop),
                          strand, bounds, overlap, int(seq_length))
    except ValueError as e:
        raise ParseError(f"Invalid numeric field: {e}", line_number=line_number, line=line) from e


def write_model_summary(file_path: str, hsps: Iterable[HSP]) -> Dict[Tuple[str, str, str], float]:
    """Write one row per HSP

    Returns:
        Summed bit score per (model, sequence, strand) key
    """
    totals: Dict[Tuple[str, str, str], float] = {}
    count = 0
    with atomic_write(file_path) as f:
        f.write(summary_header() + "\n")
        for hsp in hsps:
            row = SummaryRow.from_hsp(hsp)
            f.write(row.to_line() + "\n")
            totals[row.key] = totals.get(row.key, 0.0) + row.bitscore
            count += 1
    logger.info(f"Wrote {count} model summary rows to {file_path}")
    return totals


def read_model_summary(file_path: str) -> List[SummaryRow]:
    """Read the data rows of a model summary, skipping comment lines"""
    check_input_file(file_path, "model summary")
    rows = []
    with safe_open(file_path, 'r') as f:
        for line_number, raw_line in enumerate(f, start=1):
            line = raw_line.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            rows.append(parse_summary_line(line, line_number))
    return rows


def sum_rows(rows: Iterable[SummaryRow]) -> List[SummaryRow]:
    """Put each key's total on its first row and 0.0 on the rest"""
    rows = list(rows)
    totals: Dict[Tuple[str, str, str], float] = {}
    for row in rows:
        totals[row.key] = totals.get(row.key, 0.0) + row.bitscore
    return _apply_totals(rows, totals)


def _apply_totals(rows: List[SummaryRow], totals: Dict[Tuple[str, str, str], float]) -> List[SummaryRow]:
    remaining = dict(totals)
    summed = []
    for row in rows:
        if row.key not in remaining:
            raise SanityError(f"Model/sequence/strand {row.key} has no summed score")
        summed.append(row.with_score(remaining[row.key]))
        remaining[row.key] = 0.0
    return summed


def write_summed_model_summary(input_path: str, output_path: str,
                               totals: Optional[Dict[Tuple[str, str, str], float]] = None) -> int:
    """Rewrite a model summary with summed scores; comment lines pass through

    Args:
        input_path: Per-HSP model summary
        output_path: Summed model summary to write
        totals: Per-key totals from write_model_summary; computed from the
            input when not given

    Returns:
        Number of data rows written
    """
    rows = read_model_summary(input_path)
    if totals is None:
        summed = iter(sum_rows(rows))
    else:
        summed = iter(_apply_totals(rows, totals))

    count = 0
    with safe_open(input_path, 'r') as src, atomic_write(output_path) as dst:
        for raw_line in src:
            line = raw_line.rstrip("\r\n")
            if not line.strip():
                continue
            if line.startswith("#"):
                dst.write(line + "\n")
            else:
                dst.write(next(summed).to_line() + "\n")
                count += 1
    logger.info(f"Wrote {count} summed model summary rows to {output_path}")
    return count


def write_search_tblout(file_path: str, hsps: Iterable[HSP], model: str,
                        assignments: Optional[Dict[str, str]] = None) -> int:
    """Write the search table of one model

    Only HSPs to the model whose sequence is assigned to it (when an
    assignment map is given) are written.
    """
    count = 0
    with atomic_write(file_path) as f:
        f.write(SEARCH_HEADER + "\n")
        for hsp in hsps:
            if hsp.model != model:
                continue
            if assignments is not None and assignments.get(hsp.sequence) != model:
                continue
            evalue = "-" if hsp.evalue is None else f"{hsp.evalue:g}"
            f.write(SEARCH_ROW_FORMAT % (hsp.sequence, hsp.model, hsp.mdl_start, hsp.mdl_stop,
                                         hsp.seq_start, hsp.seq_stop, hsp.strand, hsp.bitscore,
                                         evalue) + "\n")
            count += 1
    logger.debug(f"Wrote {count} search table rows for {model} to {file_path}")
    return count
