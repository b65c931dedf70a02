#!/usr/bin/env python3
"""
Parser for nhmmscan --tblout per-hit tables.

Each data row becomes one HSP carrying the composition bias, so profile
search results can feed the same aggregation as pairwise hits.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..exceptions import ParseError
from ..models.hsp import HSP
from ..utils.file import check_input_file, safe_open

# whitespace-delimited columns before the free-text description
TBLOUT_COLUMNS = [
    'model', 'model_accession', 'sequence', 'sequence_accession',
    'hmm_from', 'hmm_to', 'ali_from', 'ali_to', 'env_from', 'env_to',
    'model_length', 'strand', 'evalue', 'score', 'bias',
]


class HmmerTbloutParser:
    """Parser for nhmmscan tabular output"""

    def __init__(self, seq_lengths: Optional[Dict[str, int]] = None, min_bitscore: Optional[float] = None,
                 logger=None):
        self.seq_lengths = seq_lengths
        self.min_bitscore = min_bitscore
        self.logger = logger or logging.getLogger("seqassign.parsers.hmmer_tblout")

    def parse_file(self, file_path: str) -> List[HSP]:
        """Parse a tblout file into a list of HSPs"""
        check_input_file(file_path, "nhmmscan tblout file")
        with safe_open(file_path, 'r') as f:
            hsps = list(self.parse_lines(f))
        self.logger.info(f"Parsed {len(hsps)} hits from {file_path}")
        return hsps

    def parse_lines(self, lines: Iterable[str]) -> Iterator[HSP]:
        for line_number, raw_line in enumerate(lines, start=1):
            line = raw_line.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            hsp = self._parse_row(line, line_number)
            if hsp is not None:
                yield hsp

    def _parse_row(self, line: str, line_number: int) -> Optional[HSP]:
        fields = line.split(None, len(TBLOUT_COLUMNS))
        if len(fields) < len(TBLOUT_COLUMNS):
            raise ParseError(
                f"Expected at least {len(TBLOUT_COLUMNS)} columns, found {len(fields)}",
                line_number=line_number, line=line
            )
        row = dict(zip(TBLOUT_COLUMNS, fields))

        try:
            hmm_from, hmm_to = int(row['hmm_from']), int(row['hmm_to'])
            ali_from, ali_to = int(row['ali_from']), int(row['ali_to'])
            model_length = int(row['model_length'])
            evalue = float(row['evalue'])
            score = float(row['score'])
            bias = float(row['bias'])
        except ValueError as e:
            raise ParseError(f"Invalid numeric column: {e}", line_number=line_number, line=line) from e

        strand = row['strand']
        if strand not in ('+', '-'):
            raise ParseError(f"Invalid strand {strand!r}", line_number=line_number, line=line)

        sequence = row['sequence']
        seq_length = None
        if self.seq_lengths is not None:
            if sequence not in self.seq_lengths:
                raise ParseError(f"Unexpected sequence name {sequence}", line_number=line_number, line=line)
            seq_length = self.seq_lengths[sequence]

        if self.min_bitscore is not None and score < self.min_bitscore:
            self.logger.debug(f"Dropping {row['model']}/{sequence} hit with score {score}")
            return None

        return HSP(
            sequence=sequence,
            model=row['model'],
            strand=strand,
            bitscore=score,
            evalue=evalue,
            bias=bias,
            seq_start=ali_from,
            seq_stop=ali_to,
            mdl_start=min(hmm_from, hmm_to),
            mdl_stop=max(hmm_from, hmm_to),
            seq_length=seq_length,
            model_length=model_length,
        )
