#!/usr/bin/env python3
"""
HitRecordParser - converts a tagged pairwise-search hit stream into HSPs

The stream holds one "TAG<tab>VALUE" pair per line. A query block starts
with QACC, a subject block with HACC, and each alignment block with HSP;
the block is complete once both QRANGE and SRANGE have been read. END_MATCH
closes the current query/subject pair.
"""

import re
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..exceptions import ParseError
from ..models.hsp import HSP, IndelKind, IndelToken
from ..utils.file import check_input_file, safe_open
from ..utils.indel_utils import parse_indel_string

END_MATCH = "END_MATCH"
NO_RANGE = ".."

# accepted but carry nothing this parser needs
IGNORED_TAGS = frozenset([
    "QDEF", "MATCH", "HDEF", "RAWSCORE", "IDENT", "GAPS",
    "MAXIN", "MAXDE", "STOP", "QSTOP", "HSTOP",
])

INTEGER_PATTERN = re.compile(r'^\d+$')
SCORE_PATTERN = re.compile(r'^-?\d+(\.\d+)?([eE][+-]?\d+)?$')
RANGE_PATTERN = re.compile(r'^(\d+)\.\.(\d+)$')
STRAND_WORDS = {'plus': '+', 'minus': '-', '+': '+', '-': '-'}

# tolerance when comparing bit scores against the minimum
SCORE_EPSILON = 0.000001


class ParserState(Enum):
    """Position of the parser within the stream"""
    NO_QUERY = auto()
    QUERY = auto()
    SUBJECT = auto()
    HSP = auto()


@dataclass
class _HSPBuilder:
    """Fields collected for one alignment block, committed when both ranges are read"""
    hsp_number: int
    bitscore: Optional[float] = None
    evalue: Optional[float] = None
    alignment_length: Optional[int] = None
    query_strand: Optional[str] = None
    subject_strand: Optional[str] = None
    inserts: List[IndelToken] = field(default_factory=list)
    deletes: List[IndelToken] = field(default_factory=list)
    query_range: Optional[Tuple[int, int]] = None
    subject_range: Optional[Tuple[int, int]] = None
    query_range_seen: bool = False
    subject_range_seen: bool = False
    no_alignment: bool = False

    @property
    def complete(self) -> bool:
        return self.query_range_seen and self.subject_range_seen


class HitRecordParser:
    """
    Parser for tagged pairwise-search hit streams.

    Produces one HSP per complete alignment block, dropping blocks whose bit
    score is below min_bitscore. Any malformed or out-of-order line raises
    ParseError with its line number.
    """

    def __init__(self, seq_lengths: Dict[str, int], min_bitscore: float = 0.0, logger=None):
        """Initialize the parser

        Args:
            seq_lengths: Expected length of every query sequence
            min_bitscore: Minimum bit score for an HSP to be reported
            logger: Logger instance for output
        """
        self.seq_lengths = seq_lengths
        self.min_bitscore = min_bitscore
        self.logger = logger or logging.getLogger("seqassign.parsers.hit_parser")
        self._reset_stream()

    def _reset_stream(self) -> None:
        self.state = ParserState.NO_QUERY
        self.query: Optional[str] = None
        self.subject: Optional[str] = None
        self.subject_length: Optional[int] = None
        self.builder: Optional[_HSPBuilder] = None
        self.line_number = 0
        self.stats = {'hsps': 0, 'below_min_bitscore': 0, 'no_alignment': 0, 'incomplete': 0}

    def parse_file(self, file_path: str) -> List[HSP]:
        """Parse a hit stream file into a list of HSPs"""
        check_input_file(file_path, "hit stream file")
        with safe_open(file_path, 'r') as f:
            hsps = list(self.parse_lines(f))
        self.logger.info(
            f"Parsed {len(hsps)} HSPs from {file_path} "
            f"({self.stats['below_min_bitscore']} below minimum bit score)"
        )
        return hsps

    def parse_lines(self, lines: Iterable[str]) -> Iterator[HSP]:
        """Parse lines of a hit stream, yielding HSPs in input order"""
        self._reset_stream()
        for raw_line in lines:
            self.line_number += 1
            line = raw_line.rstrip("\r\n")
            if not line.strip():
                continue
            hsp = self._parse_line(line)
            if hsp is not None:
                yield hsp

        if self.builder is not None and self.builder.bitscore is not None:
            self.stats['incomplete'] += 1
            self.logger.debug(f"Stream ended inside HSP {self.builder.hsp_number} for {self.query}/{self.subject}")
        self.logger.debug(f"Hit stream statistics: {self.stats}")

    def _fail(self, message: str, line: str) -> ParseError:
        return ParseError(message, line_number=self.line_number, line=line)

    def _parse_line(self, line: str) -> Optional[HSP]:
        if line == END_MATCH:
            self._end_match()
            return None

        tokens = line.split("\t")
        if len(tokens) != 2:
            raise self._fail(f"Expected exactly 2 tab-delimited tokens, found {len(tokens)}", line)
        tag, value = tokens

        if tag == "QACC":
            self._start_query(value, line)
        elif tag == "QLEN":
            self._require(self.state != ParserState.NO_QUERY, "QLEN line before QACC line", line)
            length = self._parse_int(value, "query length", line)
            expected = self.seq_lengths[self.query]
            if length != expected:
                raise self._fail(f"Query length {length} for {self.query} does not match expected length {expected}", line)
        elif tag == "HACC":
            self._require(self.state != ParserState.NO_QUERY, "HACC line before QACC line", line)
            self.subject = value
            self.subject_length = None
            self.builder = None
            self.state = ParserState.SUBJECT
        elif tag == "SLEN":
            self._require(self.subject is not None, "SLEN line before HACC line", line)
            self.subject_length = self._parse_int(value, "subject length", line)
        elif tag == "HLEN":
            self._require(self.query is not None and self.subject is not None,
                          "HLEN line before one or both of QACC and HACC lines", line)
            alignment_length = self._parse_int(value, "alignment length", line)
            if self.builder is not None:
                self.builder.alignment_length = alignment_length
        elif tag == "HSP":
            self._require(self.query is not None and self.subject is not None,
                          "HSP line before one or both of QACC and HACC lines", line)
            self.builder = _HSPBuilder(hsp_number=self._parse_int(value, "HSP number", line))
            self.state = ParserState.HSP
        elif tag == "BITSCORE":
            self._require(self.builder is not None, "BITSCORE line before HSP line", line)
            if not SCORE_PATTERN.match(value):
                raise self._fail(f"Unable to parse bit score {value!r}", line)
            self.builder.bitscore = float(value)
        elif tag == "EVALUE":
            self._require_bitscore(tag, line)
            self.builder.evalue = self._parse_evalue(value, line)
        elif tag in ("QSTRAND", "SSTRAND", "STRAND", "FRAME"):
            self._require_bitscore(tag, line)
            self._set_strands(tag, value, line)
        elif tag in ("INS", "DEL"):
            self._require(self.builder is not None and self.builder.query_strand is not None
                          and self.builder.subject_strand is not None,
                          f"{tag} line before strand lines", line)
            kind = IndelKind.INSERT if tag == "INS" else IndelKind.DELETE
            try:
                tokens = parse_indel_string(value, kind)
            except ParseError as e:
                raise self._fail(e.message, line) from e
            if kind == IndelKind.INSERT:
                self.builder.inserts = tokens
            else:
                self.builder.deletes = tokens
        elif tag in ("QRANGE", "SRANGE"):
            return self._set_range(tag, value, line)
        elif tag in IGNORED_TAGS:
            pass
        else:
            self.logger.debug(f"Ignoring unrecognized tag {tag} on line {self.line_number}")
        return None

    def _require(self, condition: bool, message: str, line: str) -> None:
        if not condition:
            raise self._fail(message, line)

    def _require_bitscore(self, tag: str, line: str) -> None:
        self._require(self.builder is not None and self.builder.bitscore is not None,
                      f"{tag} line before BITSCORE line", line)

    def _parse_int(self, value: str, description: str, line: str) -> int:
        if not INTEGER_PATTERN.match(value):
            raise self._fail(f"Unable to parse {description} {value!r}", line)
        return int(value)

    def _parse_evalue(self, value: str, line: str) -> float:
        # BLAST prints very small e-values without a mantissa, e.g. "e-105"
        text = f"1{value}" if value.startswith("e") else value
        try:
            return float(text)
        except ValueError as e:
            raise self._fail(f"Unable to parse e-value {value!r}", line) from e

    def _start_query(self, value: str, line: str) -> None:
        if value not in self.seq_lengths:
            raise self._fail(f"Unexpected sequence name {value}", line)
        self.query = value
        self.subject = None
        self.subject_length = None
        self.builder = None
        self.state = ParserState.QUERY

    def _set_strands(self, tag: str, value: str, line: str) -> None:
        if tag == "STRAND":
            parts = value.replace(" ", "").split("/")
            if len(parts) != 2 or any(p.lower() not in STRAND_WORDS for p in parts):
                raise self._fail(f"Unable to parse strand pair {value!r}", line)
            query_strand, subject_strand = (STRAND_WORDS[p.lower()] for p in parts)
        elif tag == "FRAME":
            if not re.match(r'^[+\-]\d$', value):
                raise self._fail(f"Unable to parse frame {value!r}", line)
            query_strand, subject_strand = value[0], '+'
        else:
            if value not in ('+', '-'):
                raise self._fail(f"Unable to parse {tag} value {value!r}", line)
            query_strand = value if tag == "QSTRAND" else None
            subject_strand = value if tag == "SSTRAND" else None

        # queries are always searched on the plus strand
        if query_strand is not None:
            if query_strand != '+':
                raise self._fail("Query strand is not +", line)
            self.builder.query_strand = query_strand
        if subject_strand is not None:
            self.builder.subject_strand = subject_strand

    def _set_range(self, tag: str, value: str, line: str) -> Optional[HSP]:
        self._require(self.query is not None, f"{tag} line before QACC line", line)
        builder = self.builder
        if builder is None or builder.bitscore is None:
            # ranges outside a scored alignment block carry no hit
            return None

        if value == NO_RANGE:
            builder.no_alignment = True
            coords = None
        else:
            match = RANGE_PATTERN.match(value)
            if not match:
                raise self._fail(f"Unable to parse {tag} value {value!r}", line)
            coords = (int(match.group(1)), int(match.group(2)))

        if tag == "QRANGE":
            builder.query_range, builder.query_range_seen = coords, True
        else:
            builder.subject_range, builder.subject_range_seen = coords, True

        if not builder.complete:
            return None
        return self._commit(line)

    def _commit(self, line: str) -> Optional[HSP]:
        builder = self.builder
        self.builder = None
        self.state = ParserState.SUBJECT

        if builder.no_alignment:
            self.stats['no_alignment'] += 1
            return None
        if builder.bitscore < self.min_bitscore - SCORE_EPSILON:
            self.stats['below_min_bitscore'] += 1
            self.logger.debug(
                f"Dropping HSP {builder.hsp_number} of {self.query}/{self.subject}: "
                f"bit score {builder.bitscore} below {self.min_bitscore}"
            )
            return None
        if builder.query_strand is None or builder.subject_strand is None:
            raise self._fail("Alignment block completed without query and subject strands", line)

        (query_start, query_stop), (subject_start, subject_stop) = builder.query_range, builder.subject_range
        if builder.subject_strand == '+':
            strand = '+'
            seq_start, seq_stop = query_start, query_stop
            mdl_start, mdl_stop = subject_start, subject_stop
        else:
            # report the sequence on the minus strand against the forward model
            strand = '-'
            seq_start, seq_stop = query_stop, query_start
            mdl_start, mdl_stop = subject_stop, subject_start

        self.stats['hsps'] += 1
        return HSP(
            sequence=self.query,
            model=self.subject,
            strand=strand,
            bitscore=builder.bitscore,
            evalue=builder.evalue,
            seq_start=seq_start,
            seq_stop=seq_stop,
            mdl_start=mdl_start,
            mdl_stop=mdl_stop,
            seq_length=self.seq_lengths[self.query],
            model_length=self.subject_length,
            inserts=tuple(builder.inserts),
            deletes=tuple(builder.deletes),
            hsp_number=builder.hsp_number,
            alignment_length=builder.alignment_length,
        )

    def _end_match(self) -> None:
        if self.builder is not None and self.builder.bitscore is not None:
            self.stats['incomplete'] += 1
            self.logger.debug(f"END_MATCH inside HSP {self.builder.hsp_number} for {self.query}/{self.subject}")
        self.builder = None
        self.subject = None
        self.subject_length = None
        self.state = ParserState.QUERY if self.query is not None else ParserState.NO_QUERY
