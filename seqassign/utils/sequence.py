#!/usr/bin/env python3
"""
Sequence utilities for seqassign
Reading nucleotide sequences and writing subsequences with Biopython.
"""
import logging
from typing import Dict, Iterable, List, Tuple

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from .file import check_input_file, safe_open
from ..exceptions import FileOperationError, ValidationError

logger = logging.getLogger("seqassign.utils.sequence")


def read_sequences(fasta_path: str) -> Dict[str, str]:
    """Read a FASTA file into an ordered name -> sequence map

    Raises:
        FileOperationError: If the file is missing, empty or unparsable
        ValidationError: If a sequence name occurs twice
    """
    check_input_file(fasta_path, "FASTA file")
    sequences: Dict[str, str] = {}
    try:
        with safe_open(fasta_path, 'r') as handle:
            for record in SeqIO.parse(handle, "fasta"):
                if record.id in sequences:
                    raise ValidationError(f"Duplicate sequence name {record.id} in {fasta_path}",
                                          {"file_path": fasta_path})
                sequences[record.id] = str(record.seq)
    except ValueError as e:
        raise FileOperationError(f"Error reading FASTA file {fasta_path}: {str(e)}",
                                 {"file_path": fasta_path}) from e

    logger.info(f"Read {len(sequences)} sequences from {fasta_path}")
    return sequences


def sequence_lengths(sequences: Dict[str, str]) -> Dict[str, int]:
    """Sequence name -> length map, preserving input order"""
    return {name: len(seq) for name, seq in sequences.items()}


def extract_subsequence(sequence: str, start: int, stop: int) -> str:
    """Return the 1-based inclusive region [start, stop] of a sequence

    Raises:
        ValidationError: If the region falls outside the sequence
    """
    if start < 1 or stop > len(sequence) or start > stop:
        raise ValidationError(f"Region {start}..{stop} is outside a sequence of length {len(sequence)}")
    return sequence[start - 1:stop]


def write_fasta(fasta_path: str, records: Iterable[Tuple[str, str]]) -> int:
    """Write (name, sequence) pairs to a FASTA file

    Returns:
        Number of records written
    """
    seq_records: List[SeqRecord] = [
        SeqRecord(Seq(sequence), id=name, description="") for name, sequence in records
    ]
    with safe_open(fasta_path, 'w') as handle:
        count = SeqIO.write(seq_records, handle, "fasta")
    logger.debug(f"Wrote {count} sequences to {fasta_path}")
    return count
