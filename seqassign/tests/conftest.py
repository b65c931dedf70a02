#!/usr/bin/env python3
"""
Shared fixtures for seqassign tests
"""

import os
import logging
import textwrap

import pytest

from seqassign.models.hsp import HSP


def pytest_configure(config):
    """Register test markers"""
    config.addinivalue_line("markers", "unit: mark test as a fast unit test")
    config.addinivalue_line("markers", "integration: mark test as an end-to-end pipeline test")


@pytest.fixture(autouse=True)
def quiet_logging():
    logging.getLogger("seqassign").setLevel(logging.WARNING)
    yield


@pytest.fixture
def write_file(tmp_path):
    """Write dedented text to a file under tmp_path and return its path"""
    def _write(name, content):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"))
        return str(path)
    return _write


@pytest.fixture
def make_hsp():
    """Factory for plus-strand HSPs with sensible defaults"""
    def _make(sequence="seq1", model="modelA", bitscore=100.0, seq_start=1, seq_stop=100,
              mdl_start=1, mdl_stop=None, strand='+', seq_length=1000, **kwargs):
        if mdl_stop is None:
            mdl_stop = mdl_start + abs(seq_stop - seq_start)
        return HSP(sequence=sequence, model=model, strand=strand, bitscore=bitscore,
                   seq_start=seq_start, seq_stop=seq_stop, mdl_start=mdl_start, mdl_stop=mdl_stop,
                   seq_length=seq_length, **kwargs)
    return _make


def hit_block(query, subject, hsps, query_length=None, subject_length=None):
    """Render a hit stream record for one query/subject pair

    Each HSP is a dict with keys number, bitscore, evalue, qrange, srange and
    optional sstrand, ins, dels.
    """
    lines = [f"QACC\t{query}", f"QDEF\t{query} description"]
    if query_length is not None:
        lines.append(f"QLEN\t{query_length}")
    lines.extend([f"MATCH\t{subject}", f"HACC\t{subject}", f"HDEF\t{subject} model"])
    if subject_length is not None:
        lines.append(f"SLEN\t{subject_length}")
    for hsp in hsps:
        lines.extend([
            f"HSP\t{hsp['number']}",
            f"BITSCORE\t{hsp['bitscore']}",
            f"EVALUE\t{hsp.get('evalue', '1e-50')}",
            f"HLEN\t{hsp.get('hlen', 100)}",
            f"IDENT\t{hsp.get('hlen', 100)}",
            f"GAPS\t0",
            f"QSTRAND\t+",
            f"SSTRAND\t{hsp.get('sstrand', '+')}",
        ])
        if hsp.get('ins'):
            lines.append(f"INS\t{hsp['ins']}")
        if hsp.get('dels'):
            lines.append(f"DEL\t{hsp['dels']}")
        lines.extend([f"QRANGE\t{hsp['qrange']}", f"SRANGE\t{hsp['srange']}"])
    lines.append("END_MATCH")
    return lines


@pytest.fixture
def hit_stream():
    """Two sequences searched against two models"""
    lines = []
    lines += hit_block("seq1", "modelA", [
        {'number': 1, 'bitscore': 800.0, 'qrange': '1..1000', 'srange': '1..1000'},
    ], query_length=1000, subject_length=1000)
    lines += hit_block("seq1", "modelB", [
        {'number': 1, 'bitscore': 300.0, 'qrange': '1..600', 'srange': '5..604'},
    ], query_length=1000, subject_length=1200)
    lines += hit_block("seq2", "modelB", [
        {'number': 1, 'bitscore': 450.0, 'qrange': '1..500', 'srange': '6..508',
         'dels': 'Q100:S105-3'},
        {'number': 2, 'bitscore': 60.0, 'qrange': '400..480', 'srange': '900..820', 'sstrand': '-'},
    ], query_length=500, subject_length=1200)
    return [line + "\n" for line in lines]


@pytest.fixture
def seq_lengths():
    return {"seq1": 1000, "seq2": 500, "seq3": 800}


@pytest.fixture
def fasta_file(tmp_path):
    """FASTA file whose sequences match the seq_lengths fixture"""
    path = tmp_path / "seqs.fa"
    records = {"seq1": "ACGT" * 250, "seq2": "GATTACA" * 71 + "GAT", "seq3": "T" * 800}
    with open(path, 'w') as f:
        for name, seq in records.items():
            f.write(f">{name}\n{seq}\n")
    return str(path)
