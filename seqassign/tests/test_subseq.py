#!/usr/bin/env python3
"""
Tests for flank subsequence selection.
"""

import pytest

from seqassign.alignment import SubsequenceSelector
from seqassign.exceptions import ValidationError
from seqassign.models.alignment import FlankSide
from seqassign.models.coords import CoordinateSegment
from seqassign.utils.sequence import read_sequences

INDEL_FILE = """\
modelB  seq2  6..508:+  1200  1..500:+  500  BLASTNULL  Q100:S105-3
modelB  seq2  820..900:+  1200  480..400:-  500  BLASTNULL  BLASTNULL
modelB  seq3  1..81:+  1200  481..401:-  800  BLASTNULL  BLASTNULL
modelB  seq1  5..604:+  1200  1..600:+  1000  BLASTNULL  BLASTNULL
"""


def spans(specs):
    return [(spec.start, spec.stop, spec.side) for spec in specs]


@pytest.mark.unit
class TestSelect:
    """Tests for SubsequenceSelector.select"""

    def test_both_flanks(self):
        selector = SubsequenceSelector(overhang=10)
        specs = selector.select("seq1", CoordinateSegment(50, 950), 1000)
        assert spans(specs) == [(1, 59, FlankSide.FIVE_PRIME), (941, 1000, FlankSide.THREE_PRIME)]
        assert [spec.name for spec in specs] == ["seq1/1-59", "seq1/941-1000"]

    def test_seed_covers_sequence(self):
        selector = SubsequenceSelector(overhang=10)
        assert selector.select("seq1", CoordinateSegment(1, 1000), 1000) == []

    def test_only_three_prime(self):
        selector = SubsequenceSelector(overhang=100)
        specs = selector.select("seq1", CoordinateSegment(1, 900), 1000)
        assert spans(specs) == [(801, 1000, FlankSide.THREE_PRIME)]

    def test_only_five_prime(self):
        selector = SubsequenceSelector(overhang=100)
        specs = selector.select("seq1", CoordinateSegment(100, 1000), 1000)
        assert spans(specs) == [(1, 199, FlankSide.FIVE_PRIME)]

    def test_overlapping_flanks_collapse_to_full_sequence(self):
        selector = SubsequenceSelector(overhang=500)
        specs = selector.select("seq1", CoordinateSegment(50, 950), 1000)
        assert spans(specs) == [(1, 1000, FlankSide.FULL)]
        assert specs[0].to_line() == "seq1/1-1000 1 1000 seq1"

    def test_touching_flanks_collapse(self):
        # 5' stop and 3' start meet at 59
        selector = SubsequenceSelector(overhang=10)
        specs = selector.select("seq1", CoordinateSegment(50, 68), 1000)
        assert spans(specs) == [(1, 1000, FlankSide.FULL)]

    def test_overhang_is_clamped_to_sequence(self):
        selector = SubsequenceSelector(overhang=2000)
        specs = selector.select("seq1", CoordinateSegment(5, 1000), 1000)
        assert spans(specs) == [(1, 1000, FlankSide.FIVE_PRIME)]

    def test_seed_past_sequence_end(self):
        with pytest.raises(ValidationError):
            SubsequenceSelector().select("seq1", CoordinateSegment(1, 1001), 1000)

    def test_negative_overhang(self):
        with pytest.raises(ValidationError):
            SubsequenceSelector(overhang=-1)


@pytest.mark.unit
class TestIndelFileSelection:
    """Tests for seeds and specs drawn from an indel file"""

    def test_seeds_use_top_hsp_longest_block(self, write_file, seq_lengths):
        path = write_file("modelB.indel", INDEL_FILE)
        seeds = SubsequenceSelector(overhang=10).seeds_from_indel_file(path, "modelB", seq_lengths)

        assert list(seeds) == ["seq2", "seq1"]
        seed = seeds["seq2"]
        assert seed.seq_segment == CoordinateSegment(101, 500)
        assert seed.mdl_segment == CoordinateSegment(109, 508)
        assert seed.mdl_length == 1200
        assert seed.seq_length == 500

    def test_minus_strand_top_hsp_is_skipped(self, write_file, seq_lengths):
        path = write_file("modelB.indel", INDEL_FILE)
        seeds = SubsequenceSelector().seeds_from_indel_file(path, "modelB", seq_lengths)
        assert "seq3" not in seeds

    def test_select_from_indel_file(self, write_file, seq_lengths):
        path = write_file("modelB.indel", INDEL_FILE)
        _, specs = SubsequenceSelector(overhang=10).select_from_indel_file(path, "modelB", seq_lengths)
        assert [spec.name for spec in specs] == ["seq2/1-110", "seq1/591-1000"]

    def test_length_mismatch(self, write_file, seq_lengths):
        path = write_file("modelB.indel", "modelB  seq1  1..600:+  1200  1..600:+  999  BLASTNULL  BLASTNULL\n")
        with pytest.raises(ValidationError, match="does not match"):
            SubsequenceSelector().seeds_from_indel_file(path, "modelB", seq_lengths)

    def test_write_specs(self, write_file, fasta_file, seq_lengths, tmp_path):
        path = write_file("modelB.indel", INDEL_FILE)
        selector = SubsequenceSelector(overhang=10)
        _, specs = selector.select_from_indel_file(path, "modelB", seq_lengths)
        sequences = read_sequences(fasta_file)

        list_path = str(tmp_path / "out" / "modelB.subseq.list")
        fasta_path = str(tmp_path / "out" / "modelB.subseq.fa")
        assert selector.write_specs(list_path, fasta_path, specs, sequences) == 2

        with open(list_path) as f:
            assert f.read().splitlines() == ["seq2/1-110 1 110 seq2", "seq1/591-1000 591 1000 seq1"]
        subsequences = read_sequences(fasta_path)
        assert subsequences["seq2/1-110"] == sequences["seq2"][:110]
        assert subsequences["seq1/591-1000"] == sequences["seq1"][590:]

    def test_write_specs_unknown_source(self, tmp_path):
        selector = SubsequenceSelector(overhang=10)
        specs = selector.select("seqX", CoordinateSegment(50, 950), 1000)
        with pytest.raises(ValidationError):
            selector.write_specs(str(tmp_path / "x.list"), str(tmp_path / "x.fa"), specs, {})
