#!/usr/bin/env python3
"""
Tests for model summaries, search tables and indel detail files.
"""

import pytest

from seqassign.classification import ScoreAggregator
from seqassign.exceptions import ParseError, SanityError, ValidationError
from seqassign.formats.indel_file import IndelRecord, parse_indel_line, read_indel_file, write_indel_file
from seqassign.formats.tblout import (
    SummaryRow, format_bounds, parse_summary_line, read_model_summary, sum_rows,
    write_model_summary, write_search_tblout, write_summed_model_summary
)
from seqassign.models.hsp import IndelKind
from seqassign.utils.indel_utils import parse_indel_string


@pytest.fixture
def summary_hsps(make_hsp):
    return [
        make_hsp(model="modelA", bitscore=100.0, seq_start=1, seq_stop=100),
        make_hsp(model="modelB", bitscore=80.0, seq_start=1, seq_stop=90),
        make_hsp(model="modelA", bitscore=50.0, seq_start=201, seq_stop=300),
        make_hsp(model="modelA", bitscore=30.0, seq_start=1000, seq_stop=901, strand='-'),
    ]


@pytest.mark.unit
class TestModelSummary:
    """Tests for the per-HSP and summed model summaries"""

    def test_bounds(self):
        assert format_bounds(1, 100, 1000).strip() == "[."
        assert format_bounds(5, 1000, 1000).strip() == ".]"
        assert format_bounds(1, 1000, 1000).strip() == "[]"
        assert format_bounds(1000, 901, 1000).strip() == ".."

    def test_write_returns_totals(self, tmp_path, summary_hsps):
        totals = write_model_summary(str(tmp_path / "s.tblout"), summary_hsps)
        assert totals == {
            ("modelA", "seq1", '+'): 150.0,
            ("modelB", "seq1", '+'): 80.0,
            ("modelA", "seq1", '-'): 30.0,
        }

    def test_read_back_rows(self, tmp_path, summary_hsps):
        path = str(tmp_path / "s.tblout")
        write_model_summary(path, summary_hsps)
        with open(path) as f:
            assert f.readline().startswith("#modelname/subject")

        rows = read_model_summary(path)
        assert len(rows) == 4
        assert rows[0] == SummaryRow("modelA", "seq1", 100.0, 1, 100, '+', "[.", "?", 1000)
        assert (rows[3].start, rows[3].stop, rows[3].strand) == (1000, 901, '-')

    def test_summed_summary(self, tmp_path, summary_hsps):
        path = str(tmp_path / "s.tblout")
        summed_path = str(tmp_path / "summed.tblout")
        totals = write_model_summary(path, summary_hsps)
        assert write_summed_model_summary(path, summed_path, totals) == 4

        rows = read_model_summary(summed_path)
        assert [row.bitscore for row in rows] == [150.0, 80.0, 0.0, 30.0]
        with open(summed_path) as f:
            assert f.readline().startswith("#")

    def test_summed_summary_computes_totals(self, tmp_path, summary_hsps):
        path = str(tmp_path / "s.tblout")
        summed_path = str(tmp_path / "summed.tblout")
        write_model_summary(path, summary_hsps)
        write_summed_model_summary(path, summed_path)
        assert [row.bitscore for row in read_model_summary(summed_path)] == [150.0, 80.0, 0.0, 30.0]

    def test_summed_rows_reaggregate_to_same_totals(self, tmp_path, summary_hsps):
        """Aggregating the summed rows gives the same per-key scores as the HSPs"""
        path = str(tmp_path / "s.tblout")
        summed_path = str(tmp_path / "summed.tblout")
        write_model_summary(path, summary_hsps)
        write_summed_model_summary(path, summed_path)

        direct = ScoreAggregator({"seq1": 1000})
        direct.observe_all(summary_hsps)
        from_rows = ScoreAggregator({"seq1": 1000})
        from_rows.observe_all(row.to_hsp() for row in read_model_summary(summed_path))

        for aggregate in direct.scores():
            assert from_rows.get(*aggregate.key).score == pytest.approx(aggregate.score)
        assert from_rows.finalize("seq1").winner.model == direct.finalize("seq1").winner.model

    def test_sum_rows(self):
        rows = [
            SummaryRow("m", "s", 10.0, 1, 10, '+', "[.", "?", 100),
            SummaryRow("m", "s", 5.5, 20, 30, '+', "..", "?", 100),
        ]
        assert [row.bitscore for row in sum_rows(rows)] == [15.5, 0.0]

    def test_unknown_key_in_totals(self, tmp_path, summary_hsps):
        path = str(tmp_path / "s.tblout")
        write_model_summary(path, summary_hsps)
        with pytest.raises(SanityError):
            write_summed_model_summary(path, str(tmp_path / "summed.tblout"),
                                       {("modelA", "seq1", '+'): 150.0})

    def test_malformed_row(self):
        with pytest.raises(ParseError):
            parse_summary_line("modelA seq1 100.0 1 100")
        with pytest.raises(ParseError):
            parse_summary_line("modelA seq1 high 1 100 + [. ? 1000", line_number=3)

    def test_row_without_sequence_length(self, make_hsp):
        with pytest.raises(SanityError):
            SummaryRow.from_hsp(make_hsp(seq_length=None))


@pytest.mark.unit
class TestSearchTblout:
    """Tests for the per-model search table"""

    def test_only_assigned_sequences(self, tmp_path, make_hsp):
        hsps = [
            make_hsp(sequence="seq1", model="modelA", evalue=1e-30),
            make_hsp(sequence="seq2", model="modelA"),
            make_hsp(sequence="seq2", model="modelB"),
        ]
        path = str(tmp_path / "modelA.tblout")
        count = write_search_tblout(path, hsps, "modelA", {"seq1": "modelA", "seq2": "modelB"})
        assert count == 1

        with open(path) as f:
            lines = f.read().splitlines()
        assert lines[0].startswith("#target name")
        fields = lines[1].split()
        assert fields[0] == "seq1"
        assert fields[2] == "modelA"
        assert fields[-3] == "1e-30"

    def test_without_assignments(self, tmp_path, make_hsp):
        hsps = [make_hsp(sequence="seq1"), make_hsp(sequence="seq2")]
        assert write_search_tblout(str(tmp_path / "t"), hsps, "modelA") == 2


@pytest.mark.unit
class TestIndelFile:
    """Tests for indel detail file records"""

    def test_record_from_hsp(self, make_hsp):
        hsp = make_hsp(sequence="seq2", model="modelB", seq_start=1, seq_stop=500, mdl_start=6,
                       mdl_stop=508, seq_length=500, model_length=1200,
                       deletes=tuple(parse_indel_string("Q100:S105-3", IndelKind.DELETE)))
        line = IndelRecord.from_hsp(hsp).to_line()
        assert line == "modelB  seq2  6..508:+  1200  1..500:+  500  BLASTNULL  Q100:S105-3"

    def test_minus_strand_record(self, make_hsp):
        hsp = make_hsp(sequence="seq2", model="modelB", seq_start=480, seq_stop=400, strand='-',
                       mdl_start=820, mdl_stop=900, seq_length=500, model_length=1200)
        assert IndelRecord.from_hsp(hsp).to_line().split()[2:5] == ["820..900:+", "1200", "480..400:-"]

    def test_model_length_falls_back_to_alignment_length(self, make_hsp):
        record = IndelRecord.from_hsp(make_hsp(alignment_length=104))
        assert record.mdl_length == 104

    def test_missing_lengths(self, make_hsp):
        with pytest.raises(ValidationError):
            IndelRecord.from_hsp(make_hsp())

    def test_write_keeps_assigned_pairs(self, tmp_path, make_hsp):
        hsps = [
            make_hsp(sequence="seq1", model="modelA", model_length=1000),
            make_hsp(sequence="seq1", model="modelB", model_length=1200),
            make_hsp(sequence="seq2", model="modelA", model_length=1000, seq_length=500),
        ]
        path = str(tmp_path / "modelA.indel")
        count = write_indel_file(path, [h for h in hsps if h.model == "modelA"], {"seq1": "modelA"})
        assert count == 1

        records = read_indel_file(path, model="modelA", seq_lengths={"seq1": 1000})
        assert [(r.model, r.sequence) for r in records] == [("modelA", "seq1")]

    def test_parse_line(self):
        record = parse_indel_line("modelA  seq1  5..7513:+  7513  1..7509:+  7509  Q41:S46+1  Q37:S41-1")
        assert record.mdl_coords.start == 5
        assert [str(t) for t in record.inserts] == ["Q41:S46+1"]
        assert [str(t) for t in record.deletes] == ["Q37:S41-1"]

    @pytest.mark.parametrize("line", [
        "modelA  seq1  1..10:+  10  1..10:+  10  BLASTNULL",
        "modelA  seq1  1..10:+  ten  1..10:+  10  BLASTNULL  BLASTNULL",
        "modelA  seq1  1..10:+  10  1..10:+  10  Q5:S5-1  BLASTNULL",
        "modelA  seq1  1..10  10  1..10:+  10  BLASTNULL  BLASTNULL",
    ])
    def test_malformed_lines(self, line):
        with pytest.raises(ParseError) as exc_info:
            parse_indel_line(line, line_number=7)
        assert exc_info.value.line_number == 7

    def test_unexpected_model(self, write_file):
        path = write_file("x.indel", "modelB  seq1  1..10:+  10  1..10:+  10  BLASTNULL  BLASTNULL\n")
        with pytest.raises(ParseError, match="Unexpected model"):
            read_indel_file(path, model="modelA")

    def test_unknown_sequence(self, write_file):
        path = write_file("x.indel", "modelA  seqX  1..10:+  10  1..10:+  10  BLASTNULL  BLASTNULL\n")
        with pytest.raises(ParseError, match="Unexpected sequence"):
            read_indel_file(path, seq_lengths={"seq1": 10})
