#!/usr/bin/env python3
"""
Tests for indel tokens and the gap scanner.
"""

import pytest

from seqassign.alignment.gaps import find_deletes, find_inserts, longest_gap, scan_gaps
from seqassign.exceptions import ParseError, ValidationError
from seqassign.models.hsp import IndelKind, IndelToken
from seqassign.utils.indel_utils import format_indel_string, parse_indel_string, parse_indel_token


@pytest.mark.unit
class TestIndelTokens:
    """Tests for the "Q<seqpos>:S<mdlpos><sign><length>" codec"""

    def test_parse_delete(self):
        token = parse_indel_token("Q100:S105-3", IndelKind.DELETE)
        assert token == IndelToken(seq_pos=100, mdl_pos=105, length=3, kind=IndelKind.DELETE)
        assert str(token) == "Q100:S105-3"

    def test_parse_insert(self):
        token = parse_indel_token("Q41:S46+1", IndelKind.INSERT)
        assert (token.seq_pos, token.mdl_pos, token.length) == (41, 46, 1)

    def test_wrong_sign_is_rejected(self):
        with pytest.raises(ParseError, match="sign"):
            parse_indel_token("Q100:S105-3", IndelKind.INSERT)

    def test_malformed_token(self):
        with pytest.raises(ParseError):
            parse_indel_token("100:105-3", IndelKind.DELETE)

    def test_null_and_empty_lists(self):
        assert parse_indel_string("BLASTNULL", IndelKind.INSERT) == []
        assert parse_indel_string("", IndelKind.INSERT) == []
        assert parse_indel_string(None, IndelKind.DELETE) == []
        assert format_indel_string([]) == "BLASTNULL"

    def test_multiple_tokens_with_trailing_delimiter(self):
        tokens = parse_indel_string("Q10:S12-2;Q50:S54-1;", IndelKind.DELETE)
        assert [t.seq_pos for t in tokens] == [10, 50]
        assert format_indel_string(tokens) == "Q10:S12-2;Q50:S54-1"


@pytest.mark.unit
class TestGapScanner:
    """Tests for the insert/delete automaton over aligned rows"""

    def test_no_gaps(self):
        inserts, deletes = scan_gaps("ACGTACGT", "ACGTACGT", 1, 1)
        assert inserts == []
        assert deletes == []

    def test_single_delete(self):
        # query lacks subject positions 5-6
        deletes = find_deletes("ACGT--GT", "ACGTACGT", 1, 1)
        assert [str(t) for t in deletes] == ["Q4:S4-2"]

    def test_single_insert(self):
        # query residues 5-6 have no subject counterpart
        inserts = find_inserts("ACGTACGT", "ACGT--GT", 10, 20)
        assert [str(t) for t in inserts] == ["Q13:S23+2"]

    def test_mixed_gaps(self):
        inserts, deletes = scan_gaps("AC-GTAAC", "ACGGT--C", 1, 1)
        assert [str(t) for t in deletes] == ["Q2:S2-1"]
        assert [str(t) for t in inserts] == ["Q4:S5+2"]
        assert format_indel_string(inserts) == "Q4:S5+2"
        assert longest_gap(deletes) is deletes[0]

    def test_delete_at_row_end(self):
        deletes = find_deletes("ACG--", "ACGTA", 1, 1)
        assert [str(t) for t in deletes] == ["Q3:S3-2"]

    def test_minus_strand_delete_reports_ascending_positions(self):
        # query positions descend from 20: A=20 C=19 G=18 T=17, subject 1..6
        deletes = find_deletes("AC--GT", "ACGTGT", 20, 1, query_strand='-')
        assert [str(t) for t in deletes] == ["Q19:S2-2"]

    def test_minus_strand_tokens_are_reversed(self):
        deletes = find_deletes("A-C-G", "AACCG", 10, 1, query_strand='-')
        assert [t.seq_pos for t in deletes] == [9, 10]

    def test_minus_strand_insert_uses_following_residue(self):
        # query 20..15 descending; residues 18 and 17 inserted, 16 aligns to subject 3
        inserts = find_inserts("ACGTAC", "AC--AC", 20, 1, query_strand='-')
        assert [str(t) for t in inserts] == ["Q16:S3+2"]

    def test_unequal_rows(self):
        with pytest.raises(ValidationError):
            scan_gaps("ACGT", "ACG", 1, 1)

    def test_invalid_strand(self):
        with pytest.raises(ValidationError):
            find_inserts("ACGT", "ACGT", 1, 1, query_strand='?')

    def test_longest_gap_ties_go_to_first(self):
        tokens = [IndelToken(5, 5, 2, IndelKind.INSERT), IndelToken(9, 7, 2, IndelKind.INSERT)]
        assert longest_gap(tokens) is tokens[0]
        assert longest_gap([]) is None
