#!/usr/bin/env python3
"""
IndelReconciler - rebuilds the ungapped blocks of an HSP from its indels

Given the aligned model and sequence ranges of one HSP and its insert and
delete tokens, produces parallel model/sequence coords whose i-th segments
have equal length. Any disagreement between the ranges and the tokens is a
SanityError.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..exceptions import SanityError
from ..models.coords import Coords, CoordinateSegment
from ..models.hsp import HSP, IndelKind, IndelToken
from ..models.alignment import UngappedAlignment
from ..utils.indel_utils import parse_indel_string


class IndelReconciler:
    """Reconstructs maximal ungapped segment pairs from indel tokens"""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger("seqassign.alignment.indels")

    def reconcile(self, mdl_segment: CoordinateSegment, seq_segment: CoordinateSegment,
                  inserts: Sequence[IndelToken] = (), deletes: Sequence[IndelToken] = ()) -> UngappedAlignment:
        """Split an aligned range into ungapped segment pairs

        Args:
            mdl_segment: Aligned model range, "+" strand
            seq_segment: Aligned sequence range, "+" strand
            inserts: Insert tokens in ascending order
            deletes: Delete tokens in ascending order

        Returns:
            UngappedAlignment with parallel model and sequence coords

        Raises:
            SanityError: If the ranges and tokens are inconsistent
        """
        for label, segment in (("model", mdl_segment), ("sequence", seq_segment)):
            if segment.strand != '+':
                raise SanityError(f"Only + strand {label} ranges can be reconciled, got {segment}")

        mdl_coords = Coords()
        seq_coords = Coords()
        cur_mdl, cur_seq = mdl_segment.start, seq_segment.start

        for event in self._merge_events(inserts, deletes):
            self._emit(mdl_coords, seq_coords, cur_mdl, event.mdl_pos, cur_seq, event.seq_pos, event)
            if event.kind == IndelKind.INSERT:
                cur_mdl = event.mdl_pos + 1
                cur_seq = event.seq_pos + event.length + 1
            else:
                cur_mdl = event.mdl_pos + event.length + 1
                cur_seq = event.seq_pos + 1

        if cur_mdl > mdl_segment.stop or cur_seq > seq_segment.stop:
            raise SanityError(
                f"Indels extend past the aligned range (model {cur_mdl} > {mdl_segment.stop} "
                f"or sequence {cur_seq} > {seq_segment.stop})"
            )
        self._emit(mdl_coords, seq_coords, cur_mdl, mdl_segment.stop, cur_seq, seq_segment.stop, None)

        ungapped = UngappedAlignment(mdl_coords=mdl_coords, seq_coords=seq_coords)
        self.logger.debug(f"Reconciled {mdl_segment}/{seq_segment} into {mdl_coords} / {seq_coords}")
        return ungapped

    def reconcile_hsp(self, hsp: HSP) -> UngappedAlignment:
        """Reconcile the ranges and indels of a plus-strand HSP"""
        return self.reconcile(hsp.mdl_segment, hsp.seq_segment, hsp.inserts, hsp.deletes)

    def reconcile_strings(self, mdl_coords: str, seq_coords: str, ins_str: Optional[str],
                          del_str: Optional[str]) -> Tuple[str, str]:
        """Reconcile wire-format ranges and token strings

        Returns:
            (model coords string, sequence coords string)
        """
        ungapped = self.reconcile(
            CoordinateSegment.from_string(mdl_coords),
            CoordinateSegment.from_string(seq_coords),
            parse_indel_string(ins_str, IndelKind.INSERT),
            parse_indel_string(del_str, IndelKind.DELETE),
        )
        return str(ungapped.mdl_coords), str(ungapped.seq_coords)

    @staticmethod
    def _merge_events(inserts: Sequence[IndelToken], deletes: Sequence[IndelToken]) -> List[IndelToken]:
        """Interleave inserts and deletes in coordinate order"""
        events: List[IndelToken] = []
        i = d = 0
        while i < len(inserts) or d < len(deletes):
            if i == len(inserts):
                events.append(deletes[d])
                d += 1
                continue
            if d == len(deletes):
                events.append(inserts[i])
                i += 1
                continue

            ins, dlt = inserts[i], deletes[d]
            if ins.seq_pos == dlt.seq_pos and ins.mdl_pos == dlt.mdl_pos:
                raise SanityError(f"Insert {ins} and delete {dlt} have identical positions")
            if ins.seq_pos <= dlt.seq_pos and ins.mdl_pos <= dlt.mdl_pos:
                events.append(ins)
                i += 1
            elif dlt.seq_pos <= ins.seq_pos and dlt.mdl_pos <= ins.mdl_pos:
                events.append(dlt)
                d += 1
            else:
                raise SanityError(f"Insert {ins} and delete {dlt} are out of order")
        return events

    @staticmethod
    def _emit(mdl_coords: Coords, seq_coords: Coords, mdl_start: int, mdl_stop: int,
              seq_start: int, seq_stop: int, event: Optional[IndelToken]) -> None:
        mdl_len = mdl_stop - mdl_start + 1
        seq_len = seq_stop - seq_start + 1
        where = f"before {event}" if event is not None else "after the last indel"
        if mdl_len != seq_len:
            raise SanityError(
                f"Ungapped lengths differ {where}: model {mdl_start}..{mdl_stop} ({mdl_len}), "
                f"sequence {seq_start}..{seq_stop} ({seq_len})"
            )
        if mdl_len < 0:
            raise SanityError(f"Negative ungapped length {where}: model {mdl_start}..{mdl_stop}")
        # an insert directly followed by a delete leaves no ungapped block between them
        if mdl_len == 0:
            return
        mdl_coords.append(CoordinateSegment(mdl_start, mdl_stop, '+'))
        seq_coords.append(CoordinateSegment(seq_start, seq_stop, '+'))
