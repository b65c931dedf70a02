# seqassign/utils/indel_utils.py
"""
Codec for indel tokens ("Q<seqpos>:S<mdlpos><sign><length>").

The sequence (query) and model (subject) positions are the last aligned
positions before the gap. Tokens of one kind are joined with ";" and an
empty list is written as BLASTNULL.
"""

import re
from typing import Iterable, List, Optional

from ..exceptions import ParseError
from ..models.hsp import IndelKind, IndelToken

INDEL_TOKEN_PATTERN = re.compile(r'^Q(\d+):S(\d+)([+\-])(\d+)$')
NULL_INDEL = "BLASTNULL"
TOKEN_DELIMITER = ';'


def parse_indel_token(token: str, kind: IndelKind) -> IndelToken:
    """Parse one indel token, checking its sign against the expected kind

    Args:
        token: Token text, e.g. "Q100:S105-3"
        kind: IndelKind.INSERT (sign "+") or IndelKind.DELETE (sign "-")

    Returns:
        IndelToken

    Raises:
        ParseError: If the token is malformed or carries the wrong sign
    """
    match = INDEL_TOKEN_PATTERN.match(token)
    if not match:
        raise ParseError(f"Unable to parse indel token {token!r}")
    seq_pos, mdl_pos, sign, length = match.groups()
    if sign != kind.value:
        raise ParseError(
            f"Indel token {token!r} has sign {sign} but {kind.name.lower()} tokens use {kind.value}"
        )
    return IndelToken(seq_pos=int(seq_pos), mdl_pos=int(mdl_pos), length=int(length), kind=kind)


def parse_indel_string(value: Optional[str], kind: IndelKind) -> List[IndelToken]:
    """Parse a ";"-joined token list; empty or BLASTNULL gives an empty list"""
    if value is None:
        return []
    value = value.strip()
    if not value or value == NULL_INDEL:
        return []
    # a trailing ";" is tolerated
    return [parse_indel_token(token, kind) for token in value.split(TOKEN_DELIMITER) if token]


def format_indel_string(tokens: Iterable[IndelToken]) -> str:
    """Join tokens with ";", BLASTNULL for none"""
    text = TOKEN_DELIMITER.join(str(token) for token in tokens)
    return text or NULL_INDEL
