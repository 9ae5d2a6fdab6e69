"""
Diff Presentation.

Computes an edit script between two text snapshots for display, built on
diff-match-patch. Pure functions only: nothing here reads or writes notes.

Two granularities:
    char - diff_main on the raw text, then semantic cleanup
    word - the text is split into whitespace / non-whitespace tokens, each
           token is mapped to a single character, the encoded strings are
           diffed and decoded back (the library's line-mode technique
           applied to words)

Either way the output is lossless: equal+delete segments rebuild the old
text and equal+insert segments rebuild the new text.

Without a timeout the script for a given pair is always the same, but the
work grows quadratically with the text length. With a timeout, large and
dissimilar inputs may come back as a coarser script (bigger delete/insert
blocks) that is still lossless; small inputs finish long before the
deadline and are unaffected.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from diff_match_patch import diff_match_patch

Granularity = Literal["char", "word"]

_TOKEN_RE = re.compile(r"\s+|\S+")


class DiffKind(str, Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


_OP_TO_KIND = {
    diff_match_patch.DIFF_EQUAL: DiffKind.EQUAL,
    diff_match_patch.DIFF_INSERT: DiffKind.INSERT,
    diff_match_patch.DIFF_DELETE: DiffKind.DELETE,
}


@dataclass(frozen=True)
class DiffSegment:
    kind: DiffKind
    text: str


@dataclass(frozen=True)
class DiffStats:
    inserted_chars: int
    deleted_chars: int
    unchanged_chars: int


def _new_engine(timeout: float) -> diff_match_patch:
    dmp = diff_match_patch()
    # 0 means no deadline
    dmp.Diff_Timeout = timeout
    return dmp


def _encode_words(
    old_text: str, new_text: str,
) -> tuple[str, str, list[str]]:
    """Map every distinct token to one character; index 0 is unused."""
    token_array: list[str] = [""]
    token_hash: dict[str, int] = {}

    def encode(text: str) -> str:
        chars = []
        for token in _TOKEN_RE.findall(text):
            if token not in token_hash:
                token_array.append(token)
                token_hash[token] = len(token_array) - 1
            chars.append(chr(token_hash[token]))
        return "".join(chars)

    return encode(old_text), encode(new_text), token_array


def _merge(diffs: list[tuple[int, str]]) -> list[DiffSegment]:
    segments: list[DiffSegment] = []
    for op, text in diffs:
        if not text:
            continue
        kind = _OP_TO_KIND[op]
        if segments and segments[-1].kind is kind:
            segments[-1] = DiffSegment(kind, segments[-1].text + text)
        else:
            segments.append(DiffSegment(kind, text))
    return segments


def diff_texts(
    old_text: str,
    new_text: str,
    granularity: Granularity = "char",
    timeout: float = 0,
) -> list[DiffSegment]:
    """
    Diff two snapshots into ordered equal/insert/delete segments.

    Args:
        old_text: Earlier snapshot
        new_text: Later snapshot
        granularity: "char" or "word"
        timeout: Seconds before diff-match-patch stops refining and returns
            a coarser script; 0 disables the deadline

    Returns:
        Segments in display order; adjacent segments never share a kind
    """
    dmp = _new_engine(timeout)

    if granularity == "word":
        old_chars, new_chars, token_array = _encode_words(old_text, new_text)
        diffs = dmp.diff_main(old_chars, new_chars, False)
        dmp.diff_charsToLines(diffs, token_array)
        dmp.diff_cleanupSemantic(diffs)
    elif granularity == "char":
        diffs = dmp.diff_main(old_text, new_text)
        dmp.diff_cleanupSemantic(diffs)
    else:
        raise ValueError(f"Unknown diff granularity: {granularity!r}")

    return _merge(diffs)


def reconstruct(segments: list[DiffSegment]) -> tuple[str, str]:
    """Rebuild (old_text, new_text) from a segment list."""
    old_parts = [s.text for s in segments if s.kind is not DiffKind.INSERT]
    new_parts = [s.text for s in segments if s.kind is not DiffKind.DELETE]
    return "".join(old_parts), "".join(new_parts)


def summarize(segments: list[DiffSegment]) -> DiffStats:
    """Character counts per segment kind."""
    counts = {kind: 0 for kind in DiffKind}
    for segment in segments:
        counts[segment.kind] += len(segment.text)
    return DiffStats(
        inserted_chars=counts[DiffKind.INSERT],
        deleted_chars=counts[DiffKind.DELETE],
        unchanged_chars=counts[DiffKind.EQUAL],
    )
