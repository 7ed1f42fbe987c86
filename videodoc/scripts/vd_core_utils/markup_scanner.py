"""
Sequence block scanner for composition sources.

Finds balanced <Sequence ...>...</Sequence> regions in JSX/TSX text without a
parser: a single left-to-right pass with two states (normal / in-string) and a
depth counter. Quote characters ', " and ` open string literals; markers inside
string literals are ignored.

Malformed input never raises. An opening tag without '>' or a body that never
closes ends the scan and whatever was found before it is returned.
"""

from dataclasses import dataclass
from typing import List, Optional

QUOTE_CHARS = ("'", '"', "`")

DEFAULT_TAG = "Sequence"


@dataclass(frozen=True)
class SequenceBlock:
    """One <Sequence> region: raw attribute text and raw inner body."""
    attrs: str
    body: str
    start: int = 0  # offset of the body in the source
    end: int = 0    # offset of the closing marker in the source


def _is_tag_boundary(source: str, index: int) -> bool:
    # <Sequence must not be a prefix of a longer name like <SequenceList
    if index >= len(source):
        return True
    ch = source[index]
    return not (ch.isalnum() or ch in "_$.-")


def find_start_marker(source: str, pos: int, tag: str = DEFAULT_TAG) -> int:
    """Index of the next '<tag' at or after pos, or -1."""
    marker = "<" + tag
    while True:
        found = source.find(marker, pos)
        if found == -1:
            return -1
        if _is_tag_boundary(source, found + len(marker)):
            return found
        pos = found + len(marker)


def find_tag_end(source: str, pos: int) -> int:
    """
    Find the '>' that closes an opening tag, starting at pos.

    '>' inside a quoted attribute value is skipped. A quote with no closing
    partner is not a string, so scanning just moves past it.

    Returns:
        Index of the closing '>', or -1 if there is none
    """
    i = pos
    n = len(source)
    # quote chars with no later occurrence; searching again cannot succeed
    unpaired = set()
    while i < n:
        ch = source[i]
        if ch == ">":
            return i
        if ch in QUOTE_CHARS and ch not in unpaired:
            close = source.find(ch, i + 1)
            if close != -1:
                i = close + 1
                continue
            unpaired.add(ch)
        i += 1
    return -1


def _match_body_end(source: str, pos: int, tag: str) -> Optional[int]:
    """
    Scan a block body from pos and return the index of its closing marker.

    Returns None when the body never closes (depth never reaches zero or a
    string literal runs to the end of input).
    """
    start_marker = "<" + tag
    end_marker = "</" + tag + ">"
    depth = 1
    in_string = False
    quote_char = ""
    i = pos
    n = len(source)

    while i < n:
        ch = source[i]

        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == quote_char:
                in_string = False
                quote_char = ""
            i += 1
            continue

        if ch in QUOTE_CHARS:
            in_string = True
            quote_char = ch
            i += 1
            continue

        if source.startswith(start_marker, i) and _is_tag_boundary(source, i + len(start_marker)):
            tag_end = find_tag_end(source, i + len(start_marker))
            if tag_end == -1:
                return None
            # self-closing <Sequence ... /> has no body to balance
            if source[tag_end - 1] != "/":
                depth += 1
            i = tag_end + 1
            continue

        if source.startswith(end_marker, i):
            depth -= 1
            if depth == 0:
                return i
            i += len(end_marker)
            continue

        i += 1

    return None


def find_sequence_blocks(source: str, tag: str = DEFAULT_TAG) -> List[SequenceBlock]:
    """
    Extract top-level <tag>...</tag> blocks in document order.

    Nested blocks stay inside their parent's body; call again on a body to
    reach them.

    Args:
        source: Composition source text
        tag: Component name that marks a timed block

    Returns:
        List of SequenceBlock with attrs (text between the tag name and '>')
        and body (text between the opening tag and the matching end marker)
    """
    blocks: List[SequenceBlock] = []
    end_marker_len = len("</" + tag + ">")
    pos = 0

    while pos < len(source):
        open_start = find_start_marker(source, pos, tag)
        if open_start == -1:
            break

        after_tag = open_start + len(tag) + 1
        tag_end = find_tag_end(source, after_tag)
        if tag_end == -1:
            break

        raw_attrs = source[after_tag:tag_end]
        if raw_attrs.rstrip().endswith("/"):
            # <Sequence ... /> carries timing but no captions
            blocks.append(SequenceBlock(
                attrs=raw_attrs.rstrip()[:-1].strip(),
                body="",
                start=tag_end + 1,
                end=tag_end + 1,
            ))
            pos = tag_end + 1
            continue

        body_start = tag_end + 1
        body_end = _match_body_end(source, body_start, tag)
        if body_end is None:
            break

        blocks.append(SequenceBlock(
            attrs=raw_attrs.strip(),
            body=source[body_start:body_end],
            start=body_start,
            end=body_end,
        ))
        pos = body_end + end_marker_len

    return blocks
