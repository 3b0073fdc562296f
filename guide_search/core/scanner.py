"""
Sliding-window scanning of one sequence strand.

Every offset is visited left to right; windows are gated on the PAM (when
enabled), scored, and yielded as MatchRecords in forward-strand coordinates.
"""

from typing import Iterator, Tuple

from ..utils.sequence import reverse_complement
from .models import MatchRecord, SearchTarget, Strand
from .scoring import passes_pam_gate, score_window


def to_forward_coordinates(
    offset: int,
    width: int,
    seq_len: int,
    strand: Strand,
) -> Tuple[int, int]:
    """
    Map a window offset on a strand to forward-strand (start, end).

    A window at offset i of the reverse complement covers forward positions
    [seq_len - (i + width), seq_len - i).
    """
    if strand is Strand.REVERSE:
        return seq_len - (offset + width), seq_len - offset
    return offset, offset + width


def scan_strand(
    content: str,
    target: SearchTarget,
    max_mismatches: int,
    strand: Strand,
    seq_name: str,
    seq_len: int,
) -> Iterator[MatchRecord]:
    """
    Yield a MatchRecord for every window of `content` within max_mismatches.

    Args:
        content: Strand content (the reverse complement for Strand.REVERSE)
        target: Search target
        max_mismatches: Largest score still reported (inclusive)
        strand: Strand tag of `content`
        seq_name: Name of the source sequence
        seq_len: Length of the source sequence, used for coordinate mapping

    Yields:
        MatchRecord objects in ascending window offset
    """
    width = target.width
    pam = target.pam

    for offset in range(len(content) - width + 1):
        window = content[offset:offset + width]

        if pam and not passes_pam_gate(window):
            continue

        mismatches = score_window(window, target)
        if mismatches > max_mismatches:
            continue

        start, end = to_forward_coordinates(offset, width, seq_len, strand)
        yield MatchRecord(
            seq_name=seq_name,
            strand=strand,
            start=start,
            end=end,
            sequence=window,
            mismatches=mismatches,
        )


def scan_sequence(
    seq_name: str,
    content: str,
    target: SearchTarget,
    max_mismatches: int,
    both_strands: bool = True,
) -> Iterator[MatchRecord]:
    """Scan the forward strand, then (optionally) the reverse complement."""
    seq_len = len(content)

    yield from scan_strand(content, target, max_mismatches, Strand.FORWARD, seq_name, seq_len)

    if both_strands:
        rc_content = reverse_complement(content)
        yield from scan_strand(rc_content, target, max_mismatches, Strand.REVERSE, seq_name, seq_len)
