"""
Sequence manipulation utilities.

Provides the DNA string operations shared by the scanner and the CLI.
"""

import re

from ..exceptions import LengthMismatch

# Anything outside ACGT (either case) becomes N
_COMPLEMENT = str.maketrans('ACGTacgt', 'TGCAtgca')
_NON_ACGT = re.compile(r'[^ACGTacgt]')

GUIDE_PATTERN = re.compile(r'^[ACGT]+$')


def reverse_complement(seq: str) -> str:
    """Return reverse complement of DNA sequence.

    Case is preserved for A/C/G/T; every other character maps to 'N'.
    """
    return _NON_ACGT.sub('N', seq).translate(_COMPLEMENT)[::-1]


def hamming_distance(seq1: str, seq2: str) -> int:
    """Count mismatches between two equal-length sequences.

    Characters are compared exactly (no case folding).

    Raises LengthMismatch if sequences have different lengths.
    """
    if len(seq1) != len(seq2):
        raise LengthMismatch(f"Sequences must be equal length: {len(seq1)} vs {len(seq2)}")
    return sum(a != b for a, b in zip(seq1, seq2))


def is_guide_sequence(s: str) -> bool:
    """Check if string is a plain ACGT guide (case-insensitive)."""
    return bool(GUIDE_PATTERN.match(s.upper()))


def gc_content(seq: str) -> float:
    """Calculate GC content of a sequence (0.0 to 1.0)."""
    seq = seq.upper()
    gc = sum(1 for base in seq if base in 'GC')
    total = sum(1 for base in seq if base in 'ACGT')
    return gc / total if total > 0 else 0.0
