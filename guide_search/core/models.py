"""
Data models for guide-search.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

PAM_SUFFIX = "NGG"


class Strand(Enum):
    """Orientation a match was found on."""
    FORWARD = '+'
    REVERSE = '-'


@dataclass(frozen=True)
class SearchTarget:
    """
    The query pattern a genome is scanned for.

    Attributes:
        guide: Guide sequence without PAM (uppercase A/C/G/T)
        pam: If True, windows must also carry a 3' NGG PAM
    """
    guide: str
    pam: bool = False

    @property
    def sequence(self) -> str:
        """Effective target compared against each window."""
        return self.guide + PAM_SUFFIX if self.pam else self.guide

    @property
    def width(self) -> int:
        """Length of every scanned window."""
        return len(self.guide) + (len(PAM_SUFFIX) if self.pam else 0)

    @property
    def pam_wildcard_index(self) -> Optional[int]:
        """Position of the PAM 'N' within the effective target, if any."""
        return len(self.guide) if self.pam else None


@dataclass(frozen=True)
class MatchRecord:
    """
    One qualifying window.

    Coordinates are 0-based, half-open and always on the forward strand,
    whichever strand produced the match. `sequence` is the window text as
    read on `strand`.
    """
    seq_name: str
    strand: Strand
    start: int
    end: int
    sequence: str
    mismatches: int

    def __repr__(self) -> str:
        return (f"MatchRecord({self.seq_name}:{self.start}-{self.end}"
                f"({self.strand.value}), mm={self.mismatches})")
