"""
Core matching modules for guide-search.
"""

from .models import (
    PAM_SUFFIX,
    MatchRecord,
    SearchTarget,
    Strand,
)
from .scanner import (
    scan_sequence,
    scan_strand,
    to_forward_coordinates,
)
from .scoring import (
    passes_pam_gate,
    raw_mismatches,
    score_window,
)

__all__ = [
    # Models
    'PAM_SUFFIX',
    'Strand',
    'SearchTarget',
    'MatchRecord',
    # Scoring
    'passes_pam_gate',
    'raw_mismatches',
    'score_window',
    # Scanning
    'to_forward_coordinates',
    'scan_strand',
    'scan_sequence',
]
