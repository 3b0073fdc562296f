"""
Window scoring against a search target.

A window is scored by Hamming distance against the effective target. In PAM
mode the target ends in the literal "NGG" and the wildcard column is
excluded from the reported score.
"""

from ..exceptions import LengthMismatch
from ..utils.sequence import hamming_distance
from .models import PAM_SUFFIX, SearchTarget

# Fixed (non-wildcard) part of the PAM that every candidate window must end with
PAM_ANCHOR = PAM_SUFFIX[1:]


def passes_pam_gate(window: str) -> bool:
    """True if the window ends in the literal GG of an NGG PAM."""
    return window.endswith(PAM_ANCHOR)


def raw_mismatches(window: str, target: SearchTarget) -> int:
    """Hamming distance between window and the effective target sequence."""
    return hamming_distance(window, target.sequence)


def score_window(window: str, target: SearchTarget) -> int:
    """
    Score a window against the target.

    Args:
        window: Candidate window, same length as target.width
        target: Search target (guide, optionally PAM-extended)

    Returns:
        Mismatch count. In PAM mode this is the raw count minus the one
        mismatch the 'N' wildcard contributes against any real base. If the
        window itself holds 'N' at that position the wildcard contributed
        nothing and no correction is applied, so the score is never negative.

    Raises:
        LengthMismatch: if window and target differ in length
    """
    if len(window) != target.width:
        raise LengthMismatch(
            f"Window length {len(window)} does not match target width {target.width}"
        )

    raw = raw_mismatches(window, target)
    if not target.pam:
        return raw

    wildcard = target.pam_wildcard_index
    if window[wildcard] != target.sequence[wildcard]:
        return raw - 1
    return raw
