"""
Error types raised by guide-search.

Configuration and input problems are reported before any scanning starts;
reader and index failures abort the whole run.
"""


class GuideSearchError(Exception):
    """Base class for all guide-search errors."""


class ConfigError(GuideSearchError, ValueError):
    """Missing or invalid search parameter (empty target, negative distance, ...)."""


class IndexLoadError(GuideSearchError):
    """The FASTA length index (.fai) is missing, unreadable or malformed."""


class ReaderError(GuideSearchError, IOError):
    """The FASTA file could not be opened or a sequence could not be fetched."""


class LengthMismatch(GuideSearchError, ValueError):
    """A window and the target it is compared against differ in length.

    Window enumeration guarantees equal lengths, so this signals a bug
    rather than bad input.
    """
