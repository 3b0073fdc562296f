"""
guide-search - mismatch-tolerant CRISPR guide search across pangenomes.
"""

__version__ = "0.1.0"

from .config import SearchConfig
from .core.models import MatchRecord, SearchTarget, Strand
from .exceptions import (
    ConfigError,
    GuideSearchError,
    IndexLoadError,
    LengthMismatch,
    ReaderError,
)

__all__ = [
    "SearchConfig",
    "SearchTarget",
    "MatchRecord",
    "Strand",
    "GuideSearchError",
    "ConfigError",
    "IndexLoadError",
    "ReaderError",
    "LengthMismatch",
    "__version__",
]
