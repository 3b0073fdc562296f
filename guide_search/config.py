"""
Search configuration for guide-search.

Parameters come from CLI flags, a YAML file, or both (flags win).
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .core.models import SearchTarget
from .exceptions import ConfigError
from .utils.sequence import is_guide_sequence

DEFAULT_MAX_MISMATCHES = 6


def default_threads() -> int:
    """Host parallelism available to this process, used when threads is 0."""
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


@dataclass
class SearchConfig:
    """
    Parameters of one genome scan.

    Attributes:
        fasta: Path to the indexed reference FASTA (expects <fasta>.fai)
        sequence: Target pattern, without PAM
        prefix: Only scan sequences whose name starts with this ('' = all)
        max_mismatches: Maximum Hamming distance reported (inclusive)
        threads: Worker processes; 0 selects the host CPU count
        pam: Require a 3' NGG PAM and exclude its wildcard from the score
        both_strands: Also scan the reverse complement
    """
    fasta: Path
    sequence: str
    prefix: str = ""
    max_mismatches: int = DEFAULT_MAX_MISMATCHES
    threads: int = 0
    pam: bool = False
    both_strands: bool = True

    def __post_init__(self):
        if isinstance(self.fasta, str):
            self.fasta = Path(self.fasta)

    def validate(self) -> 'SearchConfig':
        """Check parameters; raises ConfigError on the first problem."""
        if not isinstance(self.fasta, Path) or not str(self.fasta):
            raise ConfigError("A reference FASTA path is required")

        if not isinstance(self.sequence, str):
            raise ConfigError(f"Target sequence must be a string, got {self.sequence!r}")
        if not isinstance(self.prefix, str):
            raise ConfigError(f"Prefix must be a string, got {self.prefix!r}")
        for name in ("max_mismatches", "threads"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        for name in ("pam", "both_strands"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false, got {getattr(self, name)!r}")

        guide = self.sequence.strip()
        if not guide:
            raise ConfigError("Target sequence must not be empty")
        if not is_guide_sequence(guide):
            raise ConfigError(f"Target sequence must contain only A/C/G/T: {self.sequence}")

        if self.max_mismatches < 0:
            raise ConfigError(f"Maximum mismatches must be non-negative, got {self.max_mismatches}")
        if self.threads < 0:
            raise ConfigError(f"Threads must be non-negative (0 = all CPUs), got {self.threads}")

        return self

    @property
    def target(self) -> SearchTarget:
        """Search target built from the (uppercased) sequence and PAM flag."""
        return SearchTarget(guide=self.sequence.strip().upper(), pam=self.pam)

    @property
    def n_workers(self) -> int:
        """Resolved worker count."""
        return self.threads if self.threads > 0 else default_threads()

    @classmethod
    def from_yaml(cls, path: Path, overrides: Optional[Dict[str, Any]] = None) -> 'SearchConfig':
        """
        Load configuration from YAML file.

        Keys match the attribute names; 'distance' is accepted as an alias
        for max_mismatches. Non-None entries in `overrides` replace file values.
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        if 'distance' in data:
            data.setdefault('max_mismatches', data.pop('distance'))

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

        if overrides:
            data.update({k: v for k, v in overrides.items() if v is not None})

        missing = [name for name in ('fasta', 'sequence') if not data.get(name)]
        if missing:
            raise ConfigError(f"Missing required config keys: {', '.join(missing)}")

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fasta': str(self.fasta),
            'sequence': self.sequence,
            'prefix': self.prefix,
            'distance': self.max_mismatches,
            'threads': self.threads,
            'pam': self.pam,
            'both_strands': self.both_strands,
        }


CONFIG_TEMPLATE = '''# guide-search configuration template
# Edit this file and run: guide-search search --config {path}

# Required: indexed reference FASTA (samtools faidx creates <fasta>.fai)
fasta: pangenome.fa

# Required: target sequence, without PAM
sequence: GCTGAAGCACTGCACGCCGT

# Only scan sequences whose names start with this prefix ("" = all)
prefix: ""

# Maximum number of mismatches (Hamming distance)
distance: 6

# Worker processes (0 = all CPUs)
threads: 0

# Require a 3' NGG PAM (SpCas9)
pam: false

# Scan the reverse complement too
both_strands: true
'''
