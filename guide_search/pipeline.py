"""
Main search orchestration for guide-search.

Sequences are scanned one at a time (threads == 1) or as independent tasks
on a process pool. In both cases the parent process is the only writer.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, IO, List, Tuple

from .config import SearchConfig
from .core.models import MatchRecord, SearchTarget, Strand
from .core.scanner import scan_sequence
from .exceptions import IndexLoadError
from .io.length_index import load_length_index
from .io.output import MatchWriter
from .io.reader import FastaSequenceReader
from .utils.sequence import gc_content

logger = logging.getLogger(__name__)

ReaderFactory = Callable[[Path], FastaSequenceReader]


@dataclass
class SequenceTask:
    """Everything a worker needs to scan one sequence."""
    fasta: Path
    seq_name: str
    length: int
    target: SearchTarget
    max_mismatches: int
    both_strands: bool
    reader_factory: ReaderFactory = FastaSequenceReader


def _scan_sequence_worker(task: SequenceTask) -> Tuple[str, List[MatchRecord]]:
    """
    Worker function for parallel scanning.

    Module-level so it pickles for ProcessPoolExecutor. Opens a private
    reader handle for the duration of the task.
    """
    with task.reader_factory(task.fasta) as reader:
        content = reader.fetch_full_sequence(task.seq_name, task.length)

    records = list(scan_sequence(
        task.seq_name, content, task.target, task.max_mismatches, task.both_strands
    ))
    return task.seq_name, records


@dataclass
class SearchSummary:
    """Counts collected over one run."""
    sequences_total: int = 0
    sequences_scanned: int = 0
    sequences_skipped: int = 0
    forward_matches: int = 0
    reverse_matches: int = 0

    @property
    def total_matches(self) -> int:
        return self.forward_matches + self.reverse_matches

    def add(self, record: MatchRecord):
        if record.strand is Strand.FORWARD:
            self.forward_matches += 1
        else:
            self.reverse_matches += 1


class SearchPipeline:
    """Scan every selected sequence of a FASTA and stream matches to a writer."""

    def __init__(self, config: SearchConfig, reader_factory: ReaderFactory = FastaSequenceReader):
        self.config = config.validate()
        self.target = config.target
        self.reader_factory = reader_factory

    def select_sequences(
        self,
        reader: FastaSequenceReader,
        lengths: Dict[str, int],
        summary: SearchSummary,
    ) -> List[Tuple[str, int]]:
        """
        Resolve (name, length) for every sequence passing the prefix filter,
        in file order.
        """
        prefix = self.config.prefix
        selected = []

        for idx in range(reader.sequence_count()):
            name = reader.sequence_name(idx)
            summary.sequences_total += 1

            if prefix and not name.startswith(prefix):
                summary.sequences_skipped += 1
                logger.debug(f"Skipping {name} (prefix '{prefix}')")
                continue

            if name not in lengths:
                raise IndexLoadError(f"Sequence {name} is missing from the length index")
            selected.append((name, lengths[name]))

        return selected

    def run(self, writer: MatchWriter) -> SearchSummary:
        """
        Run the full search.

        The length index is loaded and the FASTA opened before the header is
        written, so index and open failures produce no output at all.

        Args:
            writer: Sink for the report

        Returns:
            SearchSummary for the run
        """
        config = self.config
        summary = SearchSummary()

        logger.info(
            f"Searching {config.fasta} for {self.target.sequence} "
            f"(len {self.target.width}, GC {gc_content(self.target.guide):.0%}), "
            f"max mismatches {config.max_mismatches}, "
            f"PAM {'on' if config.pam else 'off'}, "
            f"strands {'both' if config.both_strands else 'forward'}"
        )

        lengths = load_length_index(config.fasta)
        n_workers = config.n_workers

        with self.reader_factory(config.fasta) as reader:
            selected = self.select_sequences(reader, lengths, summary)
            logger.info(
                f"{len(selected)} of {summary.sequences_total} sequences selected"
                + (f" with prefix '{config.prefix}'" if config.prefix else "")
            )

            writer.write_header()

            if n_workers == 1 or len(selected) <= 1:
                self._run_serial(reader, selected, writer, summary)

        if n_workers > 1 and len(selected) > 1:
            self._run_parallel(selected, writer, summary, n_workers)

        writer.flush()
        logger.info(
            f"Scanned {summary.sequences_scanned} sequences: "
            f"{summary.total_matches} matches "
            f"({summary.forward_matches} forward, {summary.reverse_matches} reverse)"
        )
        return summary

    def _run_serial(
        self,
        reader: FastaSequenceReader,
        selected: List[Tuple[str, int]],
        writer: MatchWriter,
        summary: SearchSummary,
    ):
        """Scan sequences in file order, streaming each match as it is found."""
        config = self.config

        for name, length in selected:
            content = reader.fetch_full_sequence(name, length)
            n_matches = 0
            for record in scan_sequence(name, content, self.target,
                                        config.max_mismatches, config.both_strands):
                writer.write_record(record)
                summary.add(record)
                n_matches += 1

            summary.sequences_scanned += 1
            logger.info(f"{name}: {n_matches} matches ({length:,} bp)")

    def _run_parallel(
        self,
        selected: List[Tuple[str, int]],
        writer: MatchWriter,
        summary: SearchSummary,
        n_workers: int,
    ):
        """Scan sequences on a process pool; rows of different sequences may interleave."""
        config = self.config
        tasks = [
            SequenceTask(
                fasta=config.fasta,
                seq_name=name,
                length=length,
                target=self.target,
                max_mismatches=config.max_mismatches,
                both_strands=config.both_strands,
                reader_factory=self.reader_factory,
            )
            for name, length in selected
        ]

        logger.info(f"Scanning {len(tasks)} sequences using {n_workers} workers...")

        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            future_to_name = {
                executor.submit(_scan_sequence_worker, task): task.seq_name
                for task in tasks
            }

            for future in as_completed(future_to_name):
                name = future_to_name[future]
                try:
                    _, records = future.result()
                except Exception as e:
                    logger.error(f"{name}: scan failed: {e}")
                    for pending in future_to_name:
                        pending.cancel()
                    raise

                writer.write_records(records)
                for record in records:
                    summary.add(record)
                summary.sequences_scanned += 1
                logger.info(
                    f"{name}: {len(records)} matches "
                    f"({summary.sequences_scanned}/{len(tasks)} sequences done)"
                )


def run_search(config: SearchConfig, stream: IO[str],
               reader_factory: ReaderFactory = FastaSequenceReader) -> SearchSummary:
    """Convenience wrapper: run a search and write the report to `stream`."""
    writer = MatchWriter(stream, pam=config.pam, both_strands=config.both_strands)
    return SearchPipeline(config, reader_factory=reader_factory).run(writer)
