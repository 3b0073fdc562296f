"""
Command-line interface for guide-search.

Approximate (Hamming distance) search of a guide sequence across every
sequence of an indexed pangenome FASTA, on both strands.
"""

import logging
import os
import sys
import tempfile
from pathlib import Path

import click

from . import __version__
from .config import CONFIG_TEMPLATE, DEFAULT_MAX_MISMATCHES, SearchConfig
from .exceptions import GuideSearchError


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


@click.group()
@click.version_option(version=__version__)
def cli():
    """guide-search: mismatch-tolerant guide search across a pangenome."""
    pass


@cli.command()
@click.option('--fasta', '-f', type=click.Path(),
              help='Indexed reference FASTA (expects <fasta>.fai)')
@click.option('--sequence', '-s', type=str,
              help='Target sequence to search for (without PAM)')
@click.option('--prefix', '-p', type=str, default=None,
              help='Only search sequences whose names start with this prefix (default: all)')
@click.option('--distance', '-d', type=int, default=None,
              help=f'Maximum number of mismatches (default: {DEFAULT_MAX_MISMATCHES})')
@click.option('--threads', '-t', type=int, default=None,
              help='Worker processes, 0 = all CPUs (default: 0)')
@click.option('--pam/--no-pam', default=None,
              help='Require a 3\' NGG PAM after the target (default: off)')
@click.option('--both-strands/--forward-only', default=None,
              help='Scan the reverse complement too (default: both strands)')
@click.option('--output', '-o', type=click.Path(), default='-',
              help='Output TSV file (default: stdout)')
@click.option('--config', '-c', type=click.Path(exists=True),
              help='YAML config file; command-line options override it')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def search(fasta, sequence, prefix, distance, threads, pam, both_strands,
           output, config, verbose):
    """
    Search a FASTA for all windows within DISTANCE mismatches of SEQUENCE.

    Both strands are scanned; coordinates are 0-based half-open on the
    forward strand. With --pam, only windows followed by NGG are reported and
    the PAM wildcard does not count as a mismatch.

    With -o FILE the report only appears once the whole scan succeeds. When
    writing to stdout, rows already printed before an error remain in the
    stream; check the exit status.

    \b
    Example:
      guide-search search -f hprc.fa -s GCTGAAGCACTGCACGCCGT -d 4 --pam \\
                          -p HG002 -t 16 -o hits.tsv
    """
    from .pipeline import run_search

    _setup_logging(verbose)

    overrides = {
        'fasta': fasta,
        'sequence': sequence,
        'prefix': prefix,
        'max_mismatches': distance,
        'threads': threads,
        'pam': pam,
        'both_strands': both_strands,
    }

    try:
        if config:
            search_config = SearchConfig.from_yaml(Path(config), overrides=overrides)
        else:
            if not fasta or not sequence:
                click.echo("Error: --fasta and --sequence are required (or use --config)", err=True)
                sys.exit(1)
            search_config = SearchConfig(**{k: v for k, v in overrides.items() if v is not None})
        search_config.validate()
    except GuideSearchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        if output == '-':
            summary = run_search(search_config, sys.stdout)
        else:
            summary = _search_to_file(search_config, Path(output))
    except GuideSearchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(
        f"Found {summary.total_matches} matches in "
        f"{summary.sequences_scanned} sequences", err=True
    )


def _current_umask() -> int:
    """Process umask (mkstemp creates files 0600 regardless of it)."""
    umask = os.umask(0)
    os.umask(umask)
    return umask


def _search_to_file(search_config: SearchConfig, output_path: Path):
    """Write the report to a temporary file and move it into place on success."""
    from .pipeline import run_search

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{output_path.name}.", suffix='.partial', dir=output_path.parent
    )
    try:
        with os.fdopen(fd, 'w') as f:
            summary = run_search(search_config, f)
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, output_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logging.getLogger(__name__).info(f"Results written to: {output_path}")
    return summary


@cli.command()
@click.option('--fasta', '-f', type=click.Path(exists=True), required=True,
              help='Indexed reference FASTA')
@click.option('--prefix', '-p', type=str, default='',
              help='Only list sequences whose names start with this prefix')
def info(fasta, prefix):
    """List the sequences (and lengths) a search would scan."""
    from .io.length_index import load_length_index

    try:
        lengths = load_length_index(fasta)
    except GuideSearchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    selected = {name: length for name, length in lengths.items()
                if not prefix or name.startswith(prefix)}

    for name, length in selected.items():
        click.echo(f"{name}\t{length}")

    total_bp = sum(selected.values())
    click.echo(f"{len(selected)} of {len(lengths)} sequences, {total_bp:,} bp", err=True)


@cli.command()
@click.argument('report', type=click.Path(exists=True))
@click.option('--output', '-o', type=click.Path(),
              help='Write the summary TSV here instead of stdout')
def summarize(report, output):
    """Count matches per sequence, strand and mismatch value in a REPORT."""
    from .io.output import summarize_matches

    summary = summarize_matches(Path(report))

    if output:
        summary.to_csv(output, sep='\t', index=False)
        click.echo(f"Summary written to: {output}", err=True)
    else:
        click.echo(summary.to_csv(sep='\t', index=False), nl=False)


@cli.command()
@click.option('--output', '-o', type=click.Path(), default='search_config.yaml',
              help='Output config file path')
def init(output):
    """Generate a template configuration file."""
    with open(output, 'w') as f:
        f.write(CONFIG_TEMPLATE.format(path=output))

    click.echo(f"Generated configuration template: {output}")
    click.echo("\nEdit this file and run:")
    click.echo(f"  guide-search search --config {output}")


if __name__ == '__main__':
    cli()
