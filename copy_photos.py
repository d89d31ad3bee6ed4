#!/usr/bin/env python3
"""
Photo Copier CLI

Copies photos from a source directory into a target directory, skipping
JPEGs whose RAW file exists and asking before existing files are overwritten.
"""

import logging
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import click
from colorama import init, Fore, Style
from tqdm import tqdm

from photo_copier import (
    CancelToken,
    Config,
    CopyExecutor,
    ExifReader,
    LocalFileSystem,
    PlanReporter,
    Planner,
    RunOptions,
)
from photo_copier.errors import (
    ConfigurationError,
    ErrorKind,
    OperationCancelled,
    user_message,
    wrap,
)
from photo_copier.utils import format_bytes, get_available_space, get_file_size

# Initialize colorama for cross-platform colored output
init()

EXIT_CANCELLED = 130

_console_handler: Optional[logging.Handler] = None
_file_handler: Optional[logging.Handler] = None

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = 'INFO', log_dir: Optional[Path] = None):
    """Set up logging configuration."""
    global _console_handler, _file_handler
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Replace handlers from a previous invocation in the same process
    if _console_handler is not None:
        root_logger.removeHandler(_console_handler)
    _console_handler = logging.StreamHandler(sys.stderr)
    _console_handler.setFormatter(formatter)
    root_logger.addHandler(_console_handler)

    if _file_handler is not None:
        root_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        _file_handler = logging.FileHandler(log_dir / 'photo_copier.log')
        _file_handler.setFormatter(formatter)
        root_logger.addHandler(_file_handler)

    # Reduce noise from libraries
    logging.getLogger('exifread').setLevel(logging.ERROR)


def print_success(message: str):
    """Print success message."""
    click.echo(f"{Fore.GREEN}OK: {message}{Style.RESET_ALL}")


def print_warning(message: str):
    """Print warning message."""
    click.echo(f"{Fore.YELLOW}WARN: {message}{Style.RESET_ALL}")


def print_error(message: str):
    """Print error message."""
    click.echo(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}", err=True)


def print_info(message: str):
    """Print info message."""
    click.echo(f"{Fore.BLUE}INFO: {message}{Style.RESET_ALL}")


def fail(err: BaseException):
    """Print a fatal error and exit with the matching status."""
    print_error(user_message(err))
    if isinstance(err, OperationCancelled):
        sys.exit(EXIT_CANCELLED)
    sys.exit(1)


@contextmanager
def progress_bar(desc: str):
    """Yield a progress callback drawing a tqdm bar."""
    with tqdm(total=0, desc=desc, unit="files", leave=False) as bar:
        def update(current: int, total: int, name: str = ""):
            bar.total = total
            bar.n = current
            if name:
                bar.set_postfix_str(name, refresh=False)
            bar.refresh()

        yield update


@contextmanager
def cancel_on_interrupt(token: CancelToken, interrupt: bool = False):
    """
    Turn Ctrl-C into a cancellation request for the running operation.

    Workers notice the token on their own. With interrupt=True the handler
    also raises OperationCancelled, for blocking calls such as prompts that
    never look at the token.
    """
    def handler(signum, frame):
        token.cancel()
        if interrupt:
            raise OperationCancelled(op="confirm")

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


@click.command()
@click.option('--source', '-s', envvar='PHOTO_COPIER_SOURCE_DIR',
              help='Source directory to copy from (env: PHOTO_COPIER_SOURCE_DIR)')
@click.option('--target', '-t', envvar='PHOTO_COPIER_TARGET_DIR',
              help='Target directory to copy to (env: PHOTO_COPIER_TARGET_DIR)')
@click.option('--dry-run', '-d', is_flag=True, help='Show the plan without copying')
@click.option('--verbose', '-v', is_flag=True, envvar='PHOTO_COPIER_VERBOSE',
              help='Verbose output (env: PHOTO_COPIER_VERBOSE)')
@click.option('--from', '-f', 'from_date',
              envvar=['PHOTO_COPIER_FROM', 'PHOTO_COPIER_START_DATE'],
              help='Start date YYYY-MM-DD (env: PHOTO_COPIER_FROM or PHOTO_COPIER_START_DATE)')
@click.option('--until', '-u', 'until_date',
              envvar=['PHOTO_COPIER_UNTIL', 'PHOTO_COPIER_END_DATE'],
              help='End date YYYY-MM-DD (env: PHOTO_COPIER_UNTIL or PHOTO_COPIER_END_DATE)')
@click.option('--allow-override', is_flag=True, envvar='PHOTO_COPIER_ALLOW_OVERRIDE',
              help='Offer to overwrite files that already exist in the target')
@click.option('--yes', '-y', is_flag=True, help='Accept overrides without asking')
@click.option('--workers', '-w', type=click.IntRange(1, 64), default=None,
              help='Number of metadata workers (default: CPU count)')
@click.option('--config', '-c', 'config_path', envvar='PHOTO_COPIER_CONFIG',
              help='Path to configuration file')
def cli(source, target, dry_run, verbose, from_date, until_date, allow_override, yes,
        workers, config_path):
    """Copy photos into a target directory, skipping JPEGs whose RAW file exists."""

    setup_logging('DEBUG' if verbose else 'WARNING')

    try:
        options = RunOptions.from_raw(source, target, from_date, until_date,
                                      dry_run=dry_run, allow_override=allow_override,
                                      verbose=verbose)
        config = Config(config_path)
    except ConfigurationError as e:
        fail(e)

    errors = config.validate_config()
    if errors:
        print_error("Configuration validation failed:")
        for error in errors:
            click.echo(f"  - {error}")
        sys.exit(1)

    log_dir = config.get_log_dir()
    setup_logging('DEBUG' if verbose else config.get_log_level(),
                  Path(log_dir) if log_dir else None)
    logger = logging.getLogger('copy_photos')
    logger.debug(f"Config: source={options.source_dir} target={options.target_dir} "
                 f"dry-run={options.dry_run} date-range={options.describe_range()}")

    filesystem = LocalFileSystem(verify_copies=config.should_verify_copies())

    try:
        filesystem.stat(options.source_dir)
    except OSError as e:
        fail(wrap(ErrorKind.NOT_FOUND, "stat", str(options.source_dir), e))

    token = CancelToken()
    with cancel_on_interrupt(token):
        run(options, config, filesystem, token, workers, yes)


def run(options: RunOptions, config: Config, filesystem: LocalFileSystem,
        token: CancelToken, workers: Optional[int], assume_yes: bool):
    """Plan, confirm and execute one copy run."""
    logger = logging.getLogger('copy_photos')

    try:
        with progress_bar("Reading metadata") as on_progress:
            planner = Planner(filesystem, ExifReader(),
                              workers=workers or config.get_worker_count(),
                              allow_override=options.allow_override,
                              on_progress=on_progress)
            plan = planner.plan(options.source_dir, options.target_dir,
                                options.start_date, options.end_date, token)
    except Exception as e:
        fail(wrap(ErrorKind.INTERNAL, "plan", str(options.source_dir), e))

    reporter = PlanReporter(verbose=options.verbose)

    if options.dry_run:
        logger.debug("Dry run: no files will be copied")
        print_info("DRY RUN - no files will be copied")
        click.echo(reporter.dry_run_report(plan))
        return

    if plan.is_empty:
        click.echo(reporter.execution_report(plan))
        print_info("Nothing to copy")
        return

    include_overrides = False
    overrides_confirmed = 0
    if plan.override_items:
        logger.debug(f"Override confirmation required for {len(plan.override_items)} files")
        try:
            with cancel_on_interrupt(token, interrupt=True):
                include_overrides = assume_yes or click.confirm(
                    f"Override {len(plan.override_items)} existing files?", default=False)
            token.raise_if_cancelled(op="confirm")
        except OperationCancelled as e:
            fail(e)
        if include_overrides:
            overrides_confirmed = len(plan.override_items)
        else:
            print_warning(f"Keeping {len(plan.override_items)} existing files")

    skipped_targets = set() if include_overrides else {
        item.target_path for item in plan.override_items
    }
    needed = sum(get_file_size(item.record.source_path)
                 for item in plan.items if item.target_path not in skipped_targets)
    needed += config.get_min_free_space_mb() * 1024 * 1024
    available = get_available_space(options.target_dir)
    if needed > available:
        print_error(f"Insufficient space in {options.target_dir}: "
                    f"need {format_bytes(needed)}, have {format_bytes(available)}")
        sys.exit(1)

    try:
        filesystem.ensure_dir(options.target_dir)
    except OSError as e:
        fail(wrap(ErrorKind.IO_FAILURE, "mkdir", str(options.target_dir), e))

    try:
        with progress_bar("Copying") as on_progress:
            executor = CopyExecutor(filesystem, on_progress=on_progress)
            copied = executor.execute(plan, include_overrides, token)
    except Exception as e:
        fail(wrap(ErrorKind.IO_FAILURE, "copy", str(options.target_dir), e))

    click.echo(reporter.execution_report(plan, overrides_confirmed))
    print_success(f"{copied} files copied to {options.target_dir}")


if __name__ == '__main__':
    cli()
