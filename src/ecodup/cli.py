import argparse
import datetime
import logging
import sys
import textwrap
import tomllib
from pathlib import Path

from .errors import EcodupError
from .finder import run_finder, validate_arguments
from .report.path import get_report_directory_path, relative_to_root
from .report.store import ReportManifest, ReportStore
from .report.table import print_result
from .settings import (Settings, SETTING_EXTENSIONS, SETTING_HASH_ALGORITHM, SETTING_LOG_LEVEL, SETTING_LOG_PATH,
                       SETTING_N_CORES, SETTING_ON_UNREADABLE, SETTING_SIZE_THRESHOLD)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(args, settings: Settings) -> bool:
    """Send log records to a file named on the command line or in the settings.

    Returns:
        True if logging was configured, False otherwise
    """
    log_file = args.log_file or settings.get(SETTING_LOG_PATH)
    if not log_file:
        return False

    log_level = args.log_level or settings.get(SETTING_LOG_LEVEL) or 'INFO'
    logging.basicConfig(
        filename=str(log_file),
        level=getattr(logging, str(log_level).upper()),
        format=LOG_FORMAT
    )
    return True


def ecodup_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog='ecodup',
        description='Find duplicated files and directories by content hash.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              ecodup scan /data/survey
              ecodup scan /data/survey --extensions tif nc --size-threshold 10
              ecodup show /data/survey.dups
            ''').strip()
    )
    parser.add_argument(
        '--config',
        metavar='PATH',
        help='Path to a TOML settings file. If not provided, uses the ECODUP_CONFIG environment variable or no '
             'settings.')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file for operation logging. If not provided, uses logging.path from the settings or no '
             'logging.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO when logging to a file.')
    subparsers = parser.add_subparsers(
        dest='command',
        required=True,
        title='Commands',
        description='Available commands',
        help='Use "ecodup COMMAND --help" for command-specific help'
    )

    parser_scan = subparsers.add_parser(
        'scan',
        help='Scan a directory tree for duplicated files and directories',
        description='Hashes every file below PATH and reports groups of identical files and directories holding '
                    'identical sets of files. Nothing is modified.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              ecodup scan /data/survey --n-cores 4
              ecodup scan /data/survey --report
              ecodup scan /data/survey --report /tmp/survey-report --quiet

            With --report and no directory, the report is written next to PATH:
              /data/survey.dups/
            ''').strip())
    parser_scan.add_argument(
        'path',
        metavar='PATH',
        help='Root directory to scan')
    parser_scan.add_argument(
        '--size-threshold',
        type=float,
        metavar='MB',
        help='Minimum file size in MB of reported duplicate file groups (default: 0, report all)')
    parser_scan.add_argument(
        '--extensions',
        nargs='+',
        metavar='EXT',
        help='Only consider files with these extensions (without leading dot, case-insensitive). Disables '
             'duplicated directory detection.')
    parser_scan.add_argument(
        '--n-cores',
        type=int,
        metavar='N',
        help='Number of worker processes used for hashing (default: 1)')
    parser_scan.add_argument(
        '--hash',
        dest='hash_algorithm',
        choices=['md5', 'sha256', 'mmh3'],
        help='Content hash algorithm (default: md5)')
    parser_scan.add_argument(
        '--skip-unreadable',
        action='store_true',
        help='Skip files that cannot be read instead of aborting the scan')
    parser_scan.add_argument(
        '--quiet',
        action='store_true',
        help='Do not print the result tables')
    parser_scan.add_argument(
        '--report',
        nargs='?',
        const='',
        metavar='DIR',
        help='Save the result as a report directory (default location: PATH.dups)')
    parser_scan.set_defaults(method=_scan)

    parser_show = subparsers.add_parser(
        'show',
        help='Print a saved report',
        description='Prints the duplicate tables stored in a report directory written by "ecodup scan --report".')
    parser_show.add_argument(
        'report',
        metavar='REPORT_DIR',
        help='Report directory')
    parser_show.set_defaults(method=_show)

    args = parser.parse_args(argv)

    try:
        settings = Settings.locate(args.config)
        configure_logging(args, settings)
        return args.method(settings, args)
    except (EcodupError, OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _scan(settings: Settings, args) -> int:
    report_dir = None
    if args.report is not None:
        report_dir = Path(args.report) if args.report else get_report_directory_path(Path(args.path))

    exclude = []
    if report_dir is not None:
        inside = relative_to_root(report_dir, Path(args.path))
        if inside is not None:
            exclude.append(inside)

    on_unreadable = 'skip' if args.skip_unreadable else settings.get(SETTING_ON_UNREADABLE, 'abort')
    finder_args = validate_arguments(
        args.path,
        size_threshold=_pick(args.size_threshold, settings.get(SETTING_SIZE_THRESHOLD, 0)),
        extensions=_pick(args.extensions, settings.get(SETTING_EXTENSIONS)),
        n_cores=_pick(args.n_cores, settings.get(SETTING_N_CORES, 1)),
        hash_algorithm=_pick(args.hash_algorithm, settings.get(SETTING_HASH_ALGORITHM, 'md5')),
        on_unreadable=on_unreadable,
        exclude=exclude)

    result = run_finder(finder_args)

    if not args.quiet:
        if result.is_empty():
            print(f"No duplicates found under {finder_args.root}")
        else:
            print_result(result)

    if report_dir is not None:
        store = ReportStore(report_dir)
        store.create_report_directory()
        store.open_database(create_if_missing=True)
        try:
            store.write_result(result)
        finally:
            store.close_database()
        store.write_manifest(ReportManifest(
            root=str(finder_args.root),
            timestamp=datetime.datetime.now(datetime.UTC).isoformat(),
            hash_algorithm=str(finder_args.hash_algorithm),
            size_threshold=finder_args.size_threshold,
            extensions=sorted(finder_args.extensions),
            file_groups=len(result.duplicated_files or []),
            duplicated_dirs=len(result.duplicated_dirs or []),
            unreadable=[str(path) for path in result.unreadable]))
        if not args.quiet:
            print(f"Report written to {report_dir}")

    return 0


def _show(settings: Settings, args) -> int:
    store = ReportStore(Path(args.report))
    manifest = store.read_manifest()
    with store:
        result = store.read_result()

    print(f"Root: {manifest.root}")
    print(f"Scanned: {manifest.timestamp}")
    print(f"Hash: {manifest.hash_algorithm}")
    if manifest.extensions:
        print(f"Extensions: {', '.join(manifest.extensions)}")
    if result.is_empty():
        print("No duplicates found")
    else:
        print_result(result)
    return 0


def _pick(value, default):
    return default if value is None else value


def main():
    sys.exit(ecodup_main())


if __name__ == '__main__':
    main()
