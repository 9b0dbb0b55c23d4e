"""Console rendering of scan results."""

from typing import Any, Sequence, TextIO

from .records import DuplicateDirectory, DuplicateFileGroup, DuplicateScanResult

HEADER_RULE = '-' * 32
FILE_GROUP_LIMIT = 50


def format_size_mb(size_mb: float) -> str:
    """Format a size given in MB, switching to GB above 1024 MB."""
    if size_mb >= 1024:
        return f"{size_mb / 1024:.2f} GB"
    return f"{size_mb:.2f} MB"


def print_header(title: str, file: TextIO | None = None) -> None:
    print(file=file)
    print(HEADER_RULE, file=file)
    print(f"  >>  {title}", file=file)
    print(HEADER_RULE, file=file)
    print(file=file)


def print_table(columns: Sequence[tuple[str, bool]], rows: Sequence[Sequence[Any]], file: TextIO | None = None) -> None:
    """Print rows under a header line, padding every column to its widest value.

    Args:
        columns: (header, align_right) per column
        rows: Cell values, one sequence per row, converted with str()
    """
    if not rows:
        return

    cells = [[str(value) for value in row] for row in rows]
    widths = [max(len(header), *(len(row[i]) for row in cells)) for i, (header, _) in enumerate(columns)]

    specs = [f"{{:{'>' if align_right else '<'}{width}}}" for (_, align_right), width in zip(columns, widths)]
    template = "  ".join(specs)

    header = template.format(*(header for header, _ in columns)).rstrip()
    print(header, file=file)
    print("-" * len(header), file=file)
    for row in cells:
        print(template.format(*row).rstrip(), file=file)


def print_duplicated_dirs(rows: list[DuplicateDirectory], file: TextIO | None = None) -> None:
    print_header("Duplicated directories", file)
    print_table(
        [('Group', True), ('Directory', False), ('Files', True), ('Duplicates', True)],
        [(row.group_id, row.directory_path, row.file_count, row.duplicate_count_in_group) for row in rows],
        file)


def print_duplicated_files(groups: list[DuplicateFileGroup], file: TextIO | None = None,
                           limit: int | None = FILE_GROUP_LIMIT) -> None:
    """Print one line per member file, at most ``limit`` groups."""
    print_header("Duplicated files", file)
    shown = groups if limit is None else groups[:limit]
    rows = []
    for group in shown:
        for index, member in enumerate(group.members):
            first = index == 0
            rows.append((
                group.group_id if first else '',
                member.relative_path,
                member.modification_time.strftime('%Y-%m-%d %H:%M:%S') if member.modification_time else '',
                ', '.join(group.extensions_present) if first else '',
                group.member_count if first else '',
                format_size_mb(group.representative_size_mb) if first else '',
                group.content_hash if first else '',
            ))
    print_table(
        [('Group', True), ('File', False), ('Modified (UTC)', False), ('Ext', False), ('Files', True),
         ('Size', True), ('Hash', False)],
        rows, file)
    if len(shown) < len(groups):
        print(f"... {len(groups) - len(shown)} more groups", file=file)


def print_result(result: DuplicateScanResult, file: TextIO | None = None) -> None:
    if result.duplicated_dirs:
        print_duplicated_dirs(result.duplicated_dirs, file)
    if result.duplicated_files:
        print_duplicated_files(result.duplicated_files, file)
    if result.unreadable:
        print_header("Unreadable files (skipped)", file)
        for path in result.unreadable:
            print(path, file=file)
