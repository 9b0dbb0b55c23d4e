"""Tests for console rendering of scan results."""
import datetime
import io
import unittest
from pathlib import Path

from ecodup.report.records import DuplicateDirectory, DuplicateFileGroup, DuplicateScanResult, MemberFile
from ecodup.report.table import format_size_mb, print_duplicated_files, print_result, print_table

ROOT = Path('/data/root')
MODIFIED = datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.UTC)


def group(group_id: int, *names: str, size_mb: float = 1.0) -> DuplicateFileGroup:
    members = [MemberFile(ROOT / name, Path(name), MODIFIED) for name in names]
    return DuplicateFileGroup(group_id, f'hash{group_id}', members, size_mb, ('txt',))


class PrintTableTest(unittest.TestCase):
    def test_columns_are_aligned(self):
        output = io.StringIO()

        print_table([('Name', False), ('Count', True)], [('a', 1), ('longer', 100)], output)

        self.assertEqual([
            'Name    Count',
            '-------------',
            'a           1',
            'longer    100',
        ], output.getvalue().splitlines())

    def test_no_rows_prints_nothing(self):
        output = io.StringIO()

        print_table([('Name', False)], [], output)

        self.assertEqual('', output.getvalue())

    def test_format_size(self):
        self.assertEqual('0.50 MB', format_size_mb(0.5))
        self.assertEqual('2.00 GB', format_size_mb(2048))


class PrintResultTest(unittest.TestCase):
    def test_both_tables(self):
        result = DuplicateScanResult(
            ROOT,
            [group(1, 'a.txt', 'b.txt')],
            [DuplicateDirectory(1, Path('x'), ROOT / 'x', 2, 2), DuplicateDirectory(1, Path('y'), ROOT / 'y', 2, 2)])
        output = io.StringIO()

        print_result(result, output)

        text = output.getvalue()
        self.assertIn('>>  Duplicated directories', text)
        self.assertIn('>>  Duplicated files', text)
        self.assertLess(text.index('Duplicated directories'), text.index('Duplicated files'))
        self.assertIn('2024-01-02 03:04:05', text)
        self.assertIn('hash1', text)
        self.assertNotIn('Unreadable', text)

    def test_absent_tables_are_not_printed(self):
        output = io.StringIO()

        print_result(DuplicateScanResult(ROOT, [group(1, 'a.txt', 'b.txt')], None), output)

        self.assertNotIn('Duplicated directories', output.getvalue())

    def test_unreadable_listed(self):
        output = io.StringIO()

        print_result(DuplicateScanResult(ROOT, None, None, [ROOT / 'locked.bin']), output)

        self.assertIn('Unreadable files (skipped)', output.getvalue())
        self.assertIn(str(ROOT / 'locked.bin'), output.getvalue())

    def test_file_groups_are_limited(self):
        groups = [group(i, f'{i}a.txt', f'{i}b.txt') for i in range(1, 6)]
        output = io.StringIO()

        print_duplicated_files(groups, output, limit=2)

        text = output.getvalue()
        self.assertIn('2a.txt', text)
        self.assertNotIn('3a.txt', text)
        self.assertIn('... 3 more groups', text)


if __name__ == '__main__':
    unittest.main()
