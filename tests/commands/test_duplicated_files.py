"""Tests for duplicate file grouping on fixture entries."""
import datetime
import unittest
from pathlib import Path

from ecodup.commands.duplicated_files import BYTES_PER_MB, file_extension, find_duplicated_files
from ecodup.scan.entry import FileSystemEntry

from ..test_utils import FIXTURE_ROOT, dir_entry, file_entry


class FileExtensionTest(unittest.TestCase):
    def test_extensions(self):
        self.assertEqual('txt', file_extension('notes.txt'))
        self.assertEqual('gz', file_extension('archive.tar.gz'))
        self.assertEqual('tif', file_extension('RASTER.TIF'))
        self.assertEqual('', file_extension('Makefile'))
        self.assertEqual('', file_extension('.bashrc'))
        self.assertEqual('', file_extension('trailing.'))


class FindDuplicatedFilesTest(unittest.TestCase):
    """Tests for grouping files by content hash."""

    def test_single_group_of_two(self):
        """Two files with the same hash form a group; a unique file is in none."""
        entries = [
            file_entry('file1.txt', 'aaa', size=27),
            file_entry('file2.txt', 'aaa', size=27),
            file_entry('unique.txt', 'bbb', size=19),
        ]

        groups = find_duplicated_files(entries)

        self.assertEqual(1, len(groups))
        group = groups[0]
        self.assertEqual(1, group.group_id)
        self.assertEqual('aaa', group.content_hash)
        self.assertEqual(2, group.member_count)
        self.assertEqual([Path('file1.txt'), Path('file2.txt')], [member.relative_path for member in group.members])
        self.assertEqual(FIXTURE_ROOT / 'file1.txt', group.members[0].absolute_path)
        self.assertEqual(('txt',), group.extensions_present)

    def test_directories_are_ignored(self):
        entries = [dir_entry('a'), dir_entry('b'), file_entry('a/f', 'h1')]

        self.assertEqual([], find_duplicated_files(entries))

    def test_no_duplicates(self):
        entries = [file_entry('a', 'h1'), file_entry('b', 'h2')]

        self.assertEqual([], find_duplicated_files(entries))

    def test_size_threshold(self):
        """Groups whose representative size is below the threshold are dropped."""
        entries = [
            file_entry('big1.tif', 'big', size=3 * BYTES_PER_MB),
            file_entry('big2.tif', 'big', size=3 * BYTES_PER_MB),
            file_entry('small1.txt', 'small', size=10),
            file_entry('small2.txt', 'small', size=10),
        ]

        groups = find_duplicated_files(entries, size_threshold=1)

        self.assertEqual(['big'], [group.content_hash for group in groups])
        self.assertEqual(3.0, groups[0].representative_size_mb)

    def test_threshold_equal_to_size_is_kept(self):
        entries = [
            file_entry('a', 'h', size=BYTES_PER_MB),
            file_entry('b', 'h', size=BYTES_PER_MB),
        ]

        self.assertEqual(1, len(find_duplicated_files(entries, size_threshold=1)))

    def test_everything_filtered(self):
        entries = [file_entry('a', 'h', size=10), file_entry('b', 'h', size=10)]

        self.assertEqual([], find_duplicated_files(entries, size_threshold=0.5))

    def test_size_rounded_to_two_decimals(self):
        entries = [
            file_entry('a', 'h', size=int(1.234567 * BYTES_PER_MB)),
            file_entry('b', 'h', size=int(1.234567 * BYTES_PER_MB)),
        ]

        group, = find_duplicated_files(entries)

        self.assertEqual(1.23, group.representative_size_mb)

    def test_groups_ordered_by_size(self):
        """Largest groups get the lowest ids; equal sizes keep path order."""
        entries = [
            file_entry('z1', 'tiny-z', size=10),
            file_entry('z2', 'tiny-z', size=10),
            file_entry('m1', 'medium', size=2 * BYTES_PER_MB),
            file_entry('m2', 'medium', size=2 * BYTES_PER_MB),
            file_entry('a1', 'tiny-a', size=10),
            file_entry('a2', 'tiny-a', size=10),
            file_entry('l1', 'large', size=5 * BYTES_PER_MB),
            file_entry('l2', 'large', size=5 * BYTES_PER_MB),
        ]

        groups = find_duplicated_files(entries)

        self.assertEqual(['large', 'medium', 'tiny-a', 'tiny-z'], [group.content_hash for group in groups])
        self.assertEqual([1, 2, 3, 4], [group.group_id for group in groups])

    def test_members_sorted_by_path(self):
        entries = [
            file_entry('sub/c.csv', 'h'),
            file_entry('a.CSV', 'h'),
            file_entry('b', 'h'),
        ]

        group, = find_duplicated_files(entries)

        self.assertEqual([Path('a.CSV'), Path('b'), Path('sub/c.csv')],
                         [member.relative_path for member in group.members])
        self.assertEqual(('csv', ''), group.extensions_present)
        self.assertEqual(3, group.member_count)

    def test_modification_time(self):
        mtime_ns = 1_700_000_000_123_456_789
        entries = [
            file_entry('a', 'h', mtime_ns=mtime_ns),
            file_entry('b', 'h', mtime_ns=0),
        ]

        group, = find_duplicated_files(entries)

        self.assertEqual(datetime.datetime(2023, 11, 14, 22, 13, 20, 123456, tzinfo=datetime.UTC),
                         group.members[0].modification_time)
        self.assertEqual(datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC), group.members[1].modification_time)

    def test_file_entry_without_hash_is_rejected(self):
        entry = FileSystemEntry(FIXTURE_ROOT / 'a', Path('a'), False, None, 'a', ())

        with self.assertRaises(ValueError):
            find_duplicated_files([entry, file_entry('b', 'h')])

    def test_input_order_does_not_matter(self):
        entries = [
            file_entry('x/1', 'h1'), file_entry('y/1', 'h1'),
            file_entry('x/2', 'h2'), file_entry('y/2', 'h2'),
        ]

        self.assertEqual(find_duplicated_files(entries), find_duplicated_files(list(reversed(entries))))


if __name__ == '__main__':
    unittest.main()
