import asyncio
import hashlib
import tempfile
import unittest
from pathlib import Path

import mmh3

from ecodup.utils.processor import FileDigest, HashAlgorithm, Processor, compute_digest_for_path


class ComputeDigestTest(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self._tmpdir.name) / 'data.bin'
        self.data = bytes(range(256)) * 5000
        self.path.write_bytes(self.data)

    def tearDown(self):
        self._tmpdir.cleanup()

    def test_md5(self):
        digest = compute_digest_for_path(self.path, 'md5')

        self.assertEqual(hashlib.md5(self.data).hexdigest(), digest.content_hash)
        self.assertEqual(len(self.data), digest.size)
        self.assertEqual(self.path.stat().st_mtime_ns, digest.mtime_ns)

    def test_sha256(self):
        digest = compute_digest_for_path(self.path, HashAlgorithm.SHA256)

        self.assertEqual(hashlib.sha256(self.data).hexdigest(), digest.content_hash)

    def test_mmh3(self):
        digest = compute_digest_for_path(self.path, 'mmh3')

        self.assertEqual(mmh3.mmh3_x64_128(self.data).digest().hex(), digest.content_hash)
        self.assertEqual(32, len(digest.content_hash))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            compute_digest_for_path(self.path.with_name('missing'), 'md5')

    def test_unknown_algorithm(self):
        with self.assertRaises(ValueError):
            compute_digest_for_path(self.path, 'crc32')


class ProcessorTest(unittest.TestCase):
    def test_sequential_has_no_pool(self):
        with Processor(1) as processor:
            self.assertFalse(processor.is_parallel)
            self.assertEqual(1, processor.concurrency)

    def test_digest_sequential_and_parallel(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            paths = []
            for i in range(6):
                path = Path(tmpdir) / f'f{i}'
                path.write_bytes(f'content {i % 2}'.encode())
                paths.append(path)

            async def digest_all(processor):
                return await asyncio.gather(*(processor.digest(path, 'md5') for path in paths))

            with Processor(1) as processor:
                sequential = asyncio.run(digest_all(processor))
            with Processor(2) as processor:
                self.assertTrue(processor.is_parallel)
                parallel = asyncio.run(digest_all(processor))

            self.assertEqual(sequential, parallel)
            self.assertIsInstance(sequential[0], FileDigest)
            self.assertEqual(sequential[0].content_hash, sequential[2].content_hash)
            self.assertNotEqual(sequential[0].content_hash, sequential[1].content_hash)

    def test_worker_error_propagates(self):
        async def digest_missing(processor):
            return await processor.digest(Path('/nonexistent/ecodup/file'), 'md5')

        for concurrency in (1, 2):
            with Processor(concurrency) as processor:
                with self.assertRaises(FileNotFoundError):
                    asyncio.run(digest_missing(processor))

    def test_pool_released_on_error(self):
        processor = Processor(2)
        with self.assertRaises(RuntimeError):
            with processor:
                self.assertTrue(processor.is_parallel)
                raise RuntimeError("boom")

        self.assertFalse(processor.is_parallel)

    def test_pool_released_on_success(self):
        processor = Processor(2)
        with processor:
            pass

        self.assertFalse(processor.is_parallel)
        # Closing twice is harmless
        processor.close()


if __name__ == '__main__':
    unittest.main()
