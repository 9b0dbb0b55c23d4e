import asyncio
import hashlib
import logging
import multiprocessing
from multiprocessing.pool import Pool
import os
import pathlib
import stat
from enum import StrEnum
from typing import Awaitable, NamedTuple

import mmh3

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1 << 20


class HashAlgorithm(StrEnum):
    MD5 = 'md5'
    SHA256 = 'sha256'
    MMH3 = 'mmh3'


_HASH_FACTORIES = {
    HashAlgorithm.MD5: hashlib.md5,
    HashAlgorithm.SHA256: hashlib.sha256,
    HashAlgorithm.MMH3: mmh3.mmh3_x64_128,
}


class FileDigest(NamedTuple):
    """Content hash and metadata of one regular file, taken from a single open."""
    content_hash: str
    size: int
    mtime_ns: int


def compute_digest_for_path(path: pathlib.Path, algorithm: str) -> FileDigest:
    hasher = _HASH_FACTORIES[HashAlgorithm(algorithm)]()
    with open(path, "rb") as f:
        st = os.fstat(f.fileno())
        if not stat.S_ISREG(st.st_mode):
            raise ValueError(f"{path} is not a regular file")
        while chunk := f.read(READ_CHUNK_SIZE):
            hasher.update(chunk)
    return FileDigest(hasher.digest().hex(), st.st_size, st.st_mtime_ns)


class Processor:
    """Evaluates file hashing either inline or on a pool of worker processes.

    With ``concurrency == 1`` no pool is created and every job runs in the calling process, one after
    another. With a larger value, jobs are dispatched to a ``multiprocessing`` pool and surfaced to
    asyncio as futures. The pool lives exactly as long as the processor; use it as a context manager so
    the workers are released when the scan completes or fails.
    """

    def __init__(self, concurrency: int | None = None):
        if concurrency is None:
            concurrency = multiprocessing.cpu_count()

        self._concurrency = concurrency
        self._pool: Pool | None = Pool(self._concurrency) if concurrency > 1 else None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
        else:
            self.terminate()

    def close(self):
        """Stop accepting jobs and wait for the workers to exit."""
        if self._pool is not None:
            self._pool.close()
            self._pool.join()
            self._pool = None

    def terminate(self):
        """Stop the workers immediately, discarding outstanding jobs."""
        if self._pool is not None:
            self._pool.terminate()
            self._pool.join()
            self._pool = None

    @property
    def concurrency(self):
        return self._concurrency

    @property
    def is_parallel(self) -> bool:
        return self._pool is not None

    def digest(self, path: pathlib.Path, algorithm: str) -> Awaitable[FileDigest]:
        logger.info(f"Starting hash computation for: {path}")

        async def log_and_compute():
            result = await self._evaluate(compute_digest_for_path, path, algorithm)
            logger.info(f"Completed hash computation for: {path}")
            return result

        return log_and_compute()

    def _evaluate(self, func, *args):
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        if self._pool is None:
            try:
                future.set_result(func(*args))
            except Exception as e:
                future.set_exception(e)
            return future

        def settle(setter, value):
            if not future.done():
                setter(value)

        def deliver(setter, value):
            try:
                loop.call_soon_threadsafe(settle, setter, value)
            except RuntimeError:
                # Loop already closed after an aborted scan
                pass

        self._pool.apply_async(func, args=args,
                               callback=lambda v: deliver(future.set_result, v),
                               error_callback=lambda e: deliver(future.set_exception, e))

        return future
