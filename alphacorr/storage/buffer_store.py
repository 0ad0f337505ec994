"""Append-only, memory-mapped storage for large float64 arrays.

Series objects built in one analysis run share a single :class:`BufferStore`.
Every array is appended to one backing file and handed back as a read-only
``numpy.memmap`` view, so heavy raw arrays are not duplicated in RAM.

Design
------
1. Write-once: committed regions are never modified
2. Writers serialise on a lock around offset allocation + write
3. Readers never lock, committed regions are immutable
4. I/O failures degrade to an in-memory copy with identical values

Examples
--------
>>> from alphacorr.storage import BufferStore, store_values
>>> with BufferStore() as storage:
...     handle = store_values(storage, np.array([1.0, 2.0, 3.0]))
...     print(handle.array)  # [1. 2. 3.]
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..exceptions import StorageWriteError

logger = logging.getLogger(__name__)

DTYPE = np.dtype(np.float64)


@dataclass(frozen=True, eq=False)
class BufferHandle:
    """Reference to a contiguous, read-only block of float64 values.

    Attributes
    ----------
    array : np.ndarray
        Read-only view (``np.memmap`` when ``is_mapped``)
    offset : int
        Byte offset inside the backing file, -1 for in-memory buffers
    """

    array: np.ndarray = field(repr=False)
    offset: int = -1

    @property
    def length(self) -> int:
        return int(self.array.size)

    @property
    def is_mapped(self) -> bool:
        return self.offset >= 0

    @classmethod
    def in_memory(cls, values: np.ndarray) -> 'BufferHandle':
        array = np.array(values, dtype=DTYPE, copy=True)
        array.setflags(write=False)
        return cls(array=array)


class BufferStore:
    """Memory-mapped append-only store shared by all series of one run.

    Parameters
    ----------
    directory : str or Path, optional
        Directory of the backing file (default: system temp directory)

    Notes
    -----
    ``store()`` raises :class:`StorageWriteError` on I/O failures. Callers in
    this package use :func:`store_values`, which logs and falls back to an
    in-memory buffer instead.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        fd, path = tempfile.mkstemp(prefix="alphacorr_", suffix=".buf", dir=directory)
        self.path = Path(path)
        self._file = os.fdopen(fd, "w+b")
        self._lock = threading.Lock()
        self._offset = 0
        self._n_buffers = 0
        self._closed = False
        logger.debug(f"Opened buffer store {self.path}")

    @property
    def n_bytes(self) -> int:
        return self._offset

    @property
    def n_buffers(self) -> int:
        return self._n_buffers

    @property
    def closed(self) -> bool:
        return self._closed

    def store(self, values: np.ndarray) -> BufferHandle:
        """Append ``values`` and return a read-only mapped handle.

        Raises
        ------
        StorageWriteError
            If the store is closed or the backing file cannot be written
        """
        data = np.ascontiguousarray(values, dtype=DTYPE).ravel()
        if data.size == 0:
            # empty regions cannot be memory-mapped
            return BufferHandle.in_memory(data)

        with self._lock:
            if self._closed:
                raise StorageWriteError(f"Buffer store {self.path} is closed")
            offset = self._offset
            try:
                self._file.seek(offset)
                self._file.write(data.tobytes())
                self._file.flush()
            except (OSError, ValueError) as e:
                raise StorageWriteError(
                    f"Could not write {data.nbytes:,} bytes to {self.path}: {e}"
                ) from e
            self._offset = offset + data.nbytes
            self._n_buffers += 1

        try:
            mapped = np.memmap(self.path, dtype=DTYPE, mode="r", offset=offset, shape=(data.size,))
        except (OSError, ValueError) as e:
            raise StorageWriteError(f"Could not map region at {offset} of {self.path}: {e}") from e
        return BufferHandle(array=mapped, offset=offset)

    def close(self) -> None:
        """Close and delete the backing file.

        Handles created earlier stay readable on POSIX systems because their
        mappings keep the data alive.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._file.close()
        try:
            self.path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove buffer store file {self.path}: {e}")
        logger.debug(f"Closed buffer store ({self._n_buffers:,} buffers, {self._offset:,} bytes)")

    def __enter__(self) -> 'BufferStore':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"BufferStore(path={str(self.path)!r}, n_buffers={self._n_buffers}, n_bytes={self._offset})"


def store_values(storage: Optional[BufferStore], values: np.ndarray) -> BufferHandle:
    """Store ``values`` in ``storage``, falling back to memory on failure.

    The returned handle holds exactly the same numbers in both cases, only
    the backing differs.

    Parameters
    ----------
    storage : BufferStore or None
        Shared store of the current run, None keeps the data in memory
    values : np.ndarray
        Values to store (converted to float64)

    Returns
    -------
    BufferHandle
        Read-only handle on the stored values
    """
    if storage is None:
        return BufferHandle.in_memory(values)
    try:
        return storage.store(values)
    except StorageWriteError as e:
        logger.warning(f"Buffer store write failed, keeping data in memory: {e}")
        return BufferHandle.in_memory(values)
