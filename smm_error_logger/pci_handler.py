"""Byte-level access to the memory region shared with the BIOS."""

from __future__ import annotations

import abc
import logging
import mmap
import os
from typing import Union

_log = logging.getLogger(__name__)

Region = Union[bytearray, memoryview, mmap.mmap]


class DataInterface(abc.ABC):
    """Transport used to read and write the shared buffer."""

    @abc.abstractmethod
    def read(self, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes starting at ``offset``."""

    @abc.abstractmethod
    def write(self, offset: int, data: bytes) -> int:
        """Write ``data`` at ``offset`` and return the number of bytes written."""

    @abc.abstractmethod
    def memory_region_size(self) -> int:
        """Return the size of the memory region."""


class PciDataHandler(DataInterface):
    """Reads and writes a memory region exposed through the PCI bridge."""

    def __init__(self, region: Region, region_size: int) -> None:
        view = memoryview(region)
        if region_size > view.nbytes:
            view.release()
            raise ValueError(
                f"region size {region_size} exceeds the {view.nbytes} bytes provided"
            )
        self._region_size = region_size
        self._view = view.cast("B")
        self._mmap: mmap.mmap | None = None
        self._fd: int | None = None

    @classmethod
    def open(cls, path: str | os.PathLike, region_address: int, region_size: int) -> "PciDataHandler":
        """Map ``region_size`` bytes of ``path`` starting at ``region_address``."""
        flags = os.O_RDWR | getattr(os, "O_SYNC", 0)
        fd = os.open(path, flags)
        try:
            mapped = mmap.mmap(
                fd,
                region_size,
                access=mmap.ACCESS_WRITE,
                offset=region_address,
            )
        except BaseException:
            os.close(fd)
            raise
        handler = cls(mapped, region_size)
        handler._mmap = mapped
        handler._fd = fd
        return handler

    def read(self, offset: int, length: int) -> bytes:
        if offset > self._region_size or length == 0:
            _log.warning(
                "[read] Offset [%d] was bigger than regionSize [%d] "
                "OR length [%d] was equal to 0",
                offset, self._region_size, length,
            )
            return b""
        final_length = length if offset + length < self._region_size else self._region_size - offset
        return bytes(self._view[offset:offset + final_length])

    def write(self, offset: int, data: bytes) -> int:
        length = len(data)
        if offset > self._region_size or length == 0:
            _log.warning(
                "[write] Offset [%d] was bigger than regionSize [%d] "
                "OR length [%d] was equal to 0",
                offset, self._region_size, length,
            )
            return 0
        final_length = length if offset + length < self._region_size else self._region_size - offset
        self._view[offset:offset + final_length] = bytes(data[:final_length])
        return final_length

    def memory_region_size(self) -> int:
        return self._region_size

    def close(self) -> None:
        """Release the region and any mapping or file this handler owns."""
        self._view.release()
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> "PciDataHandler":
        return self

    def __exit__(self, *args) -> None:
        self.close()