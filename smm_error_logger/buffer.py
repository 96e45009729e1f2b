"""Reader for the BIOS/BMC circular error log buffer."""

from __future__ import annotations

import dataclasses
import logging
from functools import reduce
from operator import xor
from typing import List, Sequence, Tuple

from .layout import (
    BMC_FLAGS_OFFSET,
    BMC_READ_PTR_OFFSET,
    BufferFlags,
    CircularBufferHeader,
    QueueEntryHeader,
)
from .pci_handler import DataInterface

_log = logging.getLogger(__name__)

EntryPair = Tuple[QueueEntryHeader, bytes]
"""An entry header together with the entry bytes that follow it."""


class BufferError(RuntimeError):
    """Raised when the shared buffer cannot be accessed or is inconsistent."""


def _xor_all(data: bytes) -> int:
    return reduce(xor, data, 0)


class Buffer:
    """Reads error log entries that the BIOS places in the shared buffer.

    ``queue_region_size`` and ``ue_region_size`` are the sizes this side
    expects; a header disagreeing with them is treated as corruption.
    """

    def __init__(
        self,
        data_interface: DataInterface,
        queue_region_size: int,
        ue_region_size: int,
    ) -> None:
        self._io = data_interface
        self._queue_region_size = queue_region_size
        self._ue_region_size = ue_region_size
        self._header = CircularBufferHeader()

    def initialize(
        self,
        bmc_interface_version: int,
        queue_size: int,
        ue_region_size: int,
        magic_number: Sequence[int],
    ) -> None:
        """Zero the queue region and write a fresh header."""
        region_size = self._io.memory_region_size()
        if queue_size > region_size:
            raise BufferError(
                f"[initialize] Proposed queue size '{queue_size}' is bigger than "
                f"the BMC's allocated MMIO region of '{region_size}'"
            )

        written = self._io.write(0, bytes(queue_size))
        if written != queue_size:
            raise BufferError(f"[initialize] Only erased '{written}'")

        header = CircularBufferHeader(
            bmc_interface_version=bmc_interface_version,
            queue_size=queue_size,
            ue_region_size=ue_region_size,
            magic_number=tuple(magic_number),
        )
        raw = header.pack()
        written = self._io.write(0, raw)
        if written != len(raw):
            raise BufferError(
                f"[initialize] Only wrote '{written}' bytes of the header"
            )
        self._header = header

    def read_buffer_header(self) -> CircularBufferHeader:
        """Refresh the cached header from the shared buffer and return it."""
        size = CircularBufferHeader.SIZE
        raw = self._io.read(0, size)
        if len(raw) != size:
            raise BufferError(
                f"Buffer header read only read '{len(raw)}', expected '{size}'"
            )
        self._header = CircularBufferHeader.unpack(raw)
        return self.cached_buffer_header

    @property
    def cached_buffer_header(self) -> CircularBufferHeader:
        """A copy of the most recently read or written header."""
        return dataclasses.replace(self._header)

    def update_read_ptr(self, new_read_ptr: int) -> None:
        """Write the BMC read pointer (24 bits) to the header."""
        truncated = new_read_ptr & 0xFFFFFF
        raw = truncated.to_bytes(3, "little")
        written = self._io.write(BMC_READ_PTR_OFFSET, raw)
        if written != len(raw):
            raise BufferError(
                f"[updateReadPtr] Wrote '{written}' bytes, instead of "
                f"expected '{len(raw)}'"
            )
        self._header.bmc_read_ptr = truncated

    def update_bmc_flags(self, new_bmc_flags: int) -> None:
        """Write the BMC flags word to the header."""
        value = int(new_bmc_flags) & 0xFFFFFFFF
        raw = value.to_bytes(4, "little")
        written = self._io.write(BMC_FLAGS_OFFSET, raw)
        if written != len(raw):
            raise BufferError(
                f"[updateBmcFlags] Wrote '{written}' bytes, instead of "
                f"expected '{len(raw)}'"
            )
        self._header.bmc_flags = value

    def max_offset(self) -> int:
        """Size of the error log queue, after the header and UE region."""
        queue_size = self._header.queue_size
        ue_size = self._header.ue_region_size
        if queue_size != self._queue_region_size:
            raise BufferError(
                f"[max_offset] runtime queueSize '{queue_size}' did not match "
                f"compile-time queueSize '{self._queue_region_size}'. This "
                "indicates that the buffer was corrupted"
            )
        if ue_size != self._ue_region_size:
            raise BufferError(
                f"[max_offset] runtime ueRegionSize '{ue_size}' did not match "
                f"compile-time ueRegionSize '{self._ue_region_size}'. This "
                "indicates that the buffer was corrupted"
            )
        return queue_size - ue_size - CircularBufferHeader.SIZE

    def queue_offset(self) -> int:
        """Absolute offset of the error log queue, where pointers start."""
        ue_size = self._header.ue_region_size
        if ue_size != self._ue_region_size:
            raise BufferError(
                f"[queue_offset] runtime ueRegionSize '{ue_size}' did not match "
                f"compile-time ueRegionSize '{self._ue_region_size}'. This "
                "indicates that the buffer was corrupted"
            )
        return CircularBufferHeader.SIZE + ue_size

    def wraparound_read(self, relative_offset: int, length: int) -> bytes:
        """Read ``length`` queue bytes, wrapping at the queue end, and advance the read pointer."""
        max_offset = self.max_offset()
        if relative_offset > max_offset:
            raise BufferError(
                f"[wraparoundRead] relativeOffset '{relative_offset}' was bigger "
                f"than maxOffset '{max_offset}'"
            )
        if length > max_offset:
            raise BufferError(
                f"[wraparoundRead] length '{length}' was bigger than maxOffset "
                f"'{max_offset}'"
            )

        queue_offset = self.queue_offset()
        space_to_end = max_offset - relative_offset
        wrapped = max(0, length - space_to_end)
        till_end = length - wrapped

        data = self._io.read(queue_offset + relative_offset, till_end)
        if len(data) != till_end:
            raise BufferError(
                f"[wraparoundRead] Read '{len(data)}' which was not the "
                f"requested length of '{till_end}'"
            )
        new_read_ptr = relative_offset + till_end
        if new_read_ptr == max_offset:
            new_read_ptr = 0

        if wrapped:
            tail = self._io.read(queue_offset, wrapped)
            if len(tail) != wrapped:
                raise BufferError(
                    f"[wraparoundRead] Buffer wrapped around but read "
                    f"'{len(tail)}' which was not the requested length of "
                    f"'{wrapped}'"
                )
            data = bytes(data) + bytes(tail)
            new_read_ptr = wrapped

        self.update_read_ptr(new_read_ptr)
        return bytes(data)

    def read_entry_header(self) -> QueueEntryHeader:
        """Read the entry header at the read pointer."""
        raw = self.wraparound_read(self._header.bmc_read_ptr, QueueEntryHeader.SIZE)
        return QueueEntryHeader.unpack(raw)

    def read_entry(self) -> EntryPair:
        """Read one entry at the read pointer and verify its checksum."""
        entry_header = self.read_entry_header()
        entry = self.wraparound_read(self._header.bmc_read_ptr, entry_header.entry_size)
        checksum = _xor_all(entry_header.pack()) ^ _xor_all(entry)
        if checksum != 0:
            raise BufferError(
                f"[readEntry] Checksum was '{checksum}', expected '0'"
            )
        return entry_header, entry

    def read_error_logs(self) -> List[EntryPair]:
        """Read every entry between the BMC read pointer and the BIOS write pointer."""
        self.read_buffer_header()
        max_offset = self.max_offset()

        write_ptr = self._header.bios_write_ptr
        if write_ptr > max_offset:
            raise BufferError(
                f"[readErrorLogs] currentBiosWritePtr was '{write_ptr}' which "
                f"was bigger than maxOffset '{max_offset}'"
            )
        read_ptr = self._header.bmc_read_ptr
        if read_ptr > max_offset:
            raise BufferError(
                f"[readErrorLogs] currentReadPtr was '{read_ptr}' which was "
                f"bigger than maxOffset '{max_offset}'"
            )

        if write_ptr == read_ptr:
            return []
        if write_ptr > read_ptr:
            bytes_to_read = write_ptr - read_ptr
        else:
            bytes_to_read = (max_offset - read_ptr) + write_ptr

        entries: List[EntryPair] = []
        bytes_read = 0
        while bytes_read < bytes_to_read:
            entry = self.read_entry()
            bytes_read += QueueEntryHeader.SIZE + len(entry[1])
            entries.append(entry)
            read_ptr = self._header.bmc_read_ptr

        if write_ptr != read_ptr:
            raise BufferError(
                f"[readErrorLogs] biosWritePtr '{write_ptr}' and bmcReadPtr "
                f"'{read_ptr}' are not identical after reading through all "
                "the logs"
            )
        return entries

    def read_ue_log_from_reserved_region(self) -> bytes:
        """Return an unread uncorrectable-error log, or empty bytes if there is none."""
        self.read_buffer_header()

        ue_size = self._header.ue_region_size
        if ue_size == 0:
            _log.warning("[readUeLogFromReservedRegion] UE Region size is 0")
            return b""

        pending = self._header.bios_flags ^ self._header.bmc_flags
        if not pending & BufferFlags.UE_SWITCH:
            return b""

        data = self._io.read(CircularBufferHeader.SIZE, ue_size)
        if len(data) == ue_size:
            return bytes(data)
        raise BufferError(
            f"Failed to read full UE log. Expected {ue_size}, got {len(data)}"
        )

    def check_for_overflow_and_acknowledge(self) -> bool:
        """Acknowledge an unacknowledged overflow; True if one was found."""
        self.read_buffer_header()
        bmc_flags = self._header.bmc_flags
        pending = self._header.bios_flags ^ bmc_flags
        if pending & BufferFlags.OVERFLOW:
            self.update_bmc_flags(bmc_flags ^ BufferFlags.OVERFLOW)
            return True
        return False