"""On-wire layout of the BIOS/BMC circular buffer structures."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import ClassVar, Tuple


class BufferFlags(enum.IntFlag):
    """Flags toggled by the BIOS and acknowledged by the BMC."""

    UE_SWITCH = 1 << 0
    OVERFLOW = 1 << 1


class BmcFlags(enum.IntFlag):
    """Flags set only by the BMC."""

    READY = 1 << 2


def _u24(value: int) -> bytes:
    return value.to_bytes(3, "little")


def _from_u24(raw: bytes) -> int:
    return int.from_bytes(raw, "little")


BMC_FLAGS_OFFSET = 0x1D
BMC_READ_PTR_OFFSET = 0x21


@dataclass
class CircularBufferHeader:
    """Header at offset 0 of the shared buffer; reserved bytes are not compared."""

    SIZE: ClassVar[int] = 0x30
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<II4I3sHI3s4sI3sB")

    bmc_interface_version: int = 0
    bios_interface_version: int = 0
    magic_number: Tuple[int, int, int, int] = (0, 0, 0, 0)
    queue_size: int = 0
    ue_region_size: int = 0
    bmc_flags: int = 0
    bmc_read_ptr: int = 0
    reserved1: bytes = field(default=bytes(4), compare=False)
    bios_flags: int = 0
    bios_write_ptr: int = 0
    reserved2: int = field(default=0, compare=False)

    def pack(self) -> bytes:
        """Serialise the header into its 48-byte little-endian form."""
        if len(self.magic_number) != 4:
            raise ValueError("magic_number must hold exactly four words")
        if len(self.reserved1) != 4:
            raise ValueError("reserved1 must be four bytes")
        return self._STRUCT.pack(
            self.bmc_interface_version,
            self.bios_interface_version,
            *self.magic_number,
            _u24(self.queue_size),
            self.ue_region_size,
            self.bmc_flags,
            _u24(self.bmc_read_ptr),
            bytes(self.reserved1),
            self.bios_flags,
            _u24(self.bios_write_ptr),
            self.reserved2,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "CircularBufferHeader":
        """Parse a header from the first 48 bytes of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(
                f"need {cls.SIZE} bytes for a buffer header, got {len(data)}"
            )
        (
            bmc_version, bios_version, m0, m1, m2, m3,
            queue_size, ue_size, bmc_flags, read_ptr, reserved1,
            bios_flags, write_ptr, reserved2,
        ) = cls._STRUCT.unpack_from(bytes(data[:cls.SIZE]))
        return cls(
            bmc_interface_version=bmc_version,
            bios_interface_version=bios_version,
            magic_number=(m0, m1, m2, m3),
            queue_size=_from_u24(queue_size),
            ue_region_size=ue_size,
            bmc_flags=bmc_flags,
            bmc_read_ptr=_from_u24(read_ptr),
            reserved1=reserved1,
            bios_flags=bios_flags,
            bios_write_ptr=_from_u24(write_ptr),
            reserved2=reserved2,
        )


@dataclass
class QueueEntryHeader:
    """Header preceding every entry in the error log queue."""

    SIZE: ClassVar[int] = 0x6
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<HHBB")

    sequence_id: int = 0
    entry_size: int = 0
    checksum: int = 0
    rde_command_type: int = 0

    def pack(self) -> bytes:
        """Serialise the entry header into its 6-byte little-endian form."""
        return self._STRUCT.pack(
            self.sequence_id, self.entry_size, self.checksum, self.rde_command_type
        )

    @classmethod
    def unpack(cls, data: bytes) -> "QueueEntryHeader":
        """Parse an entry header from the first 6 bytes of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(
                f"need {cls.SIZE} bytes for an entry header, got {len(data)}"
            )
        return cls(*cls._STRUCT.unpack_from(bytes(data[:cls.SIZE])))