# smm_error_logger

Read error logs that firmware (BIOS/SMM) writes into a circular buffer held in
a shared memory region, and acknowledge them on behalf of the BMC.

## What it provides

- `smm_error_logger.pci_handler`
  - `DataInterface`: the abstract read/write interface a transport implements
    (`read`, `write`, `memory_region_size`).
  - `PciDataHandler`: bounded reads and writes over a memory region. Wrap any
    writable buffer (a `bytearray`, a `mmap`), or map a region of a device
    file with `PciDataHandler.open(path, region_address, region_size)`.
    Reads and writes that run past the end of the region are cut short; a
    zero length or an offset beyond the region gives `b""` (read) or `0`
    (write) and logs a warning. Passing a `region_size` larger than the
    buffer raises `ValueError`. It is a context manager and releases its
    view, mapping and file on exit.
- `smm_error_logger.layout`
  - `CircularBufferHeader` (0x30 bytes) and `QueueEntryHeader` (6 bytes),
    dataclasses with `pack()` and `unpack()` for the little-endian on-wire
    layout. Reserved header bytes are ignored when comparing headers.
  - `BufferFlags` (`UE_SWITCH`, `OVERFLOW`) and `BmcFlags` (`READY`) bit flags.
- `smm_error_logger.buffer`
  - `Buffer`: zeroes the shared region and writes a fresh header
    (`initialize`), reads the header (`read_buffer_header`,
    `cached_buffer_header`), reads queue entries with wraparound and XOR
    checksum checks (`read_entry`, `read_error_logs`), reads the
    uncorrectable-error (UE) log from the reserved region
    (`read_ue_log_from_reserved_region`), and acknowledges overflows
    (`check_for_overflow_and_acknowledge`). A header whose queue or UE region
    size differs from the sizes the `Buffer` was built with is treated as
    corruption. Problems are raised as `BufferError`.
- `smm_error_logger.dictionary_manager`
  - `DictionaryManager`: collects RDE BEJ dictionaries, in chunks, keyed by
    resource ID, and hands back only completed ones. The annotation
    dictionary uses `ANNOTATION_RESOURCE_ID` (0).

## Example

```python
from smm_error_logger.buffer import Buffer
from smm_error_logger.pci_handler import PciDataHandler

region = bytearray(0x1000)
with PciDataHandler(region, len(region)) as handler:
    buf = Buffer(handler, queue_region_size=0x200, ue_region_size=0x50)
    buf.initialize(
        bmc_interface_version=1,
        queue_size=0x200,
        ue_region_size=0x50,
        magic_number=(0x12345678, 0x22345678, 0x32345678, 0x42345678),
    )
    for header, payload in buf.read_error_logs():
        print(header.sequence_id, header.rde_command_type, payload.hex())

    ue_log = buf.read_ue_log_from_reserved_region()
    if buf.check_for_overflow_and_acknowledge():
        print("overflow acknowledged")
```

Collecting dictionaries:

```python
from smm_error_logger.dictionary_manager import DictionaryManager

manager = DictionaryManager()
manager.start_dictionary_entry(1, b"\x00\x03")
manager.add_dictionary_data(1, b"\x02\x00")
manager.mark_data_complete(1)
assert manager.get_dictionary(1) == b"\x00\x03\x02\x00"
assert manager.dictionary_count() == 1
```

## What it does not do

The package is a library only. It has no command or service that polls the
buffer on a timer, and it does not decode the RDE commands carried in queue
entries: entries come back as raw bytes, and `DictionaryManager` only stores
dictionaries. Nothing turns entries into JSON, writes them to files or
publishes them elsewhere.

## Running the tests

```
pip install -e ".[test]"
pytest
```