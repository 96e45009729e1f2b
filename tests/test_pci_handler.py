import pytest

from smm_error_logger.pci_handler import DataInterface, PciDataHandler

REGION_SIZE = 8


@pytest.fixture
def mapped():
    return bytearray([0, 11, 22, 33, 44, 55, 66, 77])


@pytest.fixture
def handler(mapped):
    h = PciDataHandler(mapped, REGION_SIZE)
    yield h
    h.close()


def test_get_memory_region_size(handler):
    assert handler.memory_region_size() == REGION_SIZE


def test_boundary_checks_read_fail(handler):
    assert handler.read(0, 0) == b""
    assert handler.read(REGION_SIZE + 1, 1) == b""


def test_boundary_checks_write_fail(handler, mapped):
    assert handler.write(0, b"") == 0
    assert handler.write(REGION_SIZE + 1, bytes(REGION_SIZE - 1)) == 0
    assert mapped == bytearray([0, 11, 22, 33, 44, 55, 66, 77])


def test_read_passes(handler):
    assert handler.read(0, 2) == bytes([0, 11])
    assert handler.read(3, REGION_SIZE - 3) == bytes([33, 44, 55, 66, 77])
    assert handler.read(4, REGION_SIZE - 4 + 1) == bytes([44, 55, 66, 77])


def test_write_passes(handler, mapped):
    expected = bytearray([0, 11, 22, 33, 44, 55, 66, 77])

    data = bytes([99, 88])
    expected[0:2] = data
    assert handler.write(0, data) == len(data)
    assert mapped == expected

    data = bytes([55, 44, 33, 22])
    expected[4:8] = data
    assert handler.write(4, data) == len(data)
    assert mapped == expected

    data = bytes([12, 23, 45])
    expected[7] = 12
    assert handler.write(7, data) == REGION_SIZE - 7
    assert mapped == expected


def test_region_smaller_than_size_rejected():
    with pytest.raises(ValueError):
        PciDataHandler(bytearray(4), REGION_SIZE)


def test_is_data_interface(handler):
    assert isinstance(handler, DataInterface)
    assert handler.read(1, 1) == bytes([11])


def test_open_maps_file(tmp_path):
    path = tmp_path / "mem"
    path.write_bytes(bytes([0, 11, 22, 33, 44, 55, 66, 77]))
    with PciDataHandler.open(path, 0, REGION_SIZE) as h:
        assert h.read(0, REGION_SIZE) == bytes([0, 11, 22, 33, 44, 55, 66, 77])
        assert h.write(0, bytes([99, 88])) == 2
    assert path.read_bytes()[:2] == bytes([99, 88])