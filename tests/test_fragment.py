import pytest

from dtulink.fragment import MAX_RF_PAYLOAD_SIZE, Fragment, serial_to_bytes


def test_serial_to_bytes_is_little_endian():
    assert serial_to_bytes(0x0102030405060708) == bytes([8, 7, 6, 5, 4, 3, 2, 1])


@pytest.mark.parametrize("serial", [0, 1, 0x116100000001, (1 << 64) - 1])
def test_serial_to_bytes_round_trip(serial):
    raw = serial_to_bytes(serial)
    assert len(raw) == 8
    assert int.from_bytes(raw, "little") == serial


@pytest.mark.parametrize("serial", [-1, 1 << 64])
def test_serial_to_bytes_rejects_out_of_range(serial):
    with pytest.raises(ValueError):
        serial_to_bytes(serial)


def test_fragment_length_tracks_data():
    frag = Fragment(main_cmd=0x95, data=[1, 2, 3])
    assert frag.data == b"\x01\x02\x03"
    assert frag.length == 3
    assert frag.was_received is False


def test_fragment_accepts_full_payload():
    frag = Fragment(data=bytes(MAX_RF_PAYLOAD_SIZE))
    assert frag.length == MAX_RF_PAYLOAD_SIZE


def test_fragment_rejects_oversized_payload():
    with pytest.raises(ValueError):
        Fragment(data=bytes(MAX_RF_PAYLOAD_SIZE + 1))