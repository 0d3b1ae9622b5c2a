import io

import pytest

from dtulink.commands import (
    MAX_RESEND_COUNT,
    MAX_RETRANSMIT_COUNT,
    ChannelChangeCommand,
    DevControlCommand,
    MultiDataCommand,
    ParaSetCommand,
    RequestFrameCommand,
)
from dtulink.crc import crc8, crc16
from dtulink.fragment import Fragment

TARGET = 0x116112345678
ROUTER = 0x199987654321


class _Multi(MultiDataCommand):
    def command_name(self):
        return "Multi"


class _Control(DevControlCommand):
    def command_name(self):
        return "Control"


class _ParaSet(ParaSetCommand):
    def command_name(self):
        return "ParaSet"

    def handle_response(self, inverter, fragments):
        return True


def test_request_frame_wire_bytes():
    cmd = RequestFrameCommand(TARGET, ROUTER, 3)
    data = cmd.data_payload()
    assert len(data) == cmd.data_size() == 11
    assert data[:10] == bytes(
        [0x15, 0x12, 0x34, 0x56, 0x78, 0x87, 0x65, 0x43, 0x21, 0x83]
    )
    assert data[-1] == crc8(data[:-1])
    assert cmd.command_name() == "RequestFrame"
    assert cmd.timeout == 100


def test_request_frame_number():
    assert RequestFrameCommand(frame_no=200).frame_no() == 0
    cmd = RequestFrameCommand()
    cmd.set_frame_no(7)
    assert cmd.frame_no() == 7
    assert cmd.payload[9] & 0x80 == 0x80


def test_addresses():
    cmd = RequestFrameCommand()
    cmd.set_target_address(TARGET)
    cmd.set_router_address(ROUTER)
    assert cmd.target_address == TARGET
    assert cmd.router_address == ROUTER
    assert bytes(cmd.payload[1:5]) == bytes([0x12, 0x34, 0x56, 0x78])
    with pytest.raises(ValueError):
        cmd.set_target_address(-1)


def test_send_count_and_limits():
    cmd = RequestFrameCommand()
    assert cmd.increment_send_count() == 0
    assert cmd.increment_send_count() == 1
    assert cmd.send_count == 2
    assert cmd.max_resend_count() == MAX_RESEND_COUNT == 4
    assert cmd.max_retransmit_count() == MAX_RETRANSMIT_COUNT == 5
    assert cmd.get_request_frame_command(1) is None


def test_dump_data_payload():
    cmd = RequestFrameCommand(TARGET, 0, 1)
    stream = io.StringIO()
    cmd.dump_data_payload(stream)
    text = stream.getvalue()
    assert text.endswith("\n")
    assert text.split() == [f"{b:02X}" for b in cmd.data_payload()]


def test_multi_data_layout_and_crc():
    cmd = _Multi(TARGET, ROUTER, data_type=0x0B, time=0x12345678)
    assert cmd.data_size() == 27
    assert cmd.payload[0] == 0x15
    assert cmd.payload[9] == 0x80
    assert cmd.data_type() == 0x0B
    assert cmd.get_time() == 0x12345678
    assert int.from_bytes(cmd.payload[24:26], "big") == crc16(cmd.payload[10:24])


def test_multi_data_setters_refresh_crc():
    cmd = _Multi()
    cmd.set_time(1_700_000_000)
    cmd.set_data_type(0x11)
    assert cmd.get_time() == 1_700_000_000
    assert cmd.data_type() == 0x11
    assert int.from_bytes(cmd.payload[24:26], "big") == crc16(cmd.payload[10:24])


def test_multi_request_frame_command():
    cmd = _Multi(TARGET)
    req = cmd.get_request_frame_command(4)
    reference = RequestFrameCommand(TARGET, 0, 4)
    assert isinstance(req, RequestFrameCommand)
    assert req.target_address == TARGET
    assert req.frame_no() == 4
    assert req.payload[9] == reference.payload[9]
    assert bytes(req.payload[1:5]) == bytes(reference.payload[1:5])


def _split(body: bytes):
    crc = crc16(body)
    full = body + bytes([crc >> 8, crc & 0xFF])
    return [Fragment(main_cmd=0x95, data=full[:16]), Fragment(main_cmd=0x95, data=full[16:])]


def test_multi_handle_response():
    body = bytes(range(30))
    cmd = _Multi()
    assert cmd.handle_response(None, _split(body)) is True
    frags = _split(body)
    frags[0] = Fragment(main_cmd=0x95, data=b"\xff" + frags[0].data[1:])
    assert cmd.handle_response(None, frags) is False
    assert cmd.handle_response(None, []) is False


def test_dev_control():
    cmd = _Control(TARGET)
    assert cmd.payload[0] == 0x51
    assert cmd.payload[9] == 0x81
    assert cmd.timeout == 1000
    cmd.payload[10:12] = b"\x02\x00"
    cmd.update_crc(2)
    assert int.from_bytes(cmd.payload[12:14], "big") == crc16(b"\x02\x00")
    assert cmd.handle_response(None, [Fragment(main_cmd=0xD1)]) is True
    assert cmd.handle_response(None, [Fragment(main_cmd=0xD1), Fragment(main_cmd=0x95)]) is False


def test_para_set_header():
    cmd = _ParaSet(TARGET)
    assert cmd.payload[0] == 0x52
    assert cmd.data_size() == 1
    assert bytes(cmd.payload[1:9]) == bytes(RequestFrameCommand(TARGET).payload[1:9])


def test_channel_change():
    cmd = ChannelChangeCommand(TARGET, ROUTER, 5)
    data = cmd.data_payload()
    assert len(data) == 15
    assert data[0] == 0x56
    assert data[9:14] == bytes([0x02, 0x15, 0x21, 0x05, 0x14])
    assert cmd.channel() == 5
    cmd.set_channel(9)
    assert cmd.channel() == 9
    assert cmd.max_resend_count() == 0
    assert cmd.timeout == 10
    assert cmd.command_name() == "ChannelChangeCommand"
    assert cmd.handle_response(None, []) is True