import pytest

from dtulink.alarm_log import (
    ALARM_LOG_PAYLOAD_SIZE,
    AlarmLogParser,
    AlarmMessageType,
    timezone_offset,
)
from dtulink.parser import CommandStatus


def _entry(wcode_hi: int, msg_id: int, start: int, end: int) -> bytes:
    return bytes(
        [wcode_hi, msg_id, 0, 0, start >> 8, start & 0xFF, end >> 8, end & 0xFF]
    ) + bytes(4)


def _parser(*entries: bytes, tz: int = 0) -> AlarmLogParser:
    parser = AlarmLogParser(timezone_offset_source=lambda: tz)
    parser.append_fragment(0, b"\x00\x00" + b"".join(entries))
    return parser


def test_empty_log_has_no_entries():
    assert AlarmLogParser().entry_count() == 0


def test_entry_count_counts_complete_entries():
    parser = _parser(_entry(0, 1, 10, 20), _entry(0, 2, 30, 40), _entry(0, 1, 5, 0))
    assert parser.entry_count() == 3


def test_known_message_decoded():
    parser = _parser(_entry(0, 1, 0x0100, 0x0200))
    entry = parser.get_log_entry(0)
    assert entry.message_id == 1
    assert entry.message == "Inverter start"
    assert entry.start_time == 0x0100
    assert entry.end_time == 0x0200


def test_unknown_message():
    entry = _parser(_entry(0, 3, 1, 1)).get_log_entry(0)
    assert entry.message == "Unknown"


def test_message_id_is_low_byte_of_wcode():
    entry = _parser(_entry(0x05, 2, 1, 1)).get_log_entry(0)
    assert entry.message_id == 2
    assert entry.message == "DTU command failed"


def test_half_day_flags_shift_times():
    plain = _parser(_entry(0x00, 1, 100, 200)).get_log_entry(0)
    shifted = _parser(_entry(0x30, 1, 100, 200)).get_log_entry(0)
    assert shifted.start_time - plain.start_time == 12 * 60 * 60
    assert shifted.end_time - plain.end_time == 12 * 60 * 60


def test_timezone_offset_applied_but_not_to_zero_end():
    entry = _parser(_entry(0, 1, 100, 0), tz=3600).get_log_entry(0)
    assert entry.start_time == 100 + 3600
    assert entry.end_time == 0


def test_hmt_specific_message_preferred():
    parser = _parser(_entry(0, 215, 1, 1))
    assert parser.get_log_entry(0).message == "PV-1: Input overvoltage"
    parser.set_message_type(AlarmMessageType.HMT)
    assert parser.get_log_entry(0).message == "MPPT-C: Input overvoltage"


def test_hmt_falls_back_to_common_message():
    parser = _parser(_entry(0, 1, 1, 1))
    parser.set_message_type(AlarmMessageType.HMT)
    assert parser.get_log_entry(0).message == "Inverter start"


def test_hmt_only_message_unknown_for_other_types():
    parser = _parser(_entry(0, 171, 1, 1))
    assert parser.get_log_entry(0).message == "Unknown"
    parser.set_message_type(AlarmMessageType.HMT)
    assert (
        parser.get_log_entry(0).message
        == "Grid: Abnormal phase difference between phase to phase"
    )


def test_entry_id_out_of_range():
    with pytest.raises(IndexError):
        AlarmLogParser().get_log_entry(15)


def test_append_overflow_raises():
    parser = AlarmLogParser()
    with pytest.raises(ValueError):
        parser.append_fragment(ALARM_LOG_PAYLOAD_SIZE - 1, b"\x01\x02")


def test_clear_buffer_resets():
    parser = _parser(_entry(0, 1, 1, 1))
    parser.clear_buffer()
    assert parser.entry_count() == 0
    assert parser.payload == bytearray(ALARM_LOG_PAYLOAD_SIZE)


def test_default_request_state_is_failed():
    assert AlarmLogParser().last_alarm_request_success == CommandStatus.NOK


def test_timezone_offset_is_plausible():
    offset = timezone_offset()
    assert isinstance(offset, int)
    assert abs(offset) <= 15 * 60 * 60