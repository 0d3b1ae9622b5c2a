"""Parser for the device information responses (firmware and hardware)."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .parser import Parser

DEV_INFO_SIZE = 20

_ANY = 0xFF

# Hardware part prefix, rated power and model name. A last byte of _ANY
# only matches in the three byte pass.
_DEV_INFO: Tuple[Tuple[Tuple[int, int, int, int], int, str], ...] = (
    ((0x10, 0x10, 0x10, _ANY), 300, "HM-300"),
    ((0x10, 0x10, 0x20, _ANY), 350, "HM-350"),
    ((0x10, 0x10, 0x30, _ANY), 400, "HM-400"),
    ((0x10, 0x10, 0x40, _ANY), 400, "HM-400"),
    ((0x10, 0x11, 0x10, _ANY), 600, "HM-600"),
    ((0x10, 0x11, 0x20, _ANY), 700, "HM-700"),
    ((0x10, 0x11, 0x30, _ANY), 800, "HM-800"),
    ((0x10, 0x11, 0x40, _ANY), 800, "HM-800"),
    ((0x10, 0x12, 0x10, _ANY), 1200, "HM-1200"),
    ((0x10, 0x02, 0x30, _ANY), 1500, "MI-1500 Gen3"),
    ((0x10, 0x12, 0x30, _ANY), 1500, "HM-1500"),
    # HM-300 limited to 70% at the factory.
    ((0x10, 0x10, 0x10, 0x15), int(300 * 0.7), "HM-300"),
    ((0x10, 0x20, 0x21, _ANY), 350, "HMS-350"),
    ((0x10, 0x10, 0x71, _ANY), 500, "HMS-500"),
    ((0x10, 0x21, 0x41, _ANY), 800, "HMS-800"),
    ((0x10, 0x21, 0x71, _ANY), 1000, "HMS-1000"),
    ((0x10, 0x12, 0x51, _ANY), 1800, "HMS-1800"),
    ((0x10, 0x22, 0x51, _ANY), 1800, "HMS-1800"),
    ((0x10, 0x12, 0x71, _ANY), 2000, "HMS-2000"),
    ((0x10, 0x33, 0x11, _ANY), 1800, "HMT-1800"),
    ((0x10, 0x33, 0x31, _ANY), 2250, "HMT-2250"),
)

_CUMDAYS = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)


def _timegm(year: int, mon: int, mday: int, hour: int, minute: int, sec: int = 0) -> int:
    """Seconds since the epoch for a UTC broken-down time (month 0-based)."""
    year_shift, mon = divmod(mon, 12)
    year += year_shift
    result = (year - 1970) * 365 + _CUMDAYS[mon]
    result += (year - 1968) // 4
    result -= (year - 1900) // 100
    result += (year - 1600) // 400
    if year % 4 == 0 and (year % 100 != 0 or year % 400 == 0) and mon < 2:
        result -= 1
    result += mday - 1
    return ((result * 24 + hour) * 60 + minute) * 60 + sec


def _word(buf: bytearray, pos: int) -> int:
    return (buf[pos] << 8) | buf[pos + 1]


def _append(buf: bytearray, offset: int, payload: bytes, what: str) -> int:
    end = offset + len(payload)
    if end > DEV_INFO_SIZE:
        raise ValueError(f"dev info {what} packet too large for buffer ({end} > {DEV_INFO_SIZE})")
    buf[offset:end] = payload
    return len(payload)


@dataclass
class DevInfoParser(Parser):
    """Holds the 'all' and 'simple' device info payloads and decodes them."""

    payload_all: bytearray = field(default_factory=lambda: bytearray(DEV_INFO_SIZE))
    dev_info_all_length: int = 0
    payload_simple: bytearray = field(default_factory=lambda: bytearray(DEV_INFO_SIZE))
    dev_info_simple_length: int = 0
    last_update_all: int = 0
    last_update_simple: int = 0

    def clear_buffer_all(self) -> None:
        self.payload_all[:] = bytes(DEV_INFO_SIZE)
        self.dev_info_all_length = 0

    def append_fragment_all(self, offset: int, payload: bytes) -> None:
        """Copy ``payload`` into the 'all' buffer at ``offset``."""
        self.dev_info_all_length += _append(self.payload_all, offset, payload, "all")

    def clear_buffer_simple(self) -> None:
        self.payload_simple[:] = bytes(DEV_INFO_SIZE)
        self.dev_info_simple_length = 0

    def append_fragment_simple(self, offset: int, payload: bytes) -> None:
        """Copy ``payload`` into the 'simple' buffer at ``offset``."""
        self.dev_info_simple_length += _append(self.payload_simple, offset, payload, "simple")

    def set_last_update_all(self, last_update: int) -> None:
        self.last_update_all = last_update
        self.last_update = last_update

    def set_last_update_simple(self, last_update: int) -> None:
        self.last_update_simple = last_update
        self.last_update = last_update

    def fw_build_version(self) -> int:
        return _word(self.payload_all, 0)

    def fw_build_datetime(self) -> int:
        """Firmware build time as seconds since the epoch (UTC)."""
        year = _word(self.payload_all, 2)
        month_day = _word(self.payload_all, 4)
        hour_min = _word(self.payload_all, 6)
        return _timegm(
            year,
            month_day // 100 - 1,
            month_day % 100,
            hour_min // 100,
            hour_min % 100,
        )

    def fw_bootloader_version(self) -> int:
        return _word(self.payload_all, 8)

    def hw_part_number(self) -> int:
        return (_word(self.payload_simple, 2) << 16) | _word(self.payload_simple, 4)

    def hw_version(self) -> str:
        return f"{self.payload_simple[6]:02d}.{self.payload_simple[7]:02d}"

    def _dev_entry(self) -> Optional[Tuple[Tuple[int, int, int, int], int, str]]:
        part = tuple(self.payload_simple[2:6])
        for entry in _DEV_INFO:
            if entry[0] == part:
                return entry
        for entry in _DEV_INFO:
            if entry[0][:3] == part[:3]:
                return entry
        return None

    def max_power(self) -> int:
        """Rated power of the model, or 0 if the model is unknown."""
        entry = self._dev_entry()
        return entry[1] if entry is not None else 0

    def hw_model_name(self) -> str:
        """Model name, or an empty string if the model is unknown."""
        entry = self._dev_entry()
        return entry[2] if entry is not None else ""