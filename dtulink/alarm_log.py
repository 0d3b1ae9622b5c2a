"""Parser for the inverter alarm (event) log response."""

import enum
import time
from dataclasses import dataclass, field
from typing import Callable, Tuple

from .parser import CommandStatus, Parser

ALARM_LOG_ENTRY_COUNT = 15
ALARM_LOG_ENTRY_SIZE = 12
ALARM_LOG_PAYLOAD_SIZE = ALARM_LOG_ENTRY_COUNT * ALARM_LOG_ENTRY_SIZE + 4

_HALF_DAY = 12 * 60 * 60
UNKNOWN_MESSAGE = "Unknown"


class AlarmMessageType(enum.IntEnum):
    """Inverter family an alarm text applies to."""

    ALL = 0
    HMT = 1


@dataclass(frozen=True)
class AlarmLogEntry:
    """One decoded alarm log entry."""

    message_id: int
    message: str
    start_time: int
    end_time: int


_A = AlarmMessageType.ALL
_H = AlarmMessageType.HMT

_ALARM_MESSAGES: Tuple[Tuple[AlarmMessageType, int, str], ...] = (
    (_A, 1, "Inverter start"),
    (_A, 2, "DTU command failed"),
    (_A, 121, "Over temperature protection"),
    (_A, 124, "Shut down by remote control"),
    (_A, 125, "Grid configuration parameter error"),
    (_A, 126, "Software error code 126"),
    (_A, 127, "Firmware error"),
    (_A, 128, "Software error code 128"),
    (_A, 129, "Abnormal bias"),
    (_A, 130, "Offline"),
    (_A, 141, "Grid: Grid overvoltage"),
    (_A, 142, "Grid: 10 min value grid overvoltage"),
    (_A, 143, "Grid: Grid undervoltage"),
    (_A, 144, "Grid: Grid overfrequency"),
    (_A, 145, "Grid: Grid underfrequency"),
    (_A, 146, "Grid: Rapid grid frequency change rate"),
    (_A, 147, "Grid: Power grid outage"),
    (_A, 148, "Grid: Grid disconnection"),
    (_A, 149, "Grid: Island detected"),
    (_H, 171, "Grid: Abnormal phase difference between phase to phase"),
    (_A, 205, "MPPT-A: Input overvoltage"),
    (_A, 206, "MPPT-B: Input overvoltage"),
    (_A, 207, "MPPT-A: Input undervoltage"),
    (_A, 208, "MPPT-B: Input undervoltage"),
    (_A, 209, "PV-1: No input"),
    (_A, 210, "PV-2: No input"),
    (_A, 211, "PV-3: No input"),
    (_A, 212, "PV-4: No input"),
    (_A, 213, "MPPT-A: PV-1 & PV-2 abnormal wiring"),
    (_A, 214, "MPPT-B: PV-3 & PV-4 abnormal wiring"),
    (_A, 215, "PV-1: Input overvoltage"),
    (_H, 215, "MPPT-C: Input overvoltage"),
    (_A, 216, "PV-1: Input undervoltage"),
    (_H, 216, "MPPT-C: Input undervoltage"),
    (_A, 217, "PV-2: Input overvoltage"),
    (_H, 217, "PV-5: No input"),
    (_A, 218, "PV-2: Input undervoltage"),
    (_H, 218, "PV-6: No input"),
    (_A, 219, "PV-3: Input overvoltage"),
    (_H, 219, "MPPT-C: PV-5 & PV-6 abnormal wiring"),
    (_A, 220, "PV-3: Input undervoltage"),
    (_A, 221, "PV-4: Input overvoltage"),
    (_H, 221, "Abnormal wiring of grid neutral line"),
    (_A, 222, "PV-4: Input undervoltage"),
    (_A, 301, "Hardware error code 301"),
    (_A, 302, "Hardware error code 302"),
    (_A, 303, "Hardware error code 303"),
    (_A, 304, "Hardware error code 304"),
    (_A, 305, "Hardware error code 305"),
    (_A, 306, "Hardware error code 306"),
    (_A, 307, "Hardware error code 307"),
    (_A, 308, "Hardware error code 308"),
    (_A, 309, "Hardware error code 309"),
    (_A, 310, "Hardware error code 310"),
    (_A, 311, "Hardware error code 311"),
    (_A, 312, "Hardware error code 312"),
    (_A, 313, "Hardware error code 313"),
    (_A, 314, "Hardware error code 314"),
    (_A, 5041, "Error code-04 Port 1"),
    (_A, 5042, "Error code-04 Port 2"),
    (_A, 5043, "Error code-04 Port 3"),
    (_A, 5044, "Error code-04 Port 4"),
    (_A, 5051, "PV Input 1 Overvoltage/Undervoltage"),
    (_A, 5052, "PV Input 2 Overvoltage/Undervoltage"),
    (_A, 5053, "PV Input 3 Overvoltage/Undervoltage"),
    (_A, 5054, "PV Input 4 Overvoltage/Undervoltage"),
    (_A, 5060, "Abnormal bias"),
    (_A, 5070, "Over temperature protection"),
    (_A, 5080, "Grid Overvoltage/Undervoltage"),
    (_A, 5090, "Grid Overfrequency/Underfrequency"),
    (_A, 5100, "Island detected"),
    (_A, 5120, "EEPROM reading and writing error"),
    (_A, 5150, "10 min value grid overvoltage"),
    (_A, 5200, "Firmware error"),
    (_A, 8310, "Shut down"),
    (_A, 9000, "Microinverter is suspected of being stolen"),
)


def timezone_offset() -> int:
    """Seconds the local time zone is ahead of UTC right now."""
    now = int(time.time())
    gm = time.gmtime(now)
    as_local = time.mktime((*gm[:8], -1))
    return int(now - as_local)


@dataclass
class AlarmLogParser(Parser):
    """Collects alarm log fragments and decodes entries from them."""

    payload: bytearray = field(default_factory=lambda: bytearray(ALARM_LOG_PAYLOAD_SIZE))
    alarm_log_length: int = 0
    # Marked as failed so the log is fetched at startup.
    last_alarm_request_success: CommandStatus = CommandStatus.NOK
    message_type: AlarmMessageType = AlarmMessageType.ALL
    timezone_offset_source: Callable[[], int] = field(
        default=timezone_offset, repr=False, compare=False
    )

    def clear_buffer(self) -> None:
        self.payload[:] = bytes(ALARM_LOG_PAYLOAD_SIZE)
        self.alarm_log_length = 0

    def append_fragment(self, offset: int, payload: bytes) -> None:
        """Copy ``payload`` into the buffer at ``offset``."""
        end = offset + len(payload)
        if end > ALARM_LOG_PAYLOAD_SIZE:
            raise ValueError(
                f"alarm log packet too large for buffer ({end} > {ALARM_LOG_PAYLOAD_SIZE})"
            )
        self.payload[offset:end] = payload
        self.alarm_log_length += len(payload)

    def entry_count(self) -> int:
        """Number of complete entries held in the buffer."""
        return max(0, (self.alarm_log_length - 2) // ALARM_LOG_ENTRY_SIZE)

    def set_message_type(self, message_type: AlarmMessageType) -> None:
        self.message_type = message_type

    def _message_for(self, message_id: int) -> str:
        message = UNKNOWN_MESSAGE
        for inverter_type, msg_id, text in _ALARM_MESSAGES:
            if msg_id != message_id:
                continue
            if inverter_type == self.message_type:
                return text
            if inverter_type == AlarmMessageType.ALL:
                message = text
        return message

    def get_log_entry(self, entry_id: int) -> AlarmLogEntry:
        """Decode the entry at position ``entry_id``."""
        if not 0 <= entry_id < ALARM_LOG_ENTRY_COUNT:
            raise IndexError(f"alarm log entry {entry_id} out of range")
        start = 2 + entry_id * ALARM_LOG_ENTRY_SIZE
        p = self.payload
        tz = self.timezone_offset_source()

        wcode = (p[start] << 8) | p[start + 1]
        start_offset = _HALF_DAY if (wcode >> 13) & 0x01 else 0
        end_offset = _HALF_DAY if (wcode >> 12) & 0x01 else 0

        message_id = p[start + 1]
        start_time = ((p[start + 4] << 8) | p[start + 5]) + start_offset + tz
        end_time = (p[start + 6] << 8) | p[start + 7]
        if end_time > 0:
            end_time += end_offset + tz

        return AlarmLogEntry(
            message_id=message_id,
            message=self._message_for(message_id),
            start_time=start_time,
            end_time=end_time,
        )