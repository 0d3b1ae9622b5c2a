"""Radio command frames sent from the DTU to an inverter."""

import abc
from typing import Any, Optional, Sequence, TextIO

from .crc import crc8, crc16
from .fragment import Fragment, serial_to_bytes

RF_LEN = 32
MAX_RESEND_COUNT = 4  # used if all fragments are missing
MAX_RETRANSMIT_COUNT = 5  # used to re-request a single missing fragment


def _packet_id(serial: int) -> bytes:
    """Low 32 bits of a serial, most significant byte first."""
    return serial_to_bytes(serial)[3::-1]


class Command(abc.ABC):
    """A command frame: header, addresses, body and trailing CRC-8."""

    def __init__(self, target_address: int = 0, router_address: int = 0) -> None:
        self.payload = bytearray(RF_LEN)
        self.payload_size = 0
        self._target_address = 0
        self._router_address = 0
        self.set_target_address(target_address)
        self.set_router_address(router_address)
        self.send_count = 0
        self.timeout = 0

    @property
    def target_address(self) -> int:
        return self._target_address

    @property
    def router_address(self) -> int:
        return self._router_address

    def data_payload(self) -> bytes:
        """The frame as sent: body followed by its CRC-8."""
        self.payload[self.payload_size] = crc8(self.payload[: self.payload_size])
        return bytes(self.payload[: self.data_size()])

    def dump_data_payload(self, stream: TextIO) -> None:
        """Write the frame as hex bytes and a newline to ``stream``."""
        stream.write("".join(f"{b:02X} " for b in self.data_payload()) + "\n")

    def data_size(self) -> int:
        return self.payload_size + 1

    def set_target_address(self, address: int) -> None:
        self.payload[1:5] = _packet_id(address)
        self._target_address = address

    def set_router_address(self, address: int) -> None:
        self.payload[5:9] = _packet_id(address)
        self._router_address = address

    @abc.abstractmethod
    def command_name(self) -> str:
        """Human readable name of the command."""

    def increment_send_count(self) -> int:
        """Count one more transmission; returns the count before it."""
        previous = self.send_count
        self.send_count = (self.send_count + 1) & 0xFF
        return previous

    def get_request_frame_command(self, frame_no: int) -> Optional["Command"]:
        """Command that re-requests one fragment, if the command supports it."""
        return None

    @abc.abstractmethod
    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        """Process the received fragments; False if they are unusable."""

    def got_timeout(self, inverter: Any) -> None:
        """Called when no usable answer arrived."""

    def max_resend_count(self) -> int:
        return MAX_RESEND_COUNT

    def max_retransmit_count(self) -> int:
        return MAX_RETRANSMIT_COUNT


class DevControlCommand(Command):
    """Device control frame, answered with main command 0xD1."""

    def __init__(self, target_address: int = 0, router_address: int = 0) -> None:
        super().__init__(target_address, router_address)
        self.payload[0] = 0x51
        self.payload[9] = 0x81
        self.timeout = 1000

    def update_crc(self, length: int) -> None:
        """Write the CRC-16 of ``length`` body bytes right after them."""
        crc = crc16(self.payload[10 : 10 + length])
        self.payload[10 + length] = crc >> 8
        self.payload[11 + length] = crc & 0xFF

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        expected = self.payload[0] | 0x80
        return all(f.main_cmd == expected for f in fragments)


class SingleDataCommand(Command):
    """Frame with main command 0x15 expecting a single answer."""

    def __init__(self, target_address: int = 0, router_address: int = 0) -> None:
        super().__init__(target_address, router_address)
        self.payload[0] = 0x15
        self.timeout = 100


class RequestFrameCommand(SingleDataCommand):
    """Asks the inverter to resend one numbered fragment."""

    def __init__(
        self, target_address: int = 0, router_address: int = 0, frame_no: int = 0
    ) -> None:
        super().__init__(target_address, router_address)
        if frame_no > 127:
            frame_no = 0
        self.set_frame_no(frame_no)
        self.payload_size = 10

    def command_name(self) -> str:
        return "RequestFrame"

    def set_frame_no(self, frame_no: int) -> None:
        self.payload[9] = (frame_no | 0x80) & 0xFF

    def frame_no(self) -> int:
        return self.payload[9] & 0x7F

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        return True


class MultiDataCommand(Command):
    """Request answered by several fragments protected by one CRC-16."""

    def __init__(
        self,
        target_address: int = 0,
        router_address: int = 0,
        data_type: int = 0,
        time: int = 0,
    ) -> None:
        super().__init__(target_address, router_address)
        self._request_frame = RequestFrameCommand()
        self.payload[0] = 0x15
        self.payload[9] = 0x80
        self.set_data_type(data_type)
        self.payload[11] = 0x00
        self.set_time(time)
        self.payload[16:24] = bytes(8)  # gap and password
        self.update_crc()
        self.payload_size = 26

    def set_data_type(self, data_type: int) -> None:
        self.payload[10] = data_type & 0xFF
        self.update_crc()

    def data_type(self) -> int:
        return self.payload[10]

    def set_time(self, time: int) -> None:
        """Store the low 32 bits of a Unix time in the frame."""
        self.payload[12:16] = (time & 0xFFFFFFFF).to_bytes(4, "big")
        self.update_crc()

    def get_time(self) -> int:
        return int.from_bytes(self.payload[12:16], "big")

    def get_request_frame_command(self, frame_no: int) -> RequestFrameCommand:
        self._request_frame.set_target_address(self.target_address)
        self._request_frame.set_frame_no(frame_no)
        return self._request_frame

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        """True if the CRC-16 over all fragments matches the received one."""
        if not fragments or fragments[-1].length < 2:
            return False
        crc = 0xFFFF
        for fragment in fragments[:-1]:
            crc = crc16(fragment.data, crc)
        last = fragments[-1].data
        crc = crc16(last[:-2], crc)
        return crc == int.from_bytes(last[-2:], "big")

    def update_crc(self) -> None:
        crc = crc16(self.payload[10:24])  # from data type to password
        self.payload[24] = crc >> 8
        self.payload[25] = crc & 0xFF


class ParaSetCommand(Command):
    """Parameter set frame with main command 0x52."""

    def __init__(self, target_address: int = 0, router_address: int = 0) -> None:
        super().__init__(target_address, router_address)
        self.payload[0] = 0x52


class ChannelChangeCommand(Command):
    """Tells an inverter to move to another radio channel."""

    def __init__(
        self, target_address: int = 0, router_address: int = 0, channel: int = 0
    ) -> None:
        super().__init__(target_address, router_address)
        self.payload[0] = 0x56
        self.payload[9] = 0x02
        self.payload[10] = 0x15
        self.payload[11] = 0x21
        self.payload[13] = 0x14
        self.payload_size = 14
        self.set_channel(channel)
        self.timeout = 10

    def command_name(self) -> str:
        return "ChannelChangeCommand"

    def set_channel(self, channel: int) -> None:
        self.payload[12] = channel & 0xFF

    def channel(self) -> int:
        return self.payload[12]

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        return True

    def max_resend_count(self) -> int:
        # This command is never answered, so resending is pointless.
        return 0