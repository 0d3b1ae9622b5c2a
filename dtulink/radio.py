"""Common behaviour of the inverter radio transports."""

import abc
import logging
from collections import deque
from typing import Any, Deque, Type, TypeVar

from .crc import crc8
from .fragment import Fragment, serial_to_bytes

logger = logging.getLogger(__name__)

T = TypeVar("T")


def convert_serial_to_radio_id(serial: int) -> int:
    """Build the radio pipe address for an inverter or DTU serial."""
    low = serial_to_bytes(serial)[:4]
    return (int.from_bytes(low, "big") << 8) | 0x01


class HoymilesRadio(abc.ABC):
    """Command queue and fragment checks shared by every radio."""

    def __init__(self) -> None:
        self.dtu_serial = 0
        self.command_queue: Deque[Any] = deque()
        self._initialized = False
        self._busy = False

    def set_dtu_serial(self, serial: int) -> None:
        self.dtu_serial = serial

    def is_idle(self) -> bool:
        return not self._busy

    def is_queue_empty(self) -> bool:
        return not self.command_queue

    def is_initialized(self) -> bool:
        return self._initialized

    def enqueue_command(self, command_class: Type[T]) -> T:
        """Create a command of the given class, queue it and return it."""
        command = command_class()
        self.command_queue.append(command)
        return command

    def check_fragment_crc(self, fragment: Fragment) -> bool:
        """True if the fragment's last byte is the CRC-8 of the rest."""
        data = fragment.data
        if not data:
            return False
        return crc8(data[:-1]) == data[-1]

    @abc.abstractmethod
    def send_esb_packet(self, command: Any) -> None:
        """Transmit one command over the air."""

    def send_retransmit_packet(self, fragment_id: int) -> None:
        """Ask the inverter to resend one fragment of the current command."""
        command = self.command_queue[0]
        request = command.get_request_frame_command(fragment_id)
        if request is not None:
            self.send_esb_packet(request)

    def send_last_packet_again(self) -> None:
        self.send_esb_packet(self.command_queue[0])

    def dump_buf(self, data: bytes) -> str:
        """Format bytes as hex, log them and return the text."""
        text = "".join(f"{b:02X} " for b in data)
        logger.debug("%s", text)
        return text