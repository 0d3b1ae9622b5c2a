"""State and fragment handling common to every inverter model."""

import abc
import enum
import logging
from typing import Any, List, Sequence, Union

from .alarm_log import AlarmLogParser
from .dev_info import DevInfoParser
from .fragment import MAX_RF_PAYLOAD_SIZE, Fragment
from .power_command import PowerCommandParser
from .statistics import ByteAssignment, ChannelType, FieldId, StatisticsParser
from .system_config import SystemConfigParaParser

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 32
MAX_RF_FRAGMENT_COUNT = 13
MAX_ONLINE_FAILURE_COUNT = 2


class FragmentResult(enum.IntEnum):
    """Outcome of checking the received fragments; other ids ask for a retransmit."""

    ALL_MISSING_RESEND = 255
    ALL_MISSING_TIMEOUT = 254
    RETRANSMIT_TIMEOUT = 253
    HANDLE_ERROR = 252
    OK = 0


class Inverter(abc.ABC):
    """An inverter reachable over a radio, with its parsed data."""

    def __init__(self, radio: Any, serial: int) -> None:
        self.serial = serial
        self.radio = radio
        self._name = ""
        self.enable_polling = True
        self.enable_commands = True

        self.event_log = AlarmLogParser()
        self.dev_info = DevInfoParser()
        self.power_command = PowerCommandParser()
        self.statistics = StatisticsParser()
        self.system_config_para = SystemConfigParaParser()

        self._rx_fragments: List[Fragment] = []
        self._rx_max_packet_id = 0
        self._rx_last_packet_id = 0
        self._rx_retransmit_count = 0
        self.clear_rx_fragment_buffer()

    def init(self) -> None:
        """Load the model's field layout into the statistics parser."""
        self.statistics.set_byte_assignment(self.byte_assignment())

    def serial_string(self) -> str:
        """Serial as hex: high word unpadded, low word padded to 8 digits."""
        high = (self.serial >> 32) & 0xFFFFFFFF
        low = self.serial & 0xFFFFFFFF
        return f"{high:x}{low:08x}"

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        """Set the display name, truncated to the maximum length."""
        self._name = name[: MAX_NAME_LENGTH - 1]

    @abc.abstractmethod
    def type_name(self) -> str:
        """Names of the models this class handles."""

    @abc.abstractmethod
    def byte_assignment(self) -> Sequence[ByteAssignment]:
        """Layout of the run data fields for this model."""

    def is_producing(self) -> bool:
        total_ac = sum(
            self.statistics.get_channel_field_value(ChannelType.AC, ch, FieldId.PAC)
            for ch in self.statistics.get_channels_by_type(ChannelType.AC)
            if self.statistics.has_channel_field_value(ChannelType.AC, ch, FieldId.PAC)
        )
        return self.enable_polling and total_ac > 0

    def is_reachable(self) -> bool:
        return (
            self.enable_polling
            and self.statistics.rx_failure_count <= MAX_ONLINE_FAILURE_COUNT
        )

    def clear_rx_fragment_buffer(self) -> None:
        self._rx_fragments = [Fragment() for _ in range(MAX_RF_FRAGMENT_COUNT)]
        self._rx_max_packet_id = 0
        self._rx_last_packet_id = 0
        self._rx_retransmit_count = 0

    def add_rx_fragment(self, fragment: bytes) -> None:
        """Store a raw received packet (header, body and CRC-8) by its number."""
        length = len(fragment)
        if length < 11:
            raise ValueError("fragment too short")
        if length - 11 > MAX_RF_PAYLOAD_SIZE:
            raise ValueError("fragment too large")

        fragment_count = fragment[9]
        if fragment_count == 0:
            raise ValueError("fragment number zero received")

        number = fragment_count & 0x7F
        if 1 <= number < MAX_RF_FRAGMENT_COUNT:
            self._rx_fragments[number - 1] = Fragment(
                main_cmd=fragment[0],
                data=bytes(fragment[10 : length - 1]),
                was_received=True,
            )
            self._rx_last_packet_id = max(self._rx_last_packet_id, number)

        if fragment_count & 0x80:
            self._rx_max_packet_id = number

    def _retransmit_or_timeout(self, command: Any, fragment_id: int) -> Union[FragmentResult, int]:
        previous = self._rx_retransmit_count
        self._rx_retransmit_count += 1
        if previous < command.max_retransmit_count():
            return fragment_id
        command.got_timeout(self)
        return FragmentResult.RETRANSMIT_TIMEOUT

    def verify_all_fragments(self, command: Any) -> Union[FragmentResult, int]:
        """Check the received fragments against ``command``.

        Returns FragmentResult.OK on success, another FragmentResult on
        failure, or the number of a fragment that must be re-requested.
        """
        if self._rx_last_packet_id == 0:
            logger.debug("All missing")
            if command.send_count <= command.max_resend_count():
                return FragmentResult.ALL_MISSING_RESEND
            command.got_timeout(self)
            return FragmentResult.ALL_MISSING_TIMEOUT

        if self._rx_max_packet_id == 0:
            logger.debug("Last missing")
            return self._retransmit_or_timeout(command, self._rx_last_packet_id + 1)

        for i in range(self._rx_max_packet_id - 1):
            if i >= len(self._rx_fragments) or not self._rx_fragments[i].was_received:
                logger.debug("Middle missing")
                return self._retransmit_or_timeout(command, i + 1)

        received = self._rx_fragments[: self._rx_max_packet_id]
        if not command.handle_response(self, received):
            command.got_timeout(self)
            return FragmentResult.HANDLE_ERROR

        return FragmentResult.OK

    def send_change_channel_request(self) -> bool:
        """Models on a fixed channel have nothing to send."""
        return False