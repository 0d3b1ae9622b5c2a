"""Parser for the real-time run data (statistics) response."""

import enum
from dataclasses import dataclass, field
from itertools import groupby
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .parser import Parser

STATISTIC_PACKET_SIZE = 7 * 16
CMD_CALC = 0xFFFF
CH_CNT = 6


class Unit(enum.IntEnum):
    V = 0
    A = 1
    W = 2
    WH = 3
    KWH = 4
    HZ = 5
    C = 6
    PCT = 7
    VAR = 8
    NONE = 9

    @property
    def symbol(self) -> str:
        return _UNIT_SYMBOLS[self]


_UNIT_SYMBOLS = ("V", "A", "W", "Wh", "kWh", "Hz", "°C", "%", "var", "")


class FieldId(enum.IntEnum):
    UDC = 0
    IDC = 1
    PDC = 2
    YD = 3
    YT = 4
    UAC = 5
    IAC = 6
    PAC = 7
    F = 8
    T = 9
    PF = 10
    EFF = 11
    IRR = 12
    Q = 13
    EVT_LOG = 14
    UAC_1N = 15
    UAC_2N = 16
    UAC_3N = 17
    UAC_12 = 18
    UAC_23 = 19
    UAC_31 = 20
    IAC_1 = 21
    IAC_2 = 22
    IAC_3 = 23

    @property
    def label(self) -> str:
        return _FIELD_NAMES[self]


_FIELD_NAMES = (
    "Voltage", "Current", "Power", "YieldDay", "YieldTotal",
    "Voltage", "Current", "Power", "Frequency", "Temperature", "PowerFactor",
    "Efficiency", "Irradiation", "ReactivePower", "EventLogCount",
    "Voltage Ph1-N", "Voltage Ph2-N", "Voltage Ph3-N", "Voltage Ph1-Ph2",
    "Voltage Ph2-Ph3", "Voltage Ph3-Ph1", "Current Ph1", "Current Ph2", "Current Ph3",
)


class CalcFunction(enum.IntEnum):
    """Derived values; used as ``start`` in an assignment whose div is CMD_CALC."""

    YT_CH0 = 0
    YD_CH0 = 1
    UDC_CH = 2
    PDC_CH0 = 3
    EFF_CH0 = 4
    IRR_CH = 5


class ChannelNum(enum.IntEnum):
    CH0 = 0
    CH1 = 1
    CH2 = 2
    CH3 = 3
    CH4 = 4
    CH5 = 5


class ChannelType(enum.IntEnum):
    AC = 0
    DC = 1
    INV = 2


@dataclass(frozen=True)
class ByteAssignment:
    """Where a field lives in the payload and how to scale it."""

    channel_type: ChannelType
    channel: ChannelNum
    field_id: FieldId
    unit: Unit
    start: int
    num: int
    div: int
    is_signed: bool
    digits: int


@dataclass
class FieldSetting:
    """A user supplied offset added to a decoded field."""

    channel_type: ChannelType
    channel: ChannelNum
    field_id: FieldId
    offset: float


@dataclass
class StatisticsParser(Parser):
    """Decodes measured and derived values from run data fragments."""

    payload: bytearray = field(default_factory=lambda: bytearray(STATISTIC_PACKET_SIZE))
    statistic_length: int = 0
    string_max_power: List[int] = field(default_factory=lambda: [0] * CH_CNT)
    byte_assignment: Tuple[ByteAssignment, ...] = ()
    field_settings: List[FieldSetting] = field(default_factory=list)
    rx_failure_count: int = 0

    def clear_buffer(self) -> None:
        self.payload[:] = bytes(STATISTIC_PACKET_SIZE)
        self.statistic_length = 0

    def append_fragment(self, offset: int, payload: bytes) -> None:
        """Copy ``payload`` into the buffer at ``offset``."""
        end = offset + len(payload)
        if end > STATISTIC_PACKET_SIZE:
            raise ValueError(
                f"stats packet too large for buffer ({end} > {STATISTIC_PACKET_SIZE})"
            )
        self.payload[offset:end] = payload
        self.statistic_length += len(payload)

    def set_byte_assignment(self, assignments: Sequence[ByteAssignment]) -> None:
        self.byte_assignment = tuple(assignments)

    def get_assignment(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> Optional[ByteAssignment]:
        for a in self.byte_assignment:
            if a.channel_type == channel_type and a.channel == channel and a.field_id == field_id:
                return a
        return None

    def get_setting(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> Optional[FieldSetting]:
        for s in self.field_settings:
            if s.channel_type == channel_type and s.channel == channel and s.field_id == field_id:
                return s
        return None

    def _require(self, channel_type, channel, field_id) -> ByteAssignment:
        pos = self.get_assignment(channel_type, channel, field_id)
        if pos is None:
            raise KeyError(f"no field {field_id!r} on {channel_type!r} channel {channel!r}")
        return pos

    def get_channel_field_value(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> float:
        """Decoded value of a field, or 0.0 if the model has no such field."""
        pos = self.get_assignment(channel_type, channel, field_id)
        if pos is None:
            return 0.0
        if pos.div == CMD_CALC:
            return self._calc_functions()[CalcFunction(pos.start)](pos.num)

        raw = bytes(self.payload[pos.start:pos.start + pos.num])
        signed = pos.is_signed and pos.num in (2, 4)
        value = int.from_bytes(raw, "big", signed=signed)
        if not signed:
            value &= 0xFFFFFFFF
        result = float(value) / float(pos.div)
        setting = self.get_setting(channel_type, channel, field_id)
        if setting is not None and self.statistic_length > 0:
            result += setting.offset
        return result

    def has_channel_field_value(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> bool:
        return self.get_assignment(channel_type, channel, field_id) is not None

    def get_channel_field_unit(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> str:
        return Unit(self._require(channel_type, channel, field_id).unit).symbol

    def get_channel_field_name(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> str:
        return FieldId(self._require(channel_type, channel, field_id).field_id).label

    def get_channel_field_digits(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> int:
        return self._require(channel_type, channel, field_id).digits

    def get_channel_field_offset(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId
    ) -> float:
        setting = self.get_setting(channel_type, channel, field_id)
        return setting.offset if setting is not None else 0.0

    def set_channel_field_offset(
        self, channel_type: ChannelType, channel: ChannelNum, field_id: FieldId, offset: float
    ) -> None:
        setting = self.get_setting(channel_type, channel, field_id)
        if setting is not None:
            setting.offset = offset
        else:
            self.field_settings.append(FieldSetting(channel_type, channel, field_id, offset))

    def channel_types(self) -> List[ChannelType]:
        return [ChannelType.AC, ChannelType.DC, ChannelType.INV]

    def channel_type_name(self, channel_type: ChannelType) -> str:
        return ChannelType(channel_type).name

    def get_channels_by_type(self, channel_type: ChannelType) -> List[ChannelNum]:
        """Channels of a type in table order; only adjacent repeats are merged."""
        channels = [a.channel for a in self.byte_assignment if a.channel_type == channel_type]
        return [ch for ch, _ in groupby(channels)]

    def get_string_max_power(self, channel: int) -> int:
        return self.string_max_power[channel]

    def set_string_max_power(self, channel: int, power: int) -> None:
        """Set a string's rated power; channels beyond the last are ignored."""
        if 0 <= channel < len(self.string_max_power):
            self.string_max_power[channel] = power

    def reset_rx_failure_count(self) -> None:
        self.rx_failure_count = 0

    def increment_rx_failure_count(self) -> None:
        self.rx_failure_count += 1

    def _calc_functions(self) -> Dict[CalcFunction, Callable[[int], float]]:
        return {
            CalcFunction.YT_CH0: self._calc_yield_total,
            CalcFunction.YD_CH0: self._calc_yield_day,
            CalcFunction.UDC_CH: self._calc_udc,
            CalcFunction.PDC_CH0: self._calc_power_dc,
            CalcFunction.EFF_CH0: self._calc_efficiency,
            CalcFunction.IRR_CH: self._calc_irradiation,
        }

    def _sum_over(self, channel_type: ChannelType, field_id: FieldId) -> float:
        return sum(
            self.get_channel_field_value(channel_type, ch, field_id)
            for ch in self.get_channels_by_type(channel_type)
        )

    def _calc_yield_total(self, _arg: int) -> float:
        return self._sum_over(ChannelType.DC, FieldId.YT)

    def _calc_yield_day(self, _arg: int) -> float:
        return self._sum_over(ChannelType.DC, FieldId.YD)

    def _calc_udc(self, arg: int) -> float:
        return self.get_channel_field_value(ChannelType.DC, ChannelNum(arg), FieldId.UDC)

    def _calc_power_dc(self, _arg: int) -> float:
        return self._sum_over(ChannelType.DC, FieldId.PDC)

    def _calc_efficiency(self, _arg: int) -> float:
        ac_power = self._sum_over(ChannelType.AC, FieldId.PAC)
        dc_power = self._sum_over(ChannelType.DC, FieldId.PDC)
        if dc_power > 0:
            return ac_power / dc_power * 100.0
        return 0.0

    def _calc_irradiation(self, arg: int) -> float:
        max_power = self.get_string_max_power(arg)
        if max_power > 0:
            pdc = self.get_channel_field_value(ChannelType.DC, ChannelNum(arg), FieldId.PDC)
            return pdc / max_power * 100.0
        return 0.0