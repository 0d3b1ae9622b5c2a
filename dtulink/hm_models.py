"""HM series single, dual and quad input inverter models."""

from typing import Tuple

from .hm_inverter import HmInverter
from .statistics import (
    CMD_CALC,
    ByteAssignment,
    CalcFunction,
    ChannelNum,
    ChannelType,
    FieldId,
    Unit,
)

_DC = ChannelType.DC
_AC = ChannelType.AC
_INV = ChannelType.INV
_CH0, _CH1, _CH2, _CH3 = ChannelNum.CH0, ChannelNum.CH1, ChannelNum.CH2, ChannelNum.CH3


def _field(ch_type, ch, field_id, unit, start, num, div, signed, digits) -> ByteAssignment:
    return ByteAssignment(ch_type, ch, field_id, unit, start, num, div, signed, digits)


def _calc(ch_type, ch, field_id, unit, func, arg, digits) -> ByteAssignment:
    return ByteAssignment(ch_type, ch, field_id, unit, int(func), int(arg), CMD_CALC, False, digits)


def _ac_totals() -> Tuple[ByteAssignment, ...]:
    return (
        _calc(_AC, _CH0, FieldId.YD, Unit.WH, CalcFunction.YD_CH0, 0, 0),
        _calc(_AC, _CH0, FieldId.YT, Unit.KWH, CalcFunction.YT_CH0, 0, 3),
        _calc(_AC, _CH0, FieldId.PDC, Unit.W, CalcFunction.PDC_CH0, 0, 1),
        _calc(_AC, _CH0, FieldId.EFF, Unit.PCT, CalcFunction.EFF_CH0, 0, 3),
    )


HM_1CH_ASSIGNMENT: Tuple[ByteAssignment, ...] = (
    _field(_DC, _CH0, FieldId.UDC, Unit.V, 2, 2, 10, False, 1),
    _field(_DC, _CH0, FieldId.IDC, Unit.A, 4, 2, 100, False, 2),
    _field(_DC, _CH0, FieldId.PDC, Unit.W, 6, 2, 10, False, 1),
    _field(_DC, _CH0, FieldId.YD, Unit.WH, 12, 2, 1, False, 0),
    _field(_DC, _CH0, FieldId.YT, Unit.KWH, 8, 4, 1000, False, 3),
    _calc(_DC, _CH0, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, _CH0, 3),

    _field(_AC, _CH0, FieldId.UAC, Unit.V, 14, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.IAC, Unit.A, 22, 2, 100, False, 2),
    _field(_AC, _CH0, FieldId.PAC, Unit.W, 18, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.Q, Unit.VAR, 20, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.F, Unit.HZ, 16, 2, 100, False, 2),
    _field(_AC, _CH0, FieldId.PF, Unit.NONE, 24, 2, 1000, False, 3),

    _field(_INV, _CH0, FieldId.T, Unit.C, 26, 2, 10, True, 1),
    _field(_INV, _CH0, FieldId.EVT_LOG, Unit.NONE, 28, 2, 1, False, 0),
) + _ac_totals()

HM_2CH_ASSIGNMENT: Tuple[ByteAssignment, ...] = (
    _field(_DC, _CH0, FieldId.UDC, Unit.V, 2, 2, 10, False, 1),
    _field(_DC, _CH0, FieldId.IDC, Unit.A, 4, 2, 100, False, 2),
    _field(_DC, _CH0, FieldId.PDC, Unit.W, 6, 2, 10, False, 1),
    _field(_DC, _CH0, FieldId.YD, Unit.WH, 22, 2, 1, False, 0),
    _field(_DC, _CH0, FieldId.YT, Unit.KWH, 14, 4, 1000, False, 3),
    _calc(_DC, _CH0, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, _CH0, 3),

    _field(_DC, _CH1, FieldId.UDC, Unit.V, 8, 2, 10, False, 1),
    _field(_DC, _CH1, FieldId.IDC, Unit.A, 10, 2, 100, False, 2),
    _field(_DC, _CH1, FieldId.PDC, Unit.W, 12, 2, 10, False, 1),
    _field(_DC, _CH1, FieldId.YD, Unit.WH, 24, 2, 1, False, 0),
    _field(_DC, _CH1, FieldId.YT, Unit.KWH, 18, 4, 1000, False, 3),
    _calc(_DC, _CH1, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, _CH1, 3),

    _field(_AC, _CH0, FieldId.UAC, Unit.V, 26, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.IAC, Unit.A, 34, 2, 100, False, 2),
    _field(_AC, _CH0, FieldId.PAC, Unit.W, 30, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.Q, Unit.VAR, 32, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.F, Unit.HZ, 28, 2, 100, False, 2),
    _field(_AC, _CH0, FieldId.PF, Unit.NONE, 36, 2, 1000, False, 3),

    _field(_INV, _CH0, FieldId.T, Unit.C, 38, 2, 10, True, 1),
    _field(_INV, _CH0, FieldId.EVT_LOG, Unit.NONE, 40, 2, 1, False, 0),
) + _ac_totals()

HM_4CH_ASSIGNMENT: Tuple[ByteAssignment, ...] = (
    _field(_DC, _CH0, FieldId.UDC, Unit.V, 2, 2, 10, False, 1),
    _field(_DC, _CH0, FieldId.IDC, Unit.A, 4, 2, 100, False, 2),
    _field(_DC, _CH0, FieldId.PDC, Unit.W, 8, 2, 10, False, 1),
    _field(_DC, _CH0, FieldId.YD, Unit.WH, 20, 2, 1, False, 0),
    _field(_DC, _CH0, FieldId.YT, Unit.KWH, 12, 4, 1000, False, 3),
    _calc(_DC, _CH0, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, _CH0, 3),

    _calc(_DC, _CH1, FieldId.UDC, Unit.V, CalcFunction.UDC_CH, _CH0, 1),
    _field(_DC, _CH1, FieldId.IDC, Unit.A, 6, 2, 100, False, 2),
    _field(_DC, _CH1, FieldId.PDC, Unit.W, 10, 2, 10, False, 1),
    _field(_DC, _CH1, FieldId.YD, Unit.WH, 22, 2, 1, False, 0),
    _field(_DC, _CH1, FieldId.YT, Unit.KWH, 16, 4, 1000, False, 3),
    _calc(_DC, _CH1, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, _CH1, 3),

    _field(_DC, _CH2, FieldId.UDC, Unit.V, 24, 2, 10, False, 1),
    _field(_DC, _CH2, FieldId.IDC, Unit.A, 26, 2, 100, False, 2),
    _field(_DC, _CH2, FieldId.PDC, Unit.W, 30, 2, 10, False, 1),
    _field(_DC, _CH2, FieldId.YD, Unit.WH, 42, 2, 1, False, 0),
    _field(_DC, _CH2, FieldId.YT, Unit.KWH, 34, 4, 1000, False, 3),
    _calc(_DC, _CH2, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, _CH2, 3),

    _calc(_DC, _CH3, FieldId.UDC, Unit.V, CalcFunction.UDC_CH, _CH2, 1),
    _field(_DC, _CH3, FieldId.IDC, Unit.A, 28, 2, 100, False, 2),
    _field(_DC, _CH3, FieldId.PDC, Unit.W, 32, 2, 10, False, 1),
    _field(_DC, _CH3, FieldId.YD, Unit.WH, 44, 2, 1, False, 0),
    _field(_DC, _CH3, FieldId.YT, Unit.KWH, 38, 4, 1000, False, 3),
    _calc(_DC, _CH3, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, _CH3, 3),

    _field(_AC, _CH0, FieldId.UAC, Unit.V, 46, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.IAC, Unit.A, 54, 2, 100, False, 2),
    _field(_AC, _CH0, FieldId.PAC, Unit.W, 50, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.Q, Unit.VAR, 52, 2, 10, False, 1),
    _field(_AC, _CH0, FieldId.F, Unit.HZ, 48, 2, 100, False, 2),
    _field(_AC, _CH0, FieldId.PF, Unit.NONE, 56, 2, 1000, False, 3),

    _field(_INV, _CH0, FieldId.T, Unit.C, 58, 2, 10, True, 1),
    _field(_INV, _CH0, FieldId.EVT_LOG, Unit.NONE, 60, 2, 1, False, 0),
) + _ac_totals()


def _prefix(serial: int) -> Tuple[int, int]:
    return (serial >> 40) & 0xFF, (serial >> 32) & 0xFF


def _hm_serial_matches(serial: int, family: int, low_nibbles: Tuple[int, int],
                       new_id: int, old_id: int) -> bool:
    pre0, pre1 = _prefix(serial)
    if (((pre0 << 8) | pre1) >> 4) & 0xFF == family:
        return True
    return (pre1 & 0xF0) in low_nibbles and (
        (pre0 == 0x10 and pre1 == new_id) or (pre0 == 0x11 and pre1 == old_id)
    )


class HM1CH(HmInverter):
    """Single input HM inverter."""

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _hm_serial_matches(serial, 0x12, (0x10, 0x20), 0x22, 0x21)

    def type_name(self) -> str:
        return "HM-300, HM-350, HM-400"

    def byte_assignment(self) -> Tuple[ByteAssignment, ...]:
        return HM_1CH_ASSIGNMENT


class HM2CH(HmInverter):
    """Dual input HM inverter."""

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _hm_serial_matches(serial, 0x14, (0x30, 0x40), 0x42, 0x41)

    def type_name(self) -> str:
        return "HM-600, HM-700, HM-800"

    def byte_assignment(self) -> Tuple[ByteAssignment, ...]:
        return HM_2CH_ASSIGNMENT


class HM4CH(HmInverter):
    """Quad input HM inverter."""

    @staticmethod
    def is_valid_serial(serial: int) -> bool:
        return _hm_serial_matches(serial, 0x16, (0x50, 0x60), 0x62, 0x61)

    def type_name(self) -> str:
        return "HM-1000, HM-1200, HM-1500"

    def byte_assignment(self) -> Tuple[ByteAssignment, ...]:
        return HM_4CH_ASSIGNMENT