import pytest

from dtulink.statistics import (
    CMD_CALC,
    STATISTIC_PACKET_SIZE,
    ByteAssignment as BA,
    CalcFunction,
    ChannelNum,
    ChannelType,
    FieldId,
    StatisticsParser,
    Unit,
)

AC, DC, INV = ChannelType.AC, ChannelType.DC, ChannelType.INV
CH0, CH1 = ChannelNum.CH0, ChannelNum.CH1

TABLE = (
    BA(DC, CH0, FieldId.UDC, Unit.V, 2, 2, 10, False, 1),
    BA(DC, CH0, FieldId.PDC, Unit.W, 6, 2, 10, False, 1),
    BA(DC, CH0, FieldId.YT, Unit.KWH, 8, 4, 1000, False, 3),
    BA(DC, CH0, FieldId.YD, Unit.WH, 12, 2, 1, False, 0),
    BA(DC, CH0, FieldId.IRR, Unit.PCT, CalcFunction.IRR_CH, CH0, CMD_CALC, False, 3),
    BA(DC, CH1, FieldId.UDC, Unit.V, CalcFunction.UDC_CH, CH0, CMD_CALC, False, 1),
    BA(DC, CH1, FieldId.PDC, Unit.W, 14, 2, 10, False, 1),
    BA(DC, CH1, FieldId.YT, Unit.KWH, 16, 4, 1000, False, 3),
    BA(DC, CH1, FieldId.YD, Unit.WH, 20, 2, 1, False, 0),
    BA(AC, CH0, FieldId.PAC, Unit.W, 22, 2, 10, False, 1),
    BA(INV, CH0, FieldId.T, Unit.C, 24, 2, 10, True, 1),
    BA(AC, CH0, FieldId.YT, Unit.KWH, CalcFunction.YT_CH0, 0, CMD_CALC, False, 3),
    BA(AC, CH0, FieldId.YD, Unit.WH, CalcFunction.YD_CH0, 0, CMD_CALC, False, 0),
    BA(AC, CH0, FieldId.PDC, Unit.W, CalcFunction.PDC_CH0, 0, CMD_CALC, False, 1),
    BA(AC, CH0, FieldId.EFF, Unit.PCT, CalcFunction.EFF_CH0, 0, CMD_CALC, False, 3),
)

VALUES = {
    2: (300, 2),
    6: (1500, 2),
    8: (123456, 4),
    12: (500, 2),
    14: (1000, 2),
    16: (2000, 4),
    20: (250, 2),
    22: (2500, 2),
    24: (-55, 2),
}


def _payload(values=VALUES) -> bytes:
    buf = bytearray(26)
    for offset, (value, size) in values.items():
        buf[offset:offset + size] = value.to_bytes(size, "big", signed=value < 0)
    return bytes(buf)


def _parser(values=VALUES) -> StatisticsParser:
    parser = StatisticsParser()
    parser.set_byte_assignment(TABLE)
    parser.append_fragment(0, _payload(values))
    return parser


def test_unsigned_value_scaled():
    assert _parser().get_channel_field_value(DC, CH0, FieldId.UDC) == 30.0


def test_signed_temperature():
    assert _parser().get_channel_field_value(INV, CH0, FieldId.T) == pytest.approx(-5.5)


def test_four_byte_yield():
    assert _parser().get_channel_field_value(DC, CH0, FieldId.YT) == pytest.approx(123.456)


def test_yield_total_is_sum_of_dc_channels():
    p = _parser()
    expected = p.get_channel_field_value(DC, CH0, FieldId.YT) + p.get_channel_field_value(DC, CH1, FieldId.YT)
    assert p.get_channel_field_value(AC, CH0, FieldId.YT) == pytest.approx(expected)


def test_yield_day_is_sum_of_dc_channels():
    p = _parser()
    expected = p.get_channel_field_value(DC, CH0, FieldId.YD) + p.get_channel_field_value(DC, CH1, FieldId.YD)
    assert p.get_channel_field_value(AC, CH0, FieldId.YD) == pytest.approx(expected)


def test_dc_power_is_sum_of_dc_channels():
    p = _parser()
    expected = p.get_channel_field_value(DC, CH0, FieldId.PDC) + p.get_channel_field_value(DC, CH1, FieldId.PDC)
    assert p.get_channel_field_value(AC, CH0, FieldId.PDC) == pytest.approx(expected)


def test_udc_copied_from_source_channel():
    p = _parser()
    assert p.get_channel_field_value(DC, CH1, FieldId.UDC) == p.get_channel_field_value(DC, CH0, FieldId.UDC)


def test_efficiency_full_when_ac_equals_dc():
    assert _parser().get_channel_field_value(AC, CH0, FieldId.EFF) == pytest.approx(100.0)


def test_efficiency_zero_without_dc_power():
    values = dict(VALUES)
    values[6] = (0, 2)
    values[14] = (0, 2)
    assert _parser(values).get_channel_field_value(AC, CH0, FieldId.EFF) == 0.0


def test_irradiation():
    p = _parser()
    assert p.get_channel_field_value(DC, CH0, FieldId.IRR) == 0.0
    p.set_string_max_power(0, 150)
    assert p.get_channel_field_value(DC, CH0, FieldId.IRR) == pytest.approx(100.0)


def test_missing_field_is_zero():
    p = _parser()
    assert not p.has_channel_field_value(DC, CH0, FieldId.F)
    assert p.has_channel_field_value(DC, CH0, FieldId.UDC)
    assert p.get_channel_field_value(DC, CH0, FieldId.F) == 0.0


def test_offset_applied_only_with_data():
    p = StatisticsParser()
    p.set_byte_assignment(TABLE)
    p.set_channel_field_offset(DC, CH0, FieldId.YT, 2.5)
    assert p.get_channel_field_value(DC, CH0, FieldId.YT) == 0.0
    p.append_fragment(0, _payload())
    with_offset = p.get_channel_field_value(DC, CH0, FieldId.YT)
    p.set_channel_field_offset(DC, CH0, FieldId.YT, 0.0)
    assert with_offset == pytest.approx(p.get_channel_field_value(DC, CH0, FieldId.YT) + 2.5)


def test_offset_setting_updated_in_place():
    p = StatisticsParser()
    assert p.get_channel_field_offset(DC, CH0, FieldId.YT) == 0.0
    p.set_channel_field_offset(DC, CH0, FieldId.YT, 1.0)
    p.set_channel_field_offset(DC, CH0, FieldId.YT, 3.0)
    assert len(p.field_settings) == 1
    assert p.get_channel_field_offset(DC, CH0, FieldId.YT) == 3.0


def test_field_metadata():
    p = _parser()
    assert p.get_channel_field_unit(DC, CH0, FieldId.UDC) == "V"
    assert p.get_channel_field_unit(INV, CH0, FieldId.T) == "°C"
    assert p.get_channel_field_name(INV, CH0, FieldId.T) == "Temperature"
    assert p.get_channel_field_digits(DC, CH0, FieldId.YT) == 3


def test_metadata_of_missing_field_raises():
    with pytest.raises(KeyError):
        _parser().get_channel_field_unit(DC, CH0, FieldId.F)


def test_channel_types_and_names():
    p = StatisticsParser()
    assert p.channel_types() == [AC, DC, INV]
    assert [p.channel_type_name(t) for t in p.channel_types()] == ["AC", "DC", "INV"]


def test_channels_by_type():
    p = _parser()
    assert p.get_channels_by_type(DC) == [CH0, CH1]
    assert p.get_channels_by_type(AC) == [CH0]


def test_channels_by_type_merges_only_adjacent_repeats():
    p = StatisticsParser()
    p.set_byte_assignment(
        (
            BA(DC, CH0, FieldId.UDC, Unit.V, 0, 2, 10, False, 1),
            BA(DC, CH1, FieldId.UDC, Unit.V, 2, 2, 10, False, 1),
            BA(DC, CH0, FieldId.IDC, Unit.A, 4, 2, 100, False, 2),
        )
    )
    assert p.get_channels_by_type(DC) == [CH0, CH1, CH0]


def test_string_max_power_bounds():
    p = StatisticsParser()
    p.set_string_max_power(5, 400)
    p.set_string_max_power(6, 400)
    assert p.get_string_max_power(5) == 400
    assert len(p.string_max_power) == 6
    with pytest.raises(IndexError):
        p.get_string_max_power(6)


def test_rx_failure_count():
    p = StatisticsParser()
    p.increment_rx_failure_count()
    p.increment_rx_failure_count()
    assert p.rx_failure_count == 2
    p.reset_rx_failure_count()
    assert p.rx_failure_count == 0


def test_append_overflow_and_clear():
    p = _parser()
    with pytest.raises(ValueError):
        p.append_fragment(STATISTIC_PACKET_SIZE - 1, b"\x00\x00")
    p.clear_buffer()
    assert p.statistic_length == 0
    assert p.get_channel_field_value(DC, CH0, FieldId.UDC) == 0.0