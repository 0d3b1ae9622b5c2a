"""CRC routines used on the inverter radio link."""

CRC8_INIT = 0x00
CRC8_POLY = 0x01

CRC16_MODBUS_POLYNOM = 0xA001
CRC16_NRF24_POLYNOM = 0x1021


def crc8(data: bytes) -> int:
    """Return the 8-bit checksum that terminates every radio frame."""
    crc = CRC8_INIT
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = ((crc << 1) ^ (CRC8_POLY if crc & 0x80 else 0x00)) & 0xFF
    return crc


def crc16(data: bytes, start: int = 0xFFFF) -> int:
    """Return the Modbus CRC-16 of ``data``, continuing from ``start``."""
    crc = start & 0xFFFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            shift = crc & 0x0001
            crc >>= 1
            if shift:
                crc ^= CRC16_MODBUS_POLYNOM
    return crc


def crc16_nrf24(
    data: bytes, len_bits: int, start_bit: int = 0, crc_in: int = 0xFFFF
) -> int:
    """Return the bitwise CRC-16 used by the nRF24 packet layer.

    Bits are taken most significant first, from ``start_bit`` up to but not
    including ``len_bits``.
    """
    crc = crc_in & 0xFFFF
    value = data[start_bit >> 3] if start_bit < len_bits else 0
    for bit in range(start_bit, len_bits):
        idx = bit & 0x07
        if idx == 0:
            value = data[bit >> 3]
        crc ^= 0x8000 & (value << (8 + idx))
        if crc & 0x8000:
            crc = ((crc << 1) ^ CRC16_NRF24_POLYNOM) & 0xFFFF
        else:
            crc = (crc << 1) & 0xFFFF
    return crc