"""Radio fragment container and serial number helpers."""

from dataclasses import dataclass

MAX_RF_PAYLOAD_SIZE = 32


def serial_to_bytes(serial: int) -> bytes:
    """Return the 64-bit serial as eight little-endian bytes."""
    if not 0 <= serial < 1 << 64:
        raise ValueError(f"serial out of 64-bit range: {serial!r}")
    return serial.to_bytes(8, "little")


@dataclass
class Fragment:
    """One packet received from, or buffered for, an inverter."""

    main_cmd: int = 0
    data: bytes = b""
    channel: int = 0
    rssi: int = 0
    was_received: bool = False

    def __post_init__(self) -> None:
        self.data = bytes(self.data)
        if len(self.data) > MAX_RF_PAYLOAD_SIZE:
            raise ValueError(
                f"fragment of {len(self.data)} bytes exceeds {MAX_RF_PAYLOAD_SIZE}"
            )

    @property
    def length(self) -> int:
        return len(self.data)