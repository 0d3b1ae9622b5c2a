"""Parser for the system configuration parameter response."""

from dataclasses import dataclass, field

from .parser import CommandStatus, Parser

SYSTEM_CONFIG_PARA_SIZE = 16


@dataclass
class SystemConfigParaParser(Parser):
    """Holds the power limit and the state of limit commands and requests."""

    payload: bytearray = field(default_factory=lambda: bytearray(SYSTEM_CONFIG_PARA_SIZE))
    payload_length: int = 0
    # Nothing has been sent at startup, so assume the command succeeded.
    last_limit_command_success: CommandStatus = CommandStatus.OK
    # Marked as failed so the limit is fetched at startup.
    last_limit_request_success: CommandStatus = CommandStatus.NOK
    last_update_command: int = 0
    last_update_request: int = 0

    def clear_buffer(self) -> None:
        self.payload[:] = bytes(SYSTEM_CONFIG_PARA_SIZE)
        self.payload_length = 0

    def append_fragment(self, offset: int, payload: bytes) -> None:
        """Copy ``payload`` into the buffer at ``offset``."""
        end = offset + len(payload)
        if end > SYSTEM_CONFIG_PARA_SIZE:
            raise ValueError(
                f"system config packet too large for buffer ({end} > {SYSTEM_CONFIG_PARA_SIZE})"
            )
        self.payload[offset:end] = payload
        self.payload_length += len(payload)

    def get_limit_percent(self) -> float:
        return ((self.payload[2] << 8) | self.payload[3]) / 10.0

    def set_limit_percent(self, value: float) -> None:
        raw = int(value * 10) & 0xFFFF
        self.payload[2] = raw >> 8
        self.payload[3] = raw & 0xFF

    def set_last_update_command(self, last_update: int) -> None:
        self.last_update_command = last_update
        self.last_update = last_update

    def set_last_update_request(self, last_update: int) -> None:
        self.last_update_request = last_update
        self.last_update = last_update