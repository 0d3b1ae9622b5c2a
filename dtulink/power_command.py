"""State of power on/off/restart commands sent to an inverter."""

from dataclasses import dataclass

from .parser import CommandStatus, Parser


@dataclass
class PowerCommandParser(Parser):
    """Tracks the outcome of the last power control command."""

    # Nothing has been sent at startup, so assume success.
    last_power_command_success: CommandStatus = CommandStatus.OK
    last_update_command: int = 0

    def set_last_update_command(self, last_update: int) -> None:
        self.last_update_command = last_update
        self.last_update = last_update