"""Commands that query or control a specific inverter function."""

import enum
import logging
from typing import Any, Callable, Sequence

from .commands import DevControlCommand, MultiDataCommand
from .fragment import Fragment
from .parser import CommandStatus
from .timeout import millis

logger = logging.getLogger(__name__)

_ACTIVE_POWER_CRC_SIZE = 6
_POWER_CONTROL_CRC_SIZE = 2


class PowerLimitControlType(enum.IntEnum):
    """How a power limit is to be interpreted by the inverter."""

    ABSOLUTE_NON_PERSISTENT = 0x0000
    RELATIVE_NON_PERSISTENT = 0x0001
    ABSOLUTE_PERSISTENT = 0x0100
    RELATIVE_PERSISTENT = 0x0101

    @property
    def is_relative(self) -> bool:
        return self in (
            PowerLimitControlType.RELATIVE_NON_PERSISTENT,
            PowerLimitControlType.RELATIVE_PERSISTENT,
        )


def _collect(
    fragments: Sequence[Fragment],
    clear: Callable[[], None],
    append: Callable[[int, bytes], None],
) -> None:
    """Clear a parser buffer and copy every fragment into it in order."""
    clear()
    offset = 0
    for fragment in fragments:
        try:
            append(offset, fragment.data)
        except ValueError as exc:
            logger.error("%s", exc)
        offset += fragment.length


class ActivePowerControlCommand(DevControlCommand):
    """Sets the active power limit of an inverter."""

    def __init__(self, target_address: int = 0, router_address: int = 0) -> None:
        super().__init__(target_address, router_address)
        self.payload[10] = 0x0B
        self.payload[11:16] = bytes(5)
        self.update_crc(_ACTIVE_POWER_CRC_SIZE)
        self.payload_size = 18
        self.timeout = 2000

    def command_name(self) -> str:
        return "ActivePowerControl"

    def set_active_power_limit(
        self,
        limit: float,
        limit_type: PowerLimitControlType = PowerLimitControlType.RELATIVE_NON_PERSISTENT,
    ) -> None:
        raw = int(limit * 10) & 0xFFFF
        self.payload[12:14] = raw.to_bytes(2, "big")
        self.payload[14:16] = int(limit_type).to_bytes(2, "big")
        self.update_crc(_ACTIVE_POWER_CRC_SIZE)

    def limit(self) -> float:
        """The limit in whole units (the tenths are dropped)."""
        raw = int.from_bytes(self.payload[12:14], "big")
        return float(raw // 10)

    def limit_type(self) -> PowerLimitControlType:
        return PowerLimitControlType(int.from_bytes(self.payload[14:16], "big"))

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        if not super().handle_response(inverter, fragments):
            return False
        config = inverter.system_config_para
        if self.limit_type().is_relative:
            config.set_limit_percent(self.limit())
        else:
            max_power = inverter.dev_info.max_power()
            if max_power > 0:
                config.set_limit_percent(self.limit() / max_power * 100)
        config.set_last_update_command(millis())
        config.last_limit_command_success = CommandStatus.OK
        return True

    def got_timeout(self, inverter: Any) -> None:
        inverter.system_config_para.last_limit_command_success = CommandStatus.NOK


class AlarmDataCommand(MultiDataCommand):
    """Requests the alarm (event) log."""

    def __init__(self, target_address: int = 0, router_address: int = 0, time: int = 0) -> None:
        super().__init__(target_address, router_address, data_type=0x11, time=time)
        self.timeout = 750

    def command_name(self) -> str:
        return "AlarmData"

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        if not super().handle_response(inverter, fragments):
            return False
        log = inverter.event_log
        _collect(fragments, log.clear_buffer, log.append_fragment)
        log.last_alarm_request_success = CommandStatus.OK
        log.last_update = millis()
        return True

    def got_timeout(self, inverter: Any) -> None:
        inverter.event_log.last_alarm_request_success = CommandStatus.NOK


class DevInfoAllCommand(MultiDataCommand):
    """Requests the firmware part of the device information."""

    def __init__(self, target_address: int = 0, router_address: int = 0, time: int = 0) -> None:
        super().__init__(target_address, router_address, data_type=0x01, time=time)
        self.timeout = 200

    def command_name(self) -> str:
        return "DevInfoAll"

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        if not super().handle_response(inverter, fragments):
            return False
        info = inverter.dev_info
        _collect(fragments, info.clear_buffer_all, info.append_fragment_all)
        info.set_last_update_all(millis())
        return True


class DevInfoSimpleCommand(MultiDataCommand):
    """Requests the hardware part of the device information."""

    def __init__(self, target_address: int = 0, router_address: int = 0, time: int = 0) -> None:
        super().__init__(target_address, router_address, data_type=0x00, time=time)
        self.timeout = 200

    def command_name(self) -> str:
        return "DevInfoSimple"

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        if not super().handle_response(inverter, fragments):
            return False
        info = inverter.dev_info
        _collect(fragments, info.clear_buffer_simple, info.append_fragment_simple)
        info.set_last_update_simple(millis())
        return True


class PowerControlCommand(DevControlCommand):
    """Turns an inverter on or off, or restarts it."""

    def __init__(self, target_address: int = 0, router_address: int = 0) -> None:
        super().__init__(target_address, router_address)
        self.payload[10] = 0x00  # turn on
        self.payload[11] = 0x00
        self.update_crc(_POWER_CONTROL_CRC_SIZE)
        self.payload_size = 14
        self.timeout = 2000

    def command_name(self) -> str:
        return "PowerControl"

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        if not super().handle_response(inverter, fragments):
            return False
        power = inverter.power_command
        power.set_last_update_command(millis())
        power.last_power_command_success = CommandStatus.OK
        return True

    def got_timeout(self, inverter: Any) -> None:
        inverter.power_command.last_power_command_success = CommandStatus.NOK

    def set_power_on(self, state: bool) -> None:
        self.payload[10] = 0x00 if state else 0x01
        self.update_crc(_POWER_CONTROL_CRC_SIZE)

    def set_restart(self) -> None:
        self.payload[10] = 0x02
        self.update_crc(_POWER_CONTROL_CRC_SIZE)


class RealTimeRunDataCommand(MultiDataCommand):
    """Requests the live measurements."""

    def __init__(self, target_address: int = 0, router_address: int = 0, time: int = 0) -> None:
        super().__init__(target_address, router_address, data_type=0x0B, time=time)
        self.timeout = 500

    def command_name(self) -> str:
        return "RealTimeRunData"

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        if not super().handle_response(inverter, fragments):
            return False
        stats = inverter.statistics
        _collect(fragments, stats.clear_buffer, stats.append_fragment)
        stats.reset_rx_failure_count()
        stats.last_update = millis()
        return True

    def got_timeout(self, inverter: Any) -> None:
        inverter.statistics.increment_rx_failure_count()


class SystemConfigParaCommand(MultiDataCommand):
    """Requests the system configuration, including the power limit."""

    def __init__(self, target_address: int = 0, router_address: int = 0, time: int = 0) -> None:
        super().__init__(target_address, router_address, data_type=0x05, time=time)
        self.timeout = 200

    def command_name(self) -> str:
        return "SystemConfigPara"

    def handle_response(self, inverter: Any, fragments: Sequence[Fragment]) -> bool:
        if not super().handle_response(inverter, fragments):
            return False
        config = inverter.system_config_para
        _collect(fragments, config.clear_buffer, config.append_fragment)
        config.set_last_update_request(millis())
        config.last_limit_request_success = CommandStatus.OK
        return True

    def got_timeout(self, inverter: Any) -> None:
        inverter.system_config_para.last_limit_request_success = CommandStatus.NOK