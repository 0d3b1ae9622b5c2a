"""Request and control logic shared by the HM, HMS and HMT inverter families."""

import time
from typing import Any, Callable, Optional

from .alarm_log import AlarmMessageType
from .commands import ChannelChangeCommand
from .device_commands import (
    ActivePowerControlCommand,
    AlarmDataCommand,
    DevInfoAllCommand,
    DevInfoSimpleCommand,
    PowerControlCommand,
    PowerLimitControlType,
    RealTimeRunDataCommand,
    SystemConfigParaCommand,
)
from .inverter import Inverter
from .parser import CommandStatus
from .statistics import ChannelNum, ChannelType, FieldId

# Local time is only trusted once the clock has been set past this year.
_MIN_VALID_YEAR = 2016

_POWER_OFF = 0
_POWER_ON = 1
_POWER_RESTART = 2


class HmInverter(Inverter):
    """Inverter that queues its requests and commands on a radio.

    ``clock`` returns the current Unix time; requests that carry a time stamp
    are refused while it reports a time that has not been set yet.
    """

    def __init__(
        self, radio: Any, serial: int, clock: Callable[[], float] = time.time
    ) -> None:
        super().__init__(radio, serial)
        self._clock = clock
        self._last_alarm_log_count = 0
        self._active_power_control_limit = 0.0
        self._active_power_control_type = PowerLimitControlType.ABSOLUTE_NON_PERSISTENT
        self._power_state = _POWER_ON

    def _synced_time(self) -> Optional[int]:
        """Current Unix time, or None if the clock has not been set."""
        now = int(self._clock())
        if time.localtime(now).tm_year <= _MIN_VALID_YEAR:
            return None
        return now

    def _enqueue_timed(self, command_class: type, now: int) -> Any:
        command = self.radio.enqueue_command(command_class)
        command.set_time(now)
        command.set_target_address(self.serial)
        return command

    def send_stats_request(self) -> bool:
        """Queue a request for the live measurements."""
        if not self.enable_polling:
            return False
        now = self._synced_time()
        if now is None:
            return False
        self._enqueue_timed(RealTimeRunDataCommand, now)
        return True

    def send_alarm_log_request(self, force: bool = False) -> bool:
        """Queue an alarm log request if the event count changed, or if forced."""
        if not self.enable_polling:
            return False
        now = self._synced_time()
        if now is None:
            return False

        stats = self.statistics
        event_count = (
            int(stats.get_channel_field_value(ChannelType.INV, ChannelNum.CH0, FieldId.EVT_LOG))
            & 0xFF
        )
        if not force and stats.has_channel_field_value(
            ChannelType.INV, ChannelNum.CH0, FieldId.EVT_LOG
        ):
            if event_count == self._last_alarm_log_count:
                return False

        self._last_alarm_log_count = event_count
        self._enqueue_timed(AlarmDataCommand, now)
        self.event_log.last_alarm_request_success = CommandStatus.PENDING
        return True

    def send_dev_info_request(self) -> bool:
        """Queue both device information requests."""
        if not self.enable_polling:
            return False
        now = self._synced_time()
        if now is None:
            return False
        self._enqueue_timed(DevInfoAllCommand, now)
        self._enqueue_timed(DevInfoSimpleCommand, now)
        return True

    def send_system_config_para_request(self) -> bool:
        """Queue a request for the system configuration (power limit)."""
        if not self.enable_polling:
            return False
        now = self._synced_time()
        if now is None:
            return False
        self._enqueue_timed(SystemConfigParaCommand, now)
        self.system_config_para.last_limit_request_success = CommandStatus.PENDING
        return True

    def send_active_power_control_request(
        self, limit: float, limit_type: PowerLimitControlType
    ) -> bool:
        """Queue a power limit; relative limits are capped at 100 percent."""
        if not self.enable_commands:
            return False
        limit_type = PowerLimitControlType(limit_type)
        if limit_type.is_relative:
            limit = min(100.0, limit)

        self._active_power_control_limit = limit
        self._active_power_control_type = limit_type

        command = self.radio.enqueue_command(ActivePowerControlCommand)
        command.set_active_power_limit(limit, limit_type)
        command.set_target_address(self.serial)
        self.system_config_para.last_limit_command_success = CommandStatus.PENDING
        return True

    def resend_active_power_control_request(self) -> bool:
        return self.send_active_power_control_request(
            self._active_power_control_limit, self._active_power_control_type
        )

    def send_power_control_request(self, turn_on: bool) -> bool:
        """Queue a command turning the inverter on or off."""
        if not self.enable_commands:
            return False
        self._power_state = _POWER_ON if turn_on else _POWER_OFF

        command = self.radio.enqueue_command(PowerControlCommand)
        command.set_power_on(turn_on)
        command.set_target_address(self.serial)
        self.power_command.last_power_command_success = CommandStatus.PENDING
        return True

    def send_restart_control_request(self) -> bool:
        """Queue a command restarting the inverter."""
        if not self.enable_commands:
            return False
        self._power_state = _POWER_RESTART

        command = self.radio.enqueue_command(PowerControlCommand)
        command.set_restart()
        command.set_target_address(self.serial)
        self.power_command.last_power_command_success = CommandStatus.PENDING
        return True

    def resend_power_control_request(self) -> bool:
        """Repeat the last power on, off or restart command."""
        if self._power_state == _POWER_OFF:
            return self.send_power_control_request(False)
        if self._power_state == _POWER_ON:
            return self.send_power_control_request(True)
        if self._power_state == _POWER_RESTART:
            return self.send_restart_control_request()
        return False


def _queue_channel_change(inverter: HmInverter) -> bool:
    """Queue a command moving the inverter to the radio's working channel.

    The radio must provide ``target_channel()``, the channel number of the
    frequency the inverter is to work on.
    """
    if not (inverter.enable_commands and inverter.enable_polling):
        return False
    command = inverter.radio.enqueue_command(ChannelChangeCommand)
    command.set_channel(inverter.radio.target_channel())
    command.set_target_address(inverter.serial)
    return True


class HmsInverter(HmInverter):
    """HMS family inverter, reached over the sub-GHz radio."""

    def send_change_channel_request(self) -> bool:
        """Queue a channel change to the radio's working channel."""
        return _queue_channel_change(self)


class HmtInverter(HmInverter):
    """Three-phase HMT family inverter, with its own alarm texts."""

    def __init__(
        self, radio: Any, serial: int, clock: Callable[[], float] = time.time
    ) -> None:
        super().__init__(radio, serial, clock)
        self.event_log.set_message_type(AlarmMessageType.HMT)

    def send_change_channel_request(self) -> bool:
        """Queue a channel change to the radio's working channel."""
        return _queue_channel_change(self)