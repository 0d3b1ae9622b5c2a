# dtulink

`dtulink` implements the data-transfer-unit side of the Hoymiles
micro-inverter radio protocol in plain Python. It builds request and
control frames, reassembles the fragments an inverter sends back, checks
their CRCs and decodes them into live readings, device information, alarm
log entries and power limit settings.

It has no dependencies outside the standard library.

## Installation

```
pip install dtulink
```

For the test suite:

```
pip install "dtulink[test]"
pytest
```

## Modules

| Module | Purpose |
| --- | --- |
| `dtulink.crc` | `crc8`, `crc16` (Modbus) and `crc16_nrf24` checksums |
| `dtulink.fragment` | the `Fragment` dataclass and `serial_to_bytes` |
| `dtulink.timeout` | the `millis()` clock and a millisecond `Timeout` |
| `dtulink.mqtt_topics` | `topic_matches_sub`, `InvalidTopicError` and the `MqttSubscribeParser` callback dispatcher |
| `dtulink.reset_reason` | `reset_reason_verbose` and `reset_reason_short` for chip reset codes |
| `dtulink.radio` | `HoymilesRadio`, the command queue and fragment CRC check shared by radios, and `convert_serial_to_radio_id` |
| `dtulink.parser` | `CommandStatus` and the `Parser` base |
| `dtulink.commands` | the `Command` base and `DevControlCommand`, `SingleDataCommand`, `RequestFrameCommand`, `MultiDataCommand`, `ParaSetCommand`, `ChannelChangeCommand` |
| `dtulink.device_commands` | `RealTimeRunDataCommand`, `AlarmDataCommand`, `DevInfoAllCommand`, `DevInfoSimpleCommand`, `SystemConfigParaCommand`, `ActivePowerControlCommand`, `PowerControlCommand` and `PowerLimitControlType` |
| `dtulink.statistics` | `StatisticsParser` for real-time run data, with the `ChannelType`, `ChannelNum`, `FieldId`, `Unit` and `CalcFunction` enums |
| `dtulink.alarm_log` | `AlarmLogParser` and `AlarmLogEntry` for the event log |
| `dtulink.dev_info` | `DevInfoParser` for firmware and hardware data and the model table |
| `dtulink.system_config` | `SystemConfigParaParser` for the active power limit |
| `dtulink.power_command` | `PowerCommandParser`, the state of on/off/restart commands |
| `dtulink.inverter` | the `Inverter` base: fragment reassembly and `FragmentResult` |
| `dtulink.hm_inverter` | `HmInverter`, `HmsInverter` and `HmtInverter`: queuing requests and commands |
| `dtulink.hm_models` | the `HM1CH`, `HM2CH` and `HM4CH` models with their field layouts |

## Examples

Checksums:

```python
from dtulink.crc import crc8, crc16

crc8(b"\x15\x80")
crc16(b"\x0b\x00", 0xFFFF)
```

Matching MQTT topics against subscriptions:

```python
from dtulink.mqtt_topics import topic_matches_sub

topic_matches_sub("solar/+/cmd/#", "solar/inverter1/cmd/limit")  # True
```

`topic_matches_sub` raises `InvalidTopicError` for malformed patterns or
topics. `MqttSubscribeParser.handle_message` calls every registered callback
whose pattern matches and skips malformed ones.

Telling which HM model a serial number belongs to:

```python
from dtulink.hm_models import HM2CH

HM2CH.is_valid_serial(0x114100000001)  # True
```

Queuing requests for an inverter. A radio is a `HoymilesRadio` subclass that
supplies `send_esb_packet`; the inverter places its commands on the radio's
`command_queue`:

```python
from dtulink.hm_models import HM1CH
from dtulink.radio import HoymilesRadio


class RecordingRadio(HoymilesRadio):
    def __init__(self):
        super().__init__()
        self.sent = []

    def send_esb_packet(self, command):
        self.sent.append(command.data_payload())


radio = RecordingRadio()
inverter = HM1CH(radio, 0x112100000001)
inverter.init()                 # loads the model's field layout
inverter.send_stats_request()   # True once the system clock is set
radio.command_queue[0].command_name()  # "RealTimeRunData"
```

Received packets go to `Inverter.add_rx_fragment` as raw bytes (header,
body and CRC-8). `Inverter.verify_all_fragments(command)` then returns
`FragmentResult.OK` once the answer is complete and has been handed to the
command, another `FragmentResult` on failure, or the number of a fragment to
re-request. Decoded values are read from the inverter's parsers:

```python
from dtulink.statistics import ChannelNum, ChannelType, FieldId

inverter.statistics.get_channel_field_value(ChannelType.AC, ChannelNum.CH0, FieldId.PAC)
inverter.dev_info.hw_model_name()
inverter.system_config_para.get_limit_percent()
```

## What it does not do

- It does not drive a transceiver. `HoymilesRadio` holds the queue and
  checks fragments, but sending bytes and receiving them is left to the
  subclass the application writes.
- It has no registry that picks a model class from a serial number and
  polls a set of inverters in turn; the application creates the inverter
  objects and decides when to call their `send_*` methods.
- Field layouts are included only for the HM models in `dtulink.hm_models`.
  `HmsInverter` and `HmtInverter` carry the request logic of those families
  but have no layouts of their own, so they must be subclassed with
  `type_name` and `byte_assignment` before use. Their
  `send_change_channel_request` expects the radio to provide
  `target_channel()`.
- It has no command-line tool, no configuration storage and no network
  service.