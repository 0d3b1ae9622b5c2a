"""Base state shared by the inverter response parsers."""

import enum
from dataclasses import dataclass


class CommandStatus(enum.IntEnum):
    """Outcome of the last command or request sent to an inverter."""

    OK = 0
    NOK = 1
    PENDING = 2


@dataclass
class Parser:
    """Holds the time of the last successful update, in milliseconds."""

    last_update: int = 0