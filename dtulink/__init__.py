"""Protocol layer for Hoymiles micro-inverters: command frames, fragment reassembly and response parsers."""

__version__ = "0.1.0"