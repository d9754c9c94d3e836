"""Post-build upload orchestrator for VEX V5 firmware images."""

__version__ = "0.1.0"
