"""Find the V5 brain's system port for `--port auto`."""
from serial.tools import list_ports

from .errors import PortNotFound

VEX_MARKERS = ("VEX", "V5")


def _is_v5(port):
    desc = port.description or ""
    product = port.product or ""
    return any(m in desc or m in product for m in VEX_MARKERS)


def find_v5_port():
    """Return the device path of the first V5 system port.

    The brain enumerates two ports; uploads go over the system one, the
    "User" port only carries program stdio.
    """
    candidates = [p for p in list_ports.comports() if _is_v5(p)]
    for p in candidates:
        if "User" not in (p.description or ""):
            return p.device
    raise PortNotFound("No V5 brain found on any serial port.")
