"""Device registry implementations.

The Tk simulator is imported lazily by the entry point since it needs a
display.
"""

from .udp_bridge import BridgeDevice, UdpBridgeRegistry

__all__ = [
    "BridgeDevice",
    "UdpBridgeRegistry",
]
