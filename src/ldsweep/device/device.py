"""Device base class.

Every instrument driver in ldsweep inherits from `Device`. A device talks to its
instrument through a `Transport` (see `ldsweep.device.transport`); the device does
not own the transport's connection setup, so a transport opened elsewhere can be
handed to a driver and remains valid after the driver is done with it.

The Device class provides:
1. Configuration validation
2. Command writes and query round trips through the transport
3. Closing the transport when the driver opened it
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Type

from loguru import logger

if TYPE_CHECKING:
    from .transport import Transport


class Device:
    """Base class for all instrument drivers.

    Subclasses declare any keyword configuration they need in `required_config`
    and send commands with `write` and `query`.

    Attributes
    ----------
    required_config : dict[str, Type]
        Required configuration parameters and their types
    transport : Transport
        Channel to the instrument, borrowed from the caller

    Examples
    --------
    ```python
    class MySource(Device):
        def set_output(self, state: bool) -> None:
            self.write(f"OUTP {int(state)}")

    src = MySource(VisaTransport.open("GPIB0::5::INSTR"))
    src.set_output(True)
    ```
    """

    required_config: dict[str, Type] = {}  # Required configuration keys
    terminator = "\n"

    def __init__(self, transport: Optional[Transport] = None, **config_kwargs):
        self.transport = transport
        for key, value in config_kwargs.items():
            setattr(self, key, value)
        for key, value in self.required_config.items():
            if not hasattr(self, key):
                logger.error(
                    f"Device {self.__class__.__name__} missing required config key: "
                    + f"{key}"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} missing required config "
                    + f"key: {key}"
                )
            if not isinstance(getattr(self, key), value):
                logger.error(
                    f"Device {self.__class__.__name__} config key {key} "
                    + f"has wrong type: {type(getattr(self, key))} (expected {value})"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} config key {key} has "
                    + f"wrong type: {type(getattr(self, key))} (expected {value})"
                )

    def write(self, command: str) -> None:
        """Send one newline-terminated command."""
        logger.trace("{} <- {}", self.__class__.__name__, command)
        self.transport.send((command + self.terminator).encode("ascii"))

    def read(self) -> str:
        """Read one response line (terminators stripped)."""
        response = self.transport.read_line()
        logger.trace("{} -> {}", self.__class__.__name__, response.strip())
        return response

    def query(self, command: str) -> str:
        """Command/read round trip."""
        self.write(command)
        return self.read()

    def close(self):
        if self.transport is not None:
            self.transport.close()
