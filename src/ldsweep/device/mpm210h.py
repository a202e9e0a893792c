"""Santec MPM-210H optical power meter over TCP.

Independent of the sweep engine. Every transmission is followed by a fixed 10 ms
delay, which the instrument needs between commands.

Example
-------
```python
pm = MPM210H.connect(("192.168.1.161", 5000))
pm.set_module(0)
pm.set_port(2)
pm.set_wavelength(1550.0)
pm.set_power_unit(PowerUnit.DBM)
print(pm.read_power())
```
"""

import time
from enum import Enum
from typing import Optional, Tuple, Union

from loguru import logger

from ldsweep.types import InstrumentDataError, TransportError, ValidationError
from ldsweep.util.defaults import PM_COMMAND_DELAY, PM_TIMEOUT, PM_ZERO_TIME

from .device import Device
from .transport import SocketTransport

ERROR_MESSAGES = {
    "invalid_module": "Module number must be an integer from 0 to 4 (got {value})",
    "invalid_port": "Port number must be an integer from 1 to 4 (got {value})",
    "invalid_wavelength": "Wavelength must be between 1250 and 1630 nm (got {value})",
    "invalid_mode": "Invalid measurement mode: {value}",
    "invalid_avg": "Averaging time must be between 0.01 and 10000 ms (got {value})",
    "invalid_unit": "Power unit must be dBm or mW (got {value})",
    "invalid_response": "Invalid response: {value}",
    "invalid_power": "Failed to parse power value: {value}",
}

MEASUREMENT_MODES = ("CONST1", "CONST2", "SWEEP1", "SWEEP2", "FREERUN")


def _is_index(value) -> bool:
    # bool is an int subclass but never a valid module or port
    return isinstance(value, int) and not isinstance(value, bool)


class PowerUnit(Enum):
    DBM = "0"
    MW = "1"

    @classmethod
    def parse(cls, unit: Union[str, "PowerUnit"]) -> "PowerUnit":
        if isinstance(unit, PowerUnit):
            return unit
        lookup = {"dbm": cls.DBM, "mw": cls.MW}
        try:
            return lookup[str(unit).lower()]
        except KeyError:
            raise ValidationError(ERROR_MESSAGES["invalid_unit"].format(value=unit))


class MPM210H(Device):
    """Power meter driver.

    Parameters
    ----------
    transport : Transport
        Open channel to the meter, normally a `SocketTransport`
    command_delay : float
        Wait after every transmission (s)
    zero_time : float
        Wait after the zeroing command (s)
    """

    def __init__(
        self,
        transport,
        command_delay: float = PM_COMMAND_DELAY,
        zero_time: float = PM_ZERO_TIME,
    ):
        super().__init__(transport)
        self.command_delay = command_delay
        self.zero_time = zero_time
        self._module = 0
        self._port = 1
        self._idn: Optional[str] = None

    @classmethod
    def connect(
        cls, address: Tuple[str, int], timeout: float = PM_TIMEOUT, **kwargs
    ) -> "MPM210H":
        """Open the socket and confirm the meter answers `*IDN?`.

        Raises TransportError if the socket cannot be opened or the identity
        query fails or times out.
        """
        transport = SocketTransport.connect(address, timeout=timeout)
        pm = cls(transport, **kwargs)
        try:
            pm._idn = pm.query("*IDN?").strip()
        except TransportError:
            transport.close()
            raise
        logger.info("Connected to MPM-210H at {}:{}: {}", *address, pm._idn)
        return pm

    def write(self, command: str) -> None:
        super().write(command)
        time.sleep(self.command_delay)

    @property
    def module(self) -> int:
        return self._module

    @property
    def port(self) -> int:
        return self._port

    def set_module(self, module: int) -> None:
        if not _is_index(module) or not 0 <= module <= 4:
            raise ValidationError(ERROR_MESSAGES["invalid_module"].format(value=module))
        self._module = module

    def set_port(self, port: int) -> None:
        if not _is_index(port) or not 1 <= port <= 4:
            raise ValidationError(ERROR_MESSAGES["invalid_port"].format(value=port))
        self._port = port

    def set_wavelength(self, wavelength_nm: float) -> None:
        if not 1250.0 <= wavelength_nm <= 1630.0:
            raise ValidationError(
                ERROR_MESSAGES["invalid_wavelength"].format(value=wavelength_nm)
            )
        self.write(f"DWAV {self._module},{self._port},{wavelength_nm:.3f}")

    def set_measurement_mode(self, mode: str) -> None:
        if mode not in MEASUREMENT_MODES:
            raise ValidationError(ERROR_MESSAGES["invalid_mode"].format(value=mode))
        self.write(f"WMOD {mode}")

    def set_averaging_time(self, time_ms: float) -> None:
        if not 0.01 <= time_ms <= 10000.0:
            raise ValidationError(ERROR_MESSAGES["invalid_avg"].format(value=time_ms))
        self.write(f"AVG {time_ms:.2f}")

    def set_power_unit(self, unit: Union[str, PowerUnit]) -> None:
        unit = PowerUnit.parse(unit)
        self.write(f"UNIT {unit.value}")

    def zero(self) -> None:
        """Zero the meter. Blocks for `zero_time` whatever the instrument says."""
        logger.info("Performing zero calibration...")
        self.write("ZERO")
        time.sleep(self.zero_time)

    def read_power(self) -> float:
        """Read the configured port of the configured module.

        The meter answers `READ? {module}` with one comma separated value per port.
        """
        response = self.query(f"READ? {self._module}")
        powers = response.strip().split(",")
        if len(powers) < self._port:
            raise InstrumentDataError(
                ERROR_MESSAGES["invalid_response"].format(value=response.strip())
            )
        field = powers[self._port - 1].strip()
        try:
            return float(field)
        except ValueError as e:
            raise InstrumentDataError(
                ERROR_MESSAGES["invalid_power"].format(value=field)
            ) from e

    def check_errors(self) -> str:
        return self.query("ERR?")
