"""Thorlabs CLD1015 laser diode / TEC controller, used as the sweep current source.

Only the SCPI subset needed for a constant-current sweep is implemented.
"""

from loguru import logger

from ldsweep.types import ValidationError
from ldsweep.util.defaults import DEFAULT_CURRENT_LIMIT_MA

from .device import Device


class CLD1015(Device):
    """Current source driver.

    Parameters
    ----------
    transport : Transport
        Open channel to the controller (USB-TMC via `VisaTransport`)
    """

    def initialise(self, current_limit_ma: float = DEFAULT_CURRENT_LIMIT_MA) -> str:
        """Clear errors, identify, select constant current mode and set the limit.

        Returns the identity string.
        """
        if current_limit_ma <= 0:
            raise ValidationError(
                f"Current limit must be positive (got {current_limit_ma})"
            )
        self.write("*CLS")
        idn = self.query("*IDN?").strip()
        logger.info("CLD1015 identity: {}", idn)
        logger.info("Initial error check on CLD1015: {}", self.query_error())
        self.write("SOURce:FUNCtion:MODE CURRent")
        self.write(f"SOURce:CURRent:LIMit:AMPLitude {current_limit_ma:g}MA")
        return idn

    def set_output(self, state: bool) -> None:
        self.write(f"OUTPut:STATe {int(bool(state))}")
        logger.info("Laser turned {}", "ON" if state else "OFF")

    def set_current(self, current_a: float) -> None:
        """Set the immediate current amplitude in amps."""
        self.write(f"SOURce:CURRent:LEVel:IMMediate:AMPLitude {current_a:.6f}")

    def query_error(self) -> str:
        return self.query("SYST:ERR?").strip()
