"""HP 70952B optical spectrum analyzer (HP 71450 series command set).

Commands are semicolon terminated, queries end in `?;`. The analyzer reports the
marker wavelength in metres and amplitudes in dBm.
"""

from loguru import logger

from ldsweep.util.parse import (
    ScalarMeasurement,
    parse_count,
    parse_trace,
    read_scalar,
)
from ldsweep.util.defaults import (
    DEFAULT_TRACE_POINTS,
    METERS_TO_NM,
    POWER_FALLBACK_DBM,
    WAVELENGTH_FALLBACK_NM,
)

from .device import Device


class HP70952B(Device):
    """Spectrum analyzer driver used by the sweep engine."""

    def initialise(self) -> str:
        """Clear, preset and identify the analyzer. Returns the identity string."""
        self.write("CLS;IP;")
        idn = self.query("ID?;").strip()
        logger.info("Optical spectrum analyzer identity: {}", idn)
        return idn

    def preset(self) -> None:
        self.write("IP;")

    def single_sweep_mode(self) -> None:
        self.write("SNGLS;")

    def set_window(self, command: str) -> None:
        """Send a centre/span command, e.g. `CENTERWL 980NM;SPANWL 20NM;`."""
        self.write(command)

    def trace_length(self, fallback: int = DEFAULT_TRACE_POINTS) -> int:
        return parse_count(self.query("MDS?;"), fallback)

    def take_sweep(self) -> tuple[bool, str]:
        """Trigger one sweep and wait for the completion flag.

        Returns (confirmed, raw response). A response other than "1" is advisory.
        """
        response = self.query("TS;DONE?;").strip()
        return response == "1", response

    def peak_search(self) -> None:
        self.write("MKPK HI;")

    def peak_wavelength(self) -> ScalarMeasurement:
        return read_scalar(
            self.query("MKWL?;"), WAVELENGTH_FALLBACK_NM, "nm", scale=METERS_TO_NM
        )

    def peak_power(self) -> ScalarMeasurement:
        return read_scalar(self.query("MKA?;"), POWER_FALLBACK_DBM, "dBm")

    def read_trace(self) -> list[float]:
        return parse_trace(self.query("TRA?;"), ",", POWER_FALLBACK_DBM)

    def sweep_off(self) -> None:
        self.write("SWEEP OFF;")

    def query_error(self) -> str:
        return self.query("XERR?;").strip()
