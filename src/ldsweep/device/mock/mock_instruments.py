"""Simulated current source and spectrum analyzer.

The analyzer produces a plausible single mode laser spectrum whose peak follows the
current commanded on the source: spontaneous emission below threshold, a line that
red shifts and grows above it.
"""

from __future__ import annotations

import numpy as np
import numpy.random

from ldsweep.util.defaults import DEFAULT_TRACE_POINTS

from .mock_transport import MockTransport

THRESHOLD_MA = 20.0
SLOPE_NM_PER_MA = 0.01
BASE_WAVELENGTH_NM = 978.0
NOISE_FLOOR_DBM = -70.0


class MockCLD1015Transport(MockTransport):
    def __init__(self, **kwargs):
        super().__init__(
            {
                "*IDN?": "Thorlabs,CLD1015,M00000000,1.0.0 (mock)",
                "SYST:ERR?": '+0,"No error"',
            },
            name="mock-cld1015",
            **kwargs,
        )
        self.output = False
        self.current_a = 0.0

    def respond(self, command: str):
        if command.startswith("OUTPut:STATe"):
            self.output = command.endswith("1")
        elif command.startswith("SOURce:CURRent:LEVel:IMMediate:AMPLitude"):
            self.current_a = float(command.split()[-1])
        return super().respond(command)

    @property
    def emitting_current_ma(self) -> float:
        return self.current_a * 1000.0 if self.output else 0.0


class MockOSATransport(MockTransport):
    def __init__(
        self,
        source: MockCLD1015Transport,
        num_points: int = DEFAULT_TRACE_POINTS,
        start_nm: float = 970.0,
        stop_nm: float = 990.0,
        **kwargs,
    ):
        super().__init__(
            {"ID?;": "HP70952B", "XERR?;": "0", "TS;DONE?;": "1"},
            name="mock-osa",
            **kwargs,
        )
        self.source = source
        self.num_points = num_points
        self.start_nm = start_nm
        self.stop_nm = stop_nm
        # use with self.__rng.normal(...) for measurement noise
        self.__rng = numpy.random.default_rng()
        self._spectrum = np.full(num_points, NOISE_FLOOR_DBM)

    def _peak(self) -> tuple[float, float]:
        current = self.source.emitting_current_ma
        wavelength = BASE_WAVELENGTH_NM + SLOPE_NM_PER_MA * current
        if current <= THRESHOLD_MA:
            power = NOISE_FLOOR_DBM + 20.0 * current / THRESHOLD_MA
        else:
            power = -50.0 + 10.0 * np.log10(1.0 + 100.0 * (current - THRESHOLD_MA))
        return wavelength, power

    def _sweep(self) -> None:
        wavelength, power = self._peak()
        axis = np.linspace(self.start_nm, self.stop_nm, self.num_points)
        line = power - 40.0 * ((axis - wavelength) / 0.5) ** 2
        noise = self.__rng.normal(0.0, 0.3, self.num_points)
        self._spectrum = np.maximum(line, NOISE_FLOOR_DBM) + noise

    def _peak_wavelength(self) -> float:
        axis = np.linspace(self.start_nm, self.stop_nm, self.num_points)
        return float(axis[int(np.argmax(self._spectrum))])

    def respond(self, command: str):
        if command == "TS;DONE?;":
            self._sweep()
        elif command == "MDS?;":
            return str(self.num_points)
        elif command == "MKWL?;":
            return f"{self._peak_wavelength() * 1e-9:.6e}"
        elif command == "MKA?;":
            return f"{float(np.max(self._spectrum)):.2f}"
        elif command == "TRA?;":
            return ",".join(f"{p:.2f}" for p in self._spectrum)
        return super().respond(command)
