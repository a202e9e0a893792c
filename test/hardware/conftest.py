import pytest
import pyvisa

from ldsweep.device import VisaTransport
from ldsweep.util.check_hw import list_visa_devices


@pytest.fixture(scope="session")
def visa_devices():
    """Address -> identity of every VISA instrument on the bench."""
    try:
        return list_visa_devices()
    except (OSError, ValueError, pyvisa.errors.Error):
        return {}


def _find(visa_devices, model):
    for address, idn in visa_devices.items():
        if model in idn:
            return address
    pytest.skip(f"{model} not available")


@pytest.fixture
def source_transport(visa_devices):
    transport = VisaTransport.open(_find(visa_devices, "CLD1015"))
    yield transport
    transport.close()


@pytest.fixture
def analyzer_transport(visa_devices):
    transport = VisaTransport.open(_find(visa_devices, "70952"))
    yield transport
    transport.close()
