from .mock_instruments import MockCLD1015Transport, MockOSATransport
from .mock_transport import MockTransport

__all__ = ["MockCLD1015Transport", "MockOSATransport", "MockTransport"]
