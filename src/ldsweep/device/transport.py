"""Byte channels to instruments.

A transport is the only thing the drivers and the sweep engine need from an
instrument connection:

- `send(data: bytes) -> None`
- `read_line() -> str`

Two implementations are provided. `VisaTransport` wraps a pyvisa resource (USB-TMC
and GPIB instruments: the current source and the spectrum analyzer).
`SocketTransport` wraps a TCP socket (the MPM-210H power meter).

Each transport owns exactly one read cursor for its lifetime, so consecutive
`read_line` calls never lose bytes buffered by an earlier call.
"""

from __future__ import annotations

import socket
from typing import Optional, Protocol, Tuple, runtime_checkable

import pyvisa
from loguru import logger

from ldsweep.types import TransportError, ValidationError
from ldsweep.util.defaults import PM_TIMEOUT, VISA_TIMEOUT_MS


@runtime_checkable
class Transport(Protocol):
    def send(self, data: bytes) -> None: ...

    def read_line(self) -> str: ...

    def close(self) -> None: ...


class VisaTransport:
    """Transport over a pyvisa message-based resource.

    Parameters
    ----------
    resource : pyvisa.resources.MessageBasedResource
        An already opened resource. Use `VisaTransport.open` to open one by address.
    resource_manager : pyvisa.ResourceManager, optional
        Closed with the transport when the transport created it.
    """

    def __init__(self, resource, resource_manager: Optional[pyvisa.ResourceManager] = None):
        self.inst = resource
        self.rm = resource_manager
        self.address = getattr(resource, "resource_name", "")

    @classmethod
    def open(
        cls,
        address: str,
        resource_manager: Optional[pyvisa.ResourceManager] = None,
        timeout_ms: int = VISA_TIMEOUT_MS,
    ) -> "VisaTransport":
        owns_rm = resource_manager is None
        rm = pyvisa.ResourceManager() if owns_rm else resource_manager
        try:
            inst = rm.open_resource(address)
            inst.timeout = timeout_ms
            inst.read_termination = "\n"
            inst.write_termination = ""
        except (pyvisa.errors.VisaIOError, OSError, ValueError) as e:
            if owns_rm:
                rm.close()
            raise TransportError(f"Failed to open VISA resource {address}: {e}") from e
        logger.debug("Opened VISA resource {}", address)
        return cls(inst, rm if owns_rm else None)

    def send(self, data: bytes) -> None:
        try:
            self.inst.write_raw(data)
        except (pyvisa.errors.VisaIOError, OSError) as e:
            raise TransportError(f"Write to {self.address} failed: {e}") from e

    def read_line(self) -> str:
        try:
            return self.inst.read()
        except (pyvisa.errors.VisaIOError, OSError) as e:
            raise TransportError(f"Read from {self.address} failed: {e}") from e

    def close(self) -> None:
        try:
            self.inst.close()
        finally:
            if self.rm is not None:
                self.rm.close()
                self.rm = None


class SocketTransport:
    """Transport over a TCP socket with symmetric read/write timeouts."""

    def __init__(self, sock: socket.socket, address: Tuple[str, int] = ("", 0)):
        self.sock = sock
        self.address = address
        self._reader = sock.makefile("rb")

    @classmethod
    def connect(
        cls, address: Tuple[str, int], timeout: float = PM_TIMEOUT
    ) -> "SocketTransport":
        try:
            # socket timeouts apply to both send and recv
            sock = socket.create_connection(address, timeout=timeout)
        except OSError as e:
            raise TransportError(
                f"Failed to connect to {address[0]}:{address[1]}: {e}"
            ) from e
        logger.debug("Connected socket to {}:{}", *address)
        return cls(sock, address)

    def send(self, data: bytes) -> None:
        try:
            self.sock.sendall(data)
        except OSError as e:
            raise TransportError(f"Write to {self.address} failed: {e}") from e

    def read_line(self) -> str:
        try:
            line = self._reader.readline()
        except OSError as e:
            raise TransportError(f"Read from {self.address} failed: {e}") from e
        if not line:
            raise TransportError(f"Connection to {self.address} closed by peer")
        return line.decode("ascii", errors="replace")

    def close(self) -> None:
        try:
            self._reader.close()
        finally:
            self.sock.close()


def parse_socket_address(address: str, default_port: int = 5000) -> Tuple[str, int]:
    """Split `host:port` (port optional) into a tuple."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, default_port
    try:
        return host, int(port)
    except ValueError as e:
        raise ValidationError(f"Invalid port in address {address!r}") from e
