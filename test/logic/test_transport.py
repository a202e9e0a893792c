"""Tests for the VISA and socket transports."""

import socket
from unittest.mock import MagicMock

import pytest
import pyvisa
from pyvisa.constants import StatusCode

from ldsweep.device import Device, SocketTransport, VisaTransport, parse_socket_address
from ldsweep.types import TransportError, ValidationError


def visa_error():
    return pyvisa.errors.VisaIOError(StatusCode.error_timeout)


class TestVisaTransport:
    def test_open_configures_resource(self):
        rm = MagicMock()
        transport = VisaTransport.open("GPIB0::23::INSTR", resource_manager=rm)
        rm.open_resource.assert_called_once_with("GPIB0::23::INSTR")
        inst = rm.open_resource.return_value
        assert inst.timeout == 10000
        assert inst.read_termination == "\n"
        assert inst.write_termination == ""
        # a borrowed resource manager is not closed with the transport
        transport.close()
        inst.close.assert_called_once()
        rm.close.assert_not_called()

    def test_open_failure(self):
        rm = MagicMock()
        rm.open_resource.side_effect = visa_error()
        with pytest.raises(TransportError, match="GPIB0::23::INSTR"):
            VisaTransport.open("GPIB0::23::INSTR", resource_manager=rm)

    def test_send_and_read(self):
        inst = MagicMock()
        inst.read.return_value = "1"
        transport = VisaTransport(inst)
        transport.send(b"TS;DONE?;\n")
        inst.write_raw.assert_called_once_with(b"TS;DONE?;\n")
        assert transport.read_line() == "1"

    def test_errors_become_transport_errors(self):
        inst = MagicMock()
        inst.write_raw.side_effect = visa_error()
        inst.read.side_effect = visa_error()
        transport = VisaTransport(inst)
        with pytest.raises(TransportError):
            transport.send(b"IP;\n")
        with pytest.raises(TransportError):
            transport.read_line()


class TestSocketTransport:
    def test_single_reader_keeps_buffered_lines(self):
        a, b = socket.socketpair()
        transport = SocketTransport(a)
        try:
            b.sendall(b"first\nsecond\n")
            assert transport.read_line() == "first\n"
            assert transport.read_line() == "second\n"
            transport.send(b"*IDN?\n")
            assert b.recv(100) == b"*IDN?\n"
        finally:
            transport.close()
            b.close()

    def test_peer_close(self):
        a, b = socket.socketpair()
        transport = SocketTransport(a)
        b.close()
        with pytest.raises(TransportError, match="closed"):
            transport.read_line()
        transport.close()

    def test_read_timeout(self):
        a, b = socket.socketpair()
        a.settimeout(0.05)
        transport = SocketTransport(a)
        try:
            with pytest.raises(TransportError):
                transport.read_line()
        finally:
            transport.close()
            b.close()


def test_parse_socket_address():
    assert parse_socket_address("192.168.1.161:5000") == ("192.168.1.161", 5000)
    assert parse_socket_address("meter.lab") == ("meter.lab", 5000)
    with pytest.raises(ValidationError):
        parse_socket_address("meter.lab:http")


def test_device_query_round_trip():
    transport = MagicMock()
    transport.read_line.return_value = "OK\n"
    device = Device(transport)
    assert device.query("PING?") == "OK\n"
    transport.send.assert_called_once_with(b"PING?\n")


def test_device_required_config():
    class Configured(Device):
        required_config = {"address": str}

    Configured(None, address="GPIB0::1::INSTR")
    with pytest.raises(ValueError):
        Configured(None)
    with pytest.raises(ValueError):
        Configured(None, address=3)
