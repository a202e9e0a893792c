import time

import click

from ldsweep.cli.base import tree_option
from ldsweep.device import MEASUREMENT_MODES, MPM210H, parse_socket_address
from ldsweep.system import load_station_config
from ldsweep.types import InstrumentError, ValidationError


def _connect(address, module, port) -> MPM210H:
    if address is None:
        address = load_station_config().power_meter_address
    try:
        pm = MPM210H.connect(parse_socket_address(address))
    except InstrumentError as e:
        raise click.ClickException(str(e))
    try:
        pm.set_module(module)
        pm.set_port(port)
    except ValidationError as e:
        pm.close()
        raise click.BadParameter(str(e))
    return pm


address_option = click.option(
    "--address", "-a", default=None, help="host:port (default: station config)"
)
module_option = click.option("--module", "-m", type=int, default=0, help="Module 0-4")
port_option = click.option("--port", "-p", type=int, default=1, help="Port 1-4")


@click.group()
@tree_option
def pm():
    """MPM-210H optical power meter commands."""
    pass


@pm.command()
@address_option
@module_option
@port_option
@click.option("--wavelength", "-w", type=float, default=None, help="nm (1250-1630)")
@click.option("--unit", "-u", type=click.Choice(["dBm", "mW"]), default="dBm")
@click.option("--mode", type=click.Choice(MEASUREMENT_MODES), default=None)
@click.option("--avg", type=float, default=None, help="Averaging time (ms)")
@click.option(
    "--watch/--no-watch", "-W/", default=False, help="Continuously monitor power"
)
@click.option("--interval", "-i", type=float, default=1.0, help="Watch interval (s)")
def read(address, module, port, wavelength, unit, mode, avg, watch, interval):
    """Read optical power from one port."""
    pm_ = _connect(address, module, port)
    try:
        try:
            if wavelength is not None:
                pm_.set_wavelength(wavelength)
            if mode is not None:
                pm_.set_measurement_mode(mode)
            if avg is not None:
                pm_.set_averaging_time(avg)
            pm_.set_power_unit(unit)
        except ValidationError as e:
            raise click.BadParameter(str(e))

        def display_power():
            try:
                power = pm_.read_power()
            except InstrumentError as e:
                raise click.ClickException(str(e))
            click.echo(f"Module {module} port {port}: {power:.3f} {unit}")

        if watch:
            click.echo("Press Ctrl+C to stop monitoring")
            try:
                while True:
                    display_power()
                    time.sleep(interval)
            except KeyboardInterrupt:
                click.echo("\nMonitoring stopped")
        else:
            display_power()
        click.echo(f"Error queue: {pm_.check_errors().strip()}")
    finally:
        pm_.close()


@pm.command()
@address_option
@module_option
@port_option
def zero(address, module, port):
    """Zero the power meter (cover the inputs first)."""
    pm_ = _connect(address, module, port)
    try:
        pm_.zero()
        click.echo("Zero calibration done")
    finally:
        pm_.close()
