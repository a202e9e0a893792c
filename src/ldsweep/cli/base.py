from typing import Optional

import click
from loguru import logger

from ldsweep.device import (
    CLD1015,
    HP70952B,
    MockCLD1015Transport,
    MockOSATransport,
    VisaTransport,
)
from ldsweep.meas import SweepPlan, SweepVariant, run_sweep
from ldsweep.system import load_station_config
from ldsweep.types import SweepAbortedError, TransportError, ValidationError
from ldsweep.util import DEFAULT_LOGLEVEL, shutdown_log, start_log
from ldsweep.util.check_hw import list_visa_devices
from ldsweep.util.defaults import DEFAULT_DWELL_TIME
from ldsweep.util.save import save_metadata, timestamp


def print_tree(cmd, prefix="", parent_ctx=None):
    """Print command tree starting from given command."""
    ctx = click.Context(cmd, info_name=cmd.name, parent=parent_ctx)

    # Only print root name if no parent
    if not parent_ctx:
        click.echo(cmd.name)

    for sub in sorted(cmd.list_commands(ctx)):
        sub_cmd = cmd.get_command(ctx, sub)
        click.echo(f"{prefix}└── {sub}")
        if isinstance(sub_cmd, click.Group):
            print_tree(sub_cmd, prefix + "    ", ctx)


def tree_option(f):
    """Add --tree option to command."""

    def callback(ctx, param, value):
        if not value or ctx.resilient_parsing:
            return
        print_tree(ctx.command)
        ctx.exit()

    return click.option(
        "--tree",
        is_flag=True,
        help="Show command tree from this point",
        expose_value=False,
        is_eager=True,
        callback=callback,
    )(f)


@click.group()
@tree_option
def cli():
    """ldsweep - laser diode current sweeps with spectral capture.

    - Current sweeps on a CLD1015 with peak or full-trace capture on an HP 70952B

    - MPM-210H power meter readout

    - Station configuration and VISA discovery
    """
    pass


def _open_transports(variant, station, source_address, analyzer_address, mock):
    if mock:
        source_t = MockCLD1015Transport()
        analyzer_t = None
        if variant is not SweepVariant.SOURCE:
            setup = station.analyzer_setup()
            analyzer_t = MockOSATransport(
                source_t, start_nm=setup.start_nm, stop_nm=setup.stop_nm
            )
        return source_t, analyzer_t

    source_t = VisaTransport.open(source_address or station.source_address)
    analyzer_t = None
    if variant is not SweepVariant.SOURCE:
        try:
            analyzer_t = VisaTransport.open(
                analyzer_address or station.analyzer_address
            )
        except TransportError:
            source_t.close()
            raise
    return source_t, analyzer_t


@cli.command()
@click.option("--start", type=float, required=True, help="First current (mA)")
@click.option("--stop", type=float, required=True, help="Last current (mA)")
@click.option("--step", type=float, required=True, help="Current step (mA)")
@click.option(
    "--dwell",
    type=float,
    default=DEFAULT_DWELL_TIME * 1000,
    show_default=True,
    help="Stabilisation time at each point (ms)",
)
@click.option(
    "--variant",
    "-v",
    type=click.Choice([v.value for v in SweepVariant]),
    default=SweepVariant.PEAK.value,
    show_default=True,
    help="source: current only, peak: + OSA peak, trace: + full OSA trace",
)
@click.option("--source-address", "-sa", default=None, help="CLD1015 VISA address")
@click.option("--analyzer-address", "-aa", default=None, help="OSA VISA address")
@click.option("--output-dir", "-o", default=None, help="Directory for result files")
@click.option("--config", "config_path", default=None, help="Station config file")
@click.option(
    "--current-limit", type=float, default=None, help="Source current limit (mA)"
)
@click.option(
    "--mock/--no-mock", default=False, help="Use simulated instruments (no hardware)"
)
@click.option(
    "--shutdown-on-abort/--no-shutdown-on-abort",
    default=True,
    help="Try to switch the source off if the sweep aborts (default: enabled)",
)
@click.option(
    "--log-to-file/--no-log-to-file",
    "-ltf/",
    default=True,
    help="Enable/disable logging to file (default: enabled)",
)
@click.option(
    "--log-path",
    "-lp",
    default="",
    help="Custom path for log file (default: ~/.ldsweep/ldsweep.log)",
)
@click.option(
    "--log-level",
    "-ll",
    default=DEFAULT_LOGLEVEL,
    help="Logging level (TRACE, DEBUG, INFO, WARNING, ERROR) (default: INFO)",
)
def sweep(
    start,
    stop,
    step,
    dwell,
    variant,
    source_address,
    analyzer_address,
    output_dir,
    config_path,
    current_limit,
    mock,
    shutdown_on_abort,
    log_to_file,
    log_path,
    log_level,
):
    """Run a current sweep and save the results.

    Writes current_sweep_results.csv (and traces/ for the trace variant) plus
    sweep_metadata.json into the output directory.
    """
    start_log(
        log_to_file=log_to_file,
        log_to_stdout=True,
        log_path=log_path,
        log_level=log_level,
    )
    try:
        try:
            station = load_station_config(config_path)
        except ValidationError as e:
            raise click.UsageError(str(e))
        try:
            plan = SweepPlan(start, stop, step, dwell_time=dwell / 1000.0)
        except ValidationError as e:
            raise click.BadParameter(str(e))

        variant = SweepVariant(variant)
        output_dir = output_dir or station.output_dir
        timing = station.timing()
        analyzer_setup = station.analyzer_setup()
        limit = current_limit if current_limit is not None else station.current_limit_ma
        last_current = plan.current_at(max(plan.point_count - 1, 0))
        if last_current > limit:
            raise click.BadParameter(
                f"Sweep exceeds the source current limit of {limit} mA"
            )

        try:
            source_t, analyzer_t = _open_transports(
                variant, station, source_address, analyzer_address, mock
            )
        except TransportError as e:
            raise click.ClickException(str(e))

        started = timestamp()
        instruments = {}
        try:
            source = CLD1015(source_t)
            instruments["source"] = source.initialise(limit)
            analyzer = None
            if analyzer_t is not None:
                analyzer = HP70952B(analyzer_t)
                instruments["analyzer"] = analyzer.initialise()

            outcome = run_sweep(
                source,
                analyzer,
                plan,
                capture_trace=variant is SweepVariant.TRACE,
                output_dir=output_dir,
                timing=timing,
                analyzer_setup=analyzer_setup,
                shutdown_on_abort=shutdown_on_abort,
            )
        except SweepAbortedError as e:
            if e.outcome is not None:
                save_metadata(
                    output_dir,
                    plan,
                    e.outcome,
                    timing,
                    analyzer_setup,
                    started,
                    instruments,
                )
            raise click.ClickException(str(e))
        except TransportError as e:
            raise click.ClickException(f"Instrument initialisation failed: {e}")
        finally:
            source_t.close()
            if analyzer_t is not None:
                analyzer_t.close()

        save_metadata(
            output_dir, plan, outcome, timing, analyzer_setup, started, instruments
        )
        click.echo(f"Sweep completed: {outcome.points_recorded} points")
        click.echo(f"Results saved to {outcome.summary_path}")
        if outcome.unconfirmed_points:
            click.echo(
                f"WARNING: {len(outcome.unconfirmed_points)} point(s) without a "
                "confirmed analyzer sweep"
            )
        click.echo(f"Final error check on CLD1015: {outcome.source_error}")
        if outcome.analyzer_error is not None:
            click.echo(f"Final error check on OSA: {outcome.analyzer_error}")
    finally:
        shutdown_log()


@cli.command()
@click.option("--filter", "filter_string", default=None, help="e.g. USB or GPIB")
@click.option("--model", "model_filter", default=None, help="Filter on identity")
def visa(filter_string: Optional[str], model_filter: Optional[str]):
    """List VISA instruments and their identity strings."""
    devices = list_visa_devices(filter_string=filter_string, model_filter=model_filter)
    if not devices:
        click.echo("No VISA devices found")
        return
    for address, idn in devices.items():
        click.echo(f"{address}: {idn}")
    logger.debug("Listed {} VISA devices", len(devices))
