import click

from ldsweep.cli.base import tree_option
from ldsweep.system import (
    create_default_config_file,
    default_config_path,
    load_station_config,
)
from ldsweep.types import ValidationError


@click.group()
@tree_option
def config():
    """Station configuration commands."""
    pass


@config.command()
@click.option("--path", default=None, help="Config file (default: ~/.ldsweep)")
@click.option("--force/--no-force", default=False, help="Overwrite existing file")
def init(path, force):
    """Write a default station configuration file."""
    try:
        written = create_default_config_file(path, overwrite=force)
    except FileExistsError as e:
        raise click.UsageError(f"{e} (use --force to overwrite)")
    click.echo(f"Created {written}")


@config.command()
@click.option("--path", default=None, help="Config file (default: ~/.ldsweep)")
def show(path):
    """Print the station configuration in use."""
    try:
        station = load_station_config(path)
    except ValidationError as e:
        raise click.UsageError(str(e))
    click.echo(f"# {path or default_config_path()}")
    for key, value in station.to_dict().items():
        click.echo(f"{key} = {value}")
