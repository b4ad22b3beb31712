from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from cbcparser.commons.cbc_engine import CBCEngine, load_cfg
from cbcparser.commons.errors import CBCParserError
from cbcparser.commons.logger import setup_logging
from cbcparser.commons.writer import OutFormat

app = typer.Typer(add_completion=False, help="CBC analyzer export to JSON converter")


def _pick_format(indent: Optional[bool], fmt: Optional[OutFormat] = None) -> Optional[OutFormat]:
    if indent is None:
        return fmt
    return OutFormat.JSON_INDENT if indent else OutFormat.JSON


def _run(
    device: str,
    input_file: Path,
    ranges_file: Optional[Path],
    multi: Optional[bool],
    fmt: Optional[OutFormat],
    output: Optional[Path] = None,
    settings: Optional[Path] = None,
):
    try:
        cfg = load_cfg(settings)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        typer.echo(f"error: cannot load settings: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        logger = setup_logging(cfg.paths.logs_root, cfg.logging.level)
    except (OSError, ValueError) as e:
        typer.echo(f"error: cannot set up logging: {e}", err=True)
        raise typer.Exit(code=1)
    logger.debug(f"Decoding {input_file} (device={device or 'auto'}, multi={multi})")

    try:
        engine = CBCEngine(cfg).with_device(device)
        if ranges_file:
            engine.load_ranges(Path(ranges_file))
        with open(input_file, "rb") as f:
            result = engine.normalize(f, multi=multi)
        payload = engine.render(result, fmt)
    except (CBCParserError, OSError) as e:
        logger.error(f"Failed to process {input_file}: {e}")
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)

    if output:
        output.write_bytes(payload)
        logger.info(f"Result written to {output}")
    else:
        typer.echo(payload.decode("utf-8"))


@app.command()
def edan_single(
    input_file: Path = typer.Argument(..., help="Edan H30 export (.csv)"),
    normal_ranges_file: Path = typer.Argument(..., help="normal ranges JSON"),
    indent: Optional[bool] = typer.Option(None, "--indent/--compact", help="indented or compact JSON"),
):
    """Print the first sample of an Edan export."""
    _run("EDAN", input_file, normal_ranges_file, False, _pick_format(indent))


@app.command()
def edan_multi(
    input_file: Path = typer.Argument(..., help="Edan H30 export (.csv)"),
    normal_ranges_file: Path = typer.Argument(..., help="normal ranges JSON"),
    indent: Optional[bool] = typer.Option(None, "--indent/--compact", help="indented or compact JSON"),
):
    """Print every sample of an Edan export."""
    _run("EDAN", input_file, normal_ranges_file, True, _pick_format(indent))


@app.command()
def human_single(
    input_file: Path = typer.Argument(..., help="HumaCount 30 export (.txt, tab separated)"),
    normal_ranges_file: Path = typer.Argument(..., help="normal ranges JSON"),
    indent: Optional[bool] = typer.Option(None, "--indent/--compact", help="indented or compact JSON"),
):
    """Print the first sample of a Human export; fails on a blank run."""
    _run("HUMAN", input_file, normal_ranges_file, False, _pick_format(indent))


@app.command()
def human_multi(
    input_file: Path = typer.Argument(..., help="HumaCount 30 export (.txt, tab separated)"),
    normal_ranges_file: Path = typer.Argument(..., help="normal ranges JSON"),
    indent: Optional[bool] = typer.Option(None, "--indent/--compact", help="indented or compact JSON"),
):
    """Print every patient sample of a Human export, skipping blank runs."""
    _run("HUMAN", input_file, normal_ranges_file, True, _pick_format(indent))


@app.command()
def parse(
    input_file: Path = typer.Argument(..., help="analyzer export"),
    ranges: Optional[Path] = typer.Option(None, help="normal ranges JSON (defaults to settings)"),
    device: str = typer.Option("auto", help="auto | edan | human"),
    multi: Optional[bool] = typer.Option(None, "--multi/--single", help="decode every row or only the first one"),
    fmt: Optional[OutFormat] = typer.Option(None, "--format", help="json | json-indent"),
    output: Optional[Path] = typer.Option(None, help="write to this file instead of stdout"),
    settings: Optional[Path] = typer.Option(None, help="settings YAML"),
):
    """Decode an export from either analyzer, detecting the device from the header."""
    _run("" if device.lower() == "auto" else device, input_file, ranges, multi, fmt, output, settings)
