"""
grafen/cli.py

Command-line interface for grafen.

Commands
--------
  grafen init       Validate a system definition and its database.  Prints a
                    template definition if none exists.
  grafen build      Construct the system and write it to a structure file.
  grafen describe   List the definitions in a database and/or the components
                    of a system definition.

Usage
-----
    grafen init  [--config system.yaml]
    grafen build [--config system.yaml] [--output out.gro] [--title STR]
                 [--seed N] [--verbose]
    grafen describe [--database grafen.json] [--config system.yaml]
"""

from __future__ import annotations

import sys
import logging
from pathlib import Path

import click

# ---------------------------------------------------------------------------
# Logging setup, configured once at CLI entry
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%H:%M:%S",
        level=level,
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

_config_option = click.option(
    "--config", "-c",
    default="system.yaml",
    show_default=True,
    type=click.Path(exists=False, dir_okay=False),
    help="Path to the system definition YAML file.",
)

_verbose_option = click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)


def _load_config_or_exit(config_path: Path):
    if not config_path.exists():
        click.echo(f"Error: config file not found: {config_path}", err=True)
        raise SystemExit(1)

    try:
        from grafen.config import load_config
        return load_config(config_path)
    except Exception as exc:
        click.echo(f"Error: config validation failed:\n  {exc}", err=True)
        raise SystemExit(1)


def _load_database_or_exit(database_path: Path):
    try:
        from grafen.database import read_database
        return read_database(database_path)
    except Exception as exc:
        click.echo(f"Error: could not read database {database_path}:\n  {exc}", err=True)
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(package_name="grafen")
def cli() -> None:
    """
    grafen: build substrates and compose them into simulation systems.

    Start with `grafen init > system.yaml`, edit the definition, then run
    `grafen build` to write the system.
    """


# ---------------------------------------------------------------------------
# grafen init
# ---------------------------------------------------------------------------

@cli.command("init")
@_config_option
@_verbose_option
def cmd_init(config: str, verbose: bool) -> None:
    """
    Validate a system definition and the database it refers to.

    If no definition is found, prints a fully commented template to stdout
    and exits with code 1.  Capture it to create your definition:

        grafen init > system.yaml
        # then edit system.yaml and run:
        grafen init
    """
    _setup_logging(verbose)
    config_path = Path(config)

    # The shell creates an empty file before this process starts when the
    # template is redirected into it, so a zero-byte file counts as missing.
    if not config_path.exists() or config_path.stat().st_size == 0:
        from grafen.config import generate_example_config
        click.echo(generate_example_config(), nl=False)
        raise SystemExit(1)

    cfg = _load_config_or_exit(config_path)
    click.echo(f"✓ Config valid: {config_path}")

    if cfg.database is not None:
        database_path = cfg.resolve(cfg.database)
        db = _load_database_or_exit(database_path)
        missing = [
            c.preset for c in cfg.components
            if c.preset is not None
            and c.preset not in {d.name for d in db.component_definitions}
        ]
        if missing:
            click.echo(f"Error: presets not defined in {database_path}: {missing}", err=True)
            raise SystemExit(1)
        click.echo(f"✓ Database valid: {database_path}")

    click.echo()
    click.echo("Next step:")
    click.echo(f"  grafen build --config {config_path}")


# ---------------------------------------------------------------------------
# grafen build
# ---------------------------------------------------------------------------

@cli.command("build")
@_config_option
@_verbose_option
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Output structure file (default: 'output' in the definition).")
@click.option("--title", "-t", type=str, default=None,
              help="Title of the system (default: 'title' in the definition).")
@click.option("--seed", type=int, default=None,
              help="Random seed for reproducibility (default: 'seed' in the definition).")
def cmd_build(
    config: str,
    verbose: bool,
    output: str | None,
    title: str | None,
    seed: int | None,
) -> None:
    """
    Construct the system and write it to a structure file.

    .gro files are written natively; any other suffix is passed to ASE.
    """
    _setup_logging(verbose)
    cfg = _load_config_or_exit(Path(config))

    if title is not None:
        cfg.title = title
    if seed is not None:
        cfg.seed = seed
    output_path = Path(output) if output is not None else cfg.resolve(cfg.output)

    from grafen.builder import build_system
    from grafen.io import write_system
    try:
        system = build_system(cfg)
        write_system(system, output_path)
    except Exception as exc:
        logging.getLogger(__name__).debug("Build failed", exc_info=True)
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    click.echo(
        f"✓ Wrote '{system.title}' to {output_path}: "
        f"{system.num_residues} residues, {system.num_atoms} atoms"
    )


# ---------------------------------------------------------------------------
# grafen describe
# ---------------------------------------------------------------------------

@cli.command("describe")
@click.option("--database", "-d", type=click.Path(dir_okay=False), default=None,
              help="Database JSON file to list.")
@click.option("--config", "-c", type=click.Path(dir_okay=False), default=None,
              help="System definition whose components are built and listed.")
@_verbose_option
def cmd_describe(database: str | None, config: str | None, verbose: bool) -> None:
    """List database definitions and/or the components of a system."""
    _setup_logging(verbose)
    if database is None and config is None:
        click.echo("Error: give --database and/or --config.", err=True)
        raise SystemExit(1)

    if database is not None:
        database_path = Path(database)
        if not database_path.exists():
            click.echo(f"Error: database file not found: {database_path}", err=True)
            raise SystemExit(1)
        click.echo(_load_database_or_exit(database_path).describe())

    if config is not None:
        cfg = _load_config_or_exit(Path(config))
        from grafen.builder import build_system
        try:
            system = build_system(cfg)
        except Exception as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(1)
        if database is not None:
            click.echo()
        click.echo(system.describe())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    cli()


if __name__ == "__main__":
    main()
