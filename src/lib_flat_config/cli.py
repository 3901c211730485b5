"""CLI adapter for ``lib_flat_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose the properties store via a command line interface so operators can
inspect resolved values, subsets and raw entries without writing Python code,
and make small edits to ``.properties`` files.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_get` – prints one typed, substituted value.
* :func:`cli_keys` – lists the keys of a store or subset.
* :func:`cli_dump` – prints a store or subset as JSON or ``.properties``.
* :func:`cli_set` / :func:`cli_unset` – edit a ``.properties`` file in place.
* :func:`cli_env` – prints an environment snapshot as JSON.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root
(:mod:`lib_flat_config.core`) and the public :class:`FlatConfig` API only.
``lib_cli_exit_tools`` centralises the exit code strategy so configuration
errors surface consistently across shells and CI.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import FlatConfig, dump_config, read_config, read_config_env, read_config_file, write_config

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

VALUE_TYPES: Final[tuple[str, ...]] = ("string", "boolean", "int", "long", "decimal", "array")
DUMP_FORMATS: Final[tuple[str, ...]] = ("json", "properties")


def _resolve_version() -> str:
    """Return the installed package version with sensible fallbacks.

    Returns
    -------
    str
        Distribution version if available, otherwise ``"0.0.0"``.
    """

    try:
        return metadata.version("lib_flat_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Flat properties configuration with subsets and ${key} substitution",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_flat_config",
    message="lib_flat_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_flat_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_flat_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_flat_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


_subset_option = click.option("--subset", default=None, help="Address keys relative to this subset prefix")
_package_option = click.option(
    "--package",
    "packages",
    multiple=True,
    help="Search SOURCE as a resource of this package before the filesystem (repeatable)",
)


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source")
@click.argument("key")
@_subset_option
@_package_option
@click.option(
    "--type",
    "value_type",
    type=click.Choice(VALUE_TYPES, case_sensitive=False),
    default="string",
    show_default=True,
    help="Conversion applied to the resolved value",
)
@click.option("--default", "default", default=None, help="Printed when the key has no value (otherwise an error)")
def cli_get(
    source: str,
    key: str,
    subset: Optional[str],
    packages: Sequence[str],
    value_type: str,
    default: Optional[str],
) -> None:
    """Print the resolved value of KEY from the properties SOURCE.

    Arrays are printed as JSON lists; booleans as ``true`` / ``false``.
    """

    config = _open(source, packages, subset)
    getter = _getter(config, value_type.lower())
    value = getter(key) if default is None else getter(key, default)
    click.echo(_render(value))


@cli.command("keys", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source")
@_subset_option
@_package_option
def cli_keys(source: str, subset: Optional[str], packages: Sequence[str]) -> None:
    """List the keys of SOURCE (or of one of its subsets), sorted."""

    config = _open(source, packages, subset)
    for key in sorted(config.keys()):
        click.echo(key)


@cli.command("dump", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source")
@_subset_option
@_package_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(DUMP_FORMATS, case_sensitive=False),
    default="json",
    show_default=True,
    help="Output format; subsets can only be dumped as JSON",
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_dump(
    source: str,
    subset: Optional[str],
    packages: Sequence[str],
    output_format: str,
    indent: Optional[int],
) -> None:
    """Print SOURCE as JSON or ``.properties``.

    A root dump shows raw values (``${...}`` templates intact); a subset dump
    shows resolved values with the prefix stripped.
    """

    config = _open(source, packages, subset)
    if output_format.lower() == "properties":
        click.echo(dump_config(config), nl=False)
        return
    click.echo(config.to_json(indent=indent))


@cli.command("set", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path", type=click.Path(path_type=Path, dir_okay=False))
@click.argument("key")
@click.argument("value")
def cli_set(path: Path, key: str, value: str) -> None:
    """Store KEY=VALUE in the properties file PATH, creating it when missing."""

    config = read_config_file(path) if path.exists() else FlatConfig()
    config.put(key, value)
    click.echo(str(write_config(config, path)))


@cli.command("unset", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.argument("key")
def cli_unset(path: Path, key: str) -> None:
    """Remove KEY from the properties file PATH."""

    config = read_config_file(path)
    config.remove(key)
    click.echo(str(write_config(config, path)))


@cli.command("env", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--prefix", default=None, help="Only variables starting with PREFIX_ (mapped to dotted keys)")
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_env(prefix: Optional[str], indent: Optional[int]) -> None:
    """Print the process environment as a flat configuration in JSON."""

    click.echo(read_config_env(prefix).to_json(indent=indent))


def _open(source: str, packages: Sequence[str], subset: Optional[str]) -> FlatConfig:
    """Load *source* and narrow it to *subset* when given."""

    config = read_config(source, packages=packages)
    return config.subset(subset) if subset else config


def _getter(config: FlatConfig, value_type: str) -> Callable[..., Any]:
    """Return the typed accessor of *config* matching *value_type*."""

    return {
        "string": config.get_string,
        "boolean": config.get_boolean,
        "int": config.get_int,
        "long": config.get_long,
        "decimal": config.get_decimal,
        "array": config.get_string_array,
    }[value_type]


def _render(value: Any) -> str:
    """Format an accessor result for terminal output."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_flat_config",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
