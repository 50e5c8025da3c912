"""provreg CLI — generate and inspect provider registries."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from provreg import TOOL_NAME, __version__
from provreg.config import (
    CONFIG_FILE,
    DIR_OPTION,
    DISABLED_OPTION,
    LOG_OPTION,
    VERBOSE_OPTION,
    Options,
)
from provreg.diagnostics import Severity
from provreg.processing.policy import POLICIES, get_policy

console = Console()

FLAVOR_CHOICE = click.Choice(sorted(POLICIES))


def _load_options(
    config: str,
    options: tuple[str, ...],
    dir: str | None = None,
    log: bool = False,
    verbose: bool = False,
    disabled: bool = False,
) -> Options:
    """Combine the config file, ``-O key[=value]`` pairs and dedicated flags."""
    overrides: dict[str, str | None] = {}
    for item in options:
        key, sep, value = item.partition("=")
        overrides[key.strip()] = value if sep else None
    if dir is not None:
        overrides[DIR_OPTION] = dir
    if log:
        overrides[LOG_OPTION] = "true"
    if verbose:
        overrides[VERBOSE_OPTION] = "true"
    if disabled:
        overrides[DISABLED_OPTION] = "true"
    return Options.from_yaml(config, overrides=overrides, processor_info=TOOL_NAME)


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Show internal debug logging")
def main(debug: bool):
    """provreg — incremental provider-registry generator.

    Finds classes marked with @provider_for, @type_provider_for or
    @index_for and keeps the provider-list resources in sync with them.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── Generate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("source_root", type=click.Path(exists=True, file_okay=False))
@click.option("--output", "-o", default=None, help="Output root (default: SOURCE_ROOT)")
@click.option("--flavor", "-f", default="service", type=FLAVOR_CHOICE, help="Registry flavor")
@click.option("--dir", "dir_", default=None, help="Resource directory under the output root")
@click.option("--log", is_flag=True, help="Write a side-channel log next to the resources")
@click.option("--verbose", "-v", is_flag=True, help="Show processor notes")
@click.option("--disabled", is_flag=True, help="Skip all processing")
@click.option("--config", "-c", default=CONFIG_FILE, help="YAML config file")
@click.option("--option", "-O", "options", multiple=True, help="Raw option, key[=value]")
def generate(
    source_root: str,
    output: str | None,
    flavor: str,
    dir_: str | None,
    log: bool,
    verbose: bool,
    disabled: bool,
    config: str,
    options: tuple[str, ...],
):
    """Generate or update the provider resources for SOURCE_ROOT."""
    from provreg.generator import RegistryGenerator

    opts = _load_options(config, options, dir=dir_, log=log, verbose=verbose, disabled=disabled)
    generator = RegistryGenerator(source_root, output, policy=get_policy(flavor), options=opts)

    console.print(f"\n[bold blue]provreg[/] — Generating {flavor} registry: {source_root}\n")

    result = generator.generate()
    if result.disabled:
        console.print("[yellow]Processing disabled.[/]")
        return

    for diagnostic in result.sink.diagnostics:
        where = f" [dim]({escape(diagnostic.location)})[/]" if diagnostic.location else ""
        if diagnostic.severity == Severity.ERROR:
            console.print(f"  [red]x[/] {escape(diagnostic.message)}{where}")
        elif diagnostic.severity == Severity.WARNING:
            console.print(f"  [yellow]![/] {escape(diagnostic.message)}{where}")
        elif opts.verbose:
            console.print(f"  [dim]{escape(diagnostic.message.rstrip())}[/]")

    summary = "\n".join(report.summary() for report in result.rounds)
    console.print(Panel(summary, title=f"{result.resource_dir}"))

    if result.final and result.final.written:
        for name in result.final.written:
            console.print(f"  [green]v[/] {name}")

    if not result.passed:
        console.print(f"\n[red]FAIL[/] {result.sink.summary()}")
        raise SystemExit(1)


# ── Show ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("output_root", type=click.Path(exists=True, file_okay=False))
@click.option("--flavor", "-f", default="service", type=FLAVOR_CHOICE, help="Registry flavor")
@click.option("--dir", "dir_", default=None, help="Resource directory under the output root")
def show(output_root: str, flavor: str, dir_: str | None):
    """List the persisted resources and their providers."""
    from provreg.config import clean_path
    from provreg.persistence.file_persistence import FilePersistence
    from provreg.registry.entry import Entry

    policy = get_policy(flavor)
    resource_dir = clean_path(dir_) or policy.default_dir
    persistence = FilePersistence(output_root, resource_dir)

    names = persistence.list_existing_names()
    if not names:
        console.print(f"[yellow]No {flavor} resources found.[/]")
        return

    table = Table(title=f"{flavor.capitalize()} registry ({len(names)} resources)")
    table.add_column("Name", style="cyan")
    table.add_column("Providers", justify="right")
    table.add_column("Provider list")

    for name in names:
        entry = Entry(name)
        entry.deserialize(persistence.read_initial(name) or "")
        table.add_row(name, str(len(entry.providers)), "\n".join(entry))

    console.print(table)


# ── Options ──────────────────────────────────────────────────────────


@main.command(name="options")
@click.option("--config", "-c", default=CONFIG_FILE, help="YAML config file")
@click.option("--option", "-O", "options", multiple=True, help="Raw option, key[=value]")
def show_options(config: str, options: tuple[str, ...]):
    """Print the options report, including unrecognized values."""
    opts = _load_options(config, options)
    console.print(opts.report(), markup=False)
    for warning in opts.warnings:
        console.print(f"  [yellow]![/] {escape(warning)}")


if __name__ == "__main__":
    main()
