"""
Command-Line Interface
======================

Single responsibility: Provide a user-friendly CLI for preset conversion.
"""

import sys
from pathlib import Path
from typing import Optional

import click
import numpy as np
import torch
from click.core import ParameterSource

from bodymorph import __version__
from bodymorph.core.catalog import SliderCatalog
from bodymorph.core.exceptions import BodyMorphError, TemplateGrammarError, TriFormatError
from bodymorph.core.morpher import create_applier
from bodymorph.core.randomizer import randomize_descriptor
from bodymorph.core.templates import format_templates
from bodymorph.core.tri import read_tri
from bodymorph.pipeline.config import ConverterConfig
from bodymorph.pipeline.orchestrator import build_catalog, validate_preset_files
from bodymorph.pipeline.output import FileStatus, plugin_status, write_outputs
from bodymorph.pipeline.sources import (
    discover_preset_files,
    filter_presets,
    load_category_sources,
    load_presets,
    load_slider_sources,
)
from bodymorph.utils.logging import get_logger, setup_logger

logger = get_logger(__name__)

GENDER_NAMES = {0: "male", 1: "female", -1: "ambiguous"}

log_level_option = click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='WARNING',
    help='Logging level (default: WARNING)'
)


def _fail(message: str, code: int = 1):
    click.secho(f"✗ {message}", fg='red', bold=True, err=True)
    sys.exit(code)


def _read_text(path: Path) -> str:
    return path.read_text(encoding='utf-8')


def _catalog_from_files(sliders, categories) -> SliderCatalog:
    slider_sources = [s for path in sliders for s in load_slider_sources(path)]
    category_sources = [c for path in categories for c in load_category_sources(path)]
    return SliderCatalog.build(slider_sources, category_sources)


def _passed(ctx: click.Context, name: str) -> bool:
    """True when the user gave ``name`` on the command line."""
    return ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE


def _load_config(ctx: click.Context, config_file: Optional[Path], log_level: str) -> Optional[ConverterConfig]:
    """Load ``--config`` and apply its logging settings unless ``--log-level`` was given."""
    setup_logger(log_level=log_level)
    if config_file is None:
        return None
    try:
        config = ConverterConfig.from_json(config_file)
    except BodyMorphError as e:
        _fail(f"Configuration error: {e}")

    if not _passed(ctx, 'log_level'):
        setup_logger(log_level=config.log_level, verbose=config.verbose)
    logger.debug(f"Loaded {config!r}")
    return config


config_option = click.option(
    '-c', '--config', 'config_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None, help='Converter config JSON; command-line options take precedence'
)


@click.group()
@click.version_option(version=__version__, prog_name='bodymorph')
def cli():
    """
    BodyMorph - Convert slider presets into BodyGen morph files.

    \b
    Examples:
        # Inspect a morph file
        bodymorph tri-info femalebody.tri

        # Validate presets against slider definitions
        bodymorph validate presets.json --sliders cbbe.json

        # Write templates.ini / morphs.ini into every plugin folder
        bodymorph write my_templates.ini Data/BodyGenData
    """
    pass


@cli.command('tri-info')
@click.argument('tri_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@log_level_option
def tri_info(tri_file, log_level):
    """Decode a TRI file and list its morph channels."""
    setup_logger(log_level=log_level)
    try:
        tri = read_tri(tri_file)
    except TriFormatError as e:
        _fail(f"{tri_file.name}: {e}")

    click.secho(f"Set: {tri.set_name}", bold=True)
    click.echo(f"Channels: {len(tri.morphs)}")
    for morph in tri.morphs:
        click.echo(f"  {morph.name}  scale={morph.scale:g}  entries={len(morph)}")


@cli.command()
@click.argument('preset_files', nargs=-1, required=True,
                type=click.Path(exists=True, path_type=Path))
@config_option
@click.option('-s', '--sliders', multiple=True, type=click.Path(exists=True, path_type=Path),
              help='Slider source JSON (repeatable)')
@click.option('--categories', multiple=True, type=click.Path(exists=True, path_type=Path),
              help='Slider category JSON (repeatable)')
@click.option('--fractions', is_flag=True,
              help='Preset values are already fractions (default: percentages)')
@click.option('-q', '--query', default='', help='Only presets whose name contains this text')
@click.option('-g', '--group', 'groups', multiple=True, help='Only presets in this group (repeatable)')
@click.option('-w', '--workers', type=int, default=1, help='Parallel workers (default: 1)')
@log_level_option
@click.pass_context
def validate(ctx, preset_files, config_file, sliders, categories, fractions, query, groups, workers, log_level):
    """
    Validate presets and print their BodyGen descriptors.

    PRESET_FILES are preset JSON files or folders of them. With --config,
    sliders, categories, value scale and workers come from the config
    unless given on the command line.

    Exit status is 1 when any preset had unsupported sliders or a file
    could not be read.
    """
    config = _load_config(ctx, config_file, log_level)
    percent_values = not fractions
    if config is not None:
        if not _passed(ctx, 'fractions'):
            percent_values = config.percent_values
        if not _passed(ctx, 'workers'):
            workers = config.num_workers

    try:
        if config is not None and not sliders and not categories:
            catalog = build_catalog(config)
        elif sliders or config is not None:
            catalog = _catalog_from_files(
                sliders or config.slider_sources,
                categories or (config.category_sources if config is not None else ()),
            )
        else:
            _fail("Provide slider definitions with --sliders or --config")
    except BodyMorphError as e:
        _fail(f"Configuration error: {e}")

    paths = []
    for path in preset_files:
        paths.extend(discover_preset_files(path) if path.is_dir() else [path])

    files = [load_presets(path, percent_values) for path in paths]
    for preset_file in files:
        preset_file.presets = filter_presets(preset_file.presets, query, groups)

    problems = False
    for preset_file, results in validate_preset_files(catalog, files, workers):
        click.secho(preset_file.filename, fg='cyan', bold=True)
        if not preset_file.ok:
            click.secho(f"  ✗ {preset_file.error}", fg='red')
            problems = True
            continue

        for result in results:
            mark, color = ("✓", 'green') if result.valid else ("✗", 'red')
            click.secho(f"  {mark} {result.name} [{GENDER_NAMES[result.gender]}]", fg=color)
            click.echo(f"    {result.bodygen_line}")
            for error in result.errors:
                click.secho(f"    error: {error}", fg='red')
            for warning in result.warnings:
                click.secho(f"    warning: {warning}", fg='yellow')
            problems = problems or not result.valid

    sys.exit(1 if problems else 0)


@cli.command('format')
@click.argument('templates_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--templates-out', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Write formatted templates.ini here')
@click.option('--morphs-out', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Write morphs.ini here')
@log_level_option
def format_command(templates_file, templates_out, morphs_out, log_level):
    """Format a templates.ini and derive its morphs.ini."""
    setup_logger(log_level=log_level)
    try:
        formatted = format_templates(_read_text(templates_file))
    except TemplateGrammarError as e:
        _fail(str(e))

    if templates_out is None and morphs_out is None:
        click.secho("# templates.ini", bold=True)
        click.echo(formatted.templates)
        click.echo()
        click.secho("# morphs.ini", bold=True)
        click.echo(formatted.morphs)
        return

    if templates_out is not None:
        templates_out.write_text(formatted.templates, encoding='utf-8')
        click.echo(f"Wrote {templates_out}")
    if morphs_out is not None:
        morphs_out.write_text(formatted.morphs, encoding='utf-8')
        click.echo(f"Wrote {morphs_out}")


def _plugin_root(from_path: Optional[Path], config: Optional[ConverterConfig]) -> Path:
    """FROM when given, else the config's output folder."""
    if from_path is not None:
        return from_path
    if config is not None:
        return config.output_folder
    raise click.UsageError("Provide FROM_PATH or --config")


@cli.command()
@click.argument('templates_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('from_path', required=False, type=click.Path(exists=True, path_type=Path))
@config_option
@log_level_option
@click.pass_context
def status(ctx, templates_file, from_path, config_file, log_level):
    """
    Show which plugin output files writing would create or update.

    FROM_PATH is the folder holding the plugin (.esm) folders, or a .ini
    inside one of them; without it the config's output folder is used.
    """
    config = _load_config(ctx, config_file, log_level)
    root = _plugin_root(from_path, config)
    try:
        plugins = plugin_status(root, _read_text(templates_file))
    except TemplateGrammarError as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"Could not read plugin folders under {root}: {e}")

    if not plugins:
        click.secho(f"No plugin folders found from {root}", fg='yellow')
        return

    colors = {FileStatus.UP_TO_DATE: 'green'}
    for plugin in plugins:
        click.secho(plugin.name + (" (source)" if plugin.source else ""), bold=True)
        click.secho(f"  templates.ini: {plugin.templates.value}", fg=colors.get(plugin.templates, 'yellow'))
        click.secho(f"  morphs.ini: {plugin.morphs.value}", fg=colors.get(plugin.morphs, 'yellow'))


@cli.command()
@click.argument('templates_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('from_path', required=False, type=click.Path(exists=True, path_type=Path))
@config_option
@log_level_option
@click.pass_context
def write(ctx, templates_file, from_path, config_file, log_level):
    """
    Write templates.ini and morphs.ini into every plugin folder.

    FROM_PATH as for ``status``; without it the config's output folder is used.
    """
    config = _load_config(ctx, config_file, log_level)
    root = _plugin_root(from_path, config)
    try:
        count = write_outputs(root, _read_text(templates_file))
    except TemplateGrammarError as e:
        _fail(str(e))
    except OSError as e:
        _fail(f"An error occurred while writing to the plugins: {e}")

    click.secho(f"✓ Successfully written .ini files to {count} plugins", fg='green', bold=True)


@cli.command()
@click.argument('base_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('tri_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('descriptor')
@click.option('-o', '--output', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Output .npy file (default: <base>_morphed.npy)')
@click.option('--gpu/--cpu', default=None, help='Use GPU acceleration (default: config device, else CPU)')
@config_option
@log_level_option
@click.pass_context
def preview(ctx, base_file, tri_file, descriptor, output, gpu, config_file, log_level):
    """
    Apply a BodyGen descriptor to a base vertex buffer (.npy).

    \b
    Example:
        bodymorph preview body.npy femalebody.tri "BigButt@0.5,Thighs@-1"
    """
    config = _load_config(ctx, config_file, log_level)
    if gpu is None:
        device = config.device if config is not None else torch.device('cpu')
    else:
        device = torch.device('cuda' if gpu else 'cpu')
    if device.type == 'cuda' and not torch.cuda.is_available():
        _fail("CUDA requested but not available, use --cpu")

    try:
        tri = read_tri(tri_file)
        base = np.load(base_file)
        applier = create_applier(tri, device)
        morphed = applier.apply_descriptor(base, descriptor)
    except (BodyMorphError, ValueError) as e:
        _fail(str(e))

    output = output or base_file.with_name(f"{base_file.stem}_morphed.npy")
    np.save(output, morphed.cpu().numpy())
    click.secho(f"✓ Saved morphed vertices to {output} ({device.type})", fg='green')


@cli.command()
@click.option('-s', '--sliders', multiple=True, required=True,
              type=click.Path(exists=True, path_type=Path), help='Slider source JSON (repeatable)')
@click.option('--categories', multiple=True, type=click.Path(exists=True, path_type=Path),
              help='Slider category JSON (repeatable)')
@click.option('--gender', type=click.IntRange(0, 1), default=1, help='Gender 0 or 1 (default: 1)')
@click.option('--low', type=click.IntRange(-100, 100), default=-100, help='Low boundary percent')
@click.option('--high', type=click.IntRange(-100, 100), default=100, help='High boundary percent')
@click.option('--seed', type=int, default=None, help='Random seed')
@log_level_option
def randomize(sliders, categories, gender, low, high, seed, log_level):
    """Print a random descriptor covering every slider of one gender."""
    setup_logger(log_level=log_level)
    try:
        catalog = _catalog_from_files(sliders, categories)
        click.echo(randomize_descriptor(catalog, gender, (low, high), seed))
    except BodyMorphError as e:
        _fail(str(e))


def main():
    """Entry point for console_scripts."""
    cli()


if __name__ == '__main__':
    main()
