"""Click CLI commands for PropBuilder."""

import logging

import click

from .assemblers import list_categories
from .builder import PropBuilder
from .constants import OUTPUT_DIR, PREVIEW
from .errors import PropBuilderError
from .inputs import load_object_spec
from .store import FileTemplateStore

logger = logging.getLogger(__name__)


def _load(spec_path):
    try:
        return load_object_spec(spec_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Cannot read spec {spec_path}: {e}")


@click.group()
def cli():
    """PropBuilder CLI for generating object templates from artist assets."""
    pass


@cli.command()
@click.argument('spec_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default=str(OUTPUT_DIR),
              help='Root folder for generated templates')
@click.option('--preview/--no-preview', default=PREVIEW,
              help='Also write a GLB preview for each template')
def generate(spec_path: str, output: str, preview: bool):
    """Generate templates from a JSON object spec."""
    spec = _load(spec_path)
    builder = PropBuilder(store=FileTemplateStore(output, preview=preview))

    def _progress(pct, msg):
        click.echo(f"[{pct:3.0f}%] {msg}")

    try:
        handles = builder.generate(spec, progress_callback=_progress)
    except PropBuilderError as e:
        logger.error(f"Error generating templates: {e}")
        raise click.ClickException(str(e))

    click.echo(f"\n{'='*50}")
    click.echo(f"Generated {len(handles)} templates:")
    for handle in handles:
        click.echo(f"  {handle.artifact}: {handle.path}")
    click.echo(f"{'='*50}")


@cli.command()
@click.argument('spec_path', type=click.Path(exists=True, dir_okay=False))
def plan(spec_path: str):
    """Print the LOD bands a spec would produce."""
    spec = _load(spec_path)
    try:
        tree = PropBuilder().build_tree(spec)
    except PropBuilderError as e:
        raise click.ClickException(str(e))

    for artifact in tree.roots:
        lod_plan = artifact.root.lod
        if lod_plan is None:
            click.echo(f"{artifact.name}: no LOD group")
            continue
        click.echo(f"{artifact.name}: size={lod_plan.size:g}, "
                   f"shadow distance={lod_plan.shadow_distance:g}")
        for i, band in enumerate(lod_plan.bands):
            meshes = ", ".join(m.name for m in band.geometry) or "-"
            shadow = "shadows" if band.cast_shadows else "no shadows"
            click.echo(f"  LOD_{i}: {band.threshold:7.2f}%  {meshes}  ({shadow})")


@cli.command()
def categories():
    """List the available object categories."""
    click.echo("Categories:")
    for name in list_categories():
        click.echo(f" - {name}")


if __name__ == "__main__":
    cli()
