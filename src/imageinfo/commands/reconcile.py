import os

import click

from imageinfo.exceptions import ImageInfoError
from imageinfo.info.manifest import load_manifest
from imageinfo.publish import get_updated_image_info, read_text


@click.command()
@click.option(
    "--manifest",
    "manifest_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Manifest defining the repos, images and platforms",
)
@click.option(
    "--source",
    "source_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Image info file produced by the build",
)
@click.option(
    "--target",
    "target_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Published image info file to merge into",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Where to write the result  [default: the target file]",
)
@click.option("--dry-run", is_flag=True, help="Print the result instead of writing it")
def reconcile(manifest_path, source_path, target_path, output_path, dry_run):
    """Prune and merge image info files locally, without any git interaction."""
    output_path = output_path or target_path
    separate_output = os.path.abspath(output_path) != os.path.abspath(target_path)
    try:
        manifest = load_manifest(manifest_path)
        content = get_updated_image_info(source_path, target_path, manifest)
        if content is None:
            click.echo(f"No changes to {target_path} were needed.")
            if dry_run or not separate_output:
                return
            # the requested output still gets the unchanged document
            content = read_text(target_path)
    except ImageInfoError as e:
        raise click.ClickException(str(e))

    if dry_run:
        click.echo(content, nl=False)
        return

    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    click.echo(f"Updated {output_path}")
