from eduportal import create_app
from eduportal.data_service import DataServiceError
from eduportal.extensions import get_data_service
from eduportal.materials import find_orphaned_uploads
from eduportal.views import fetch_materials
from flask import current_app
from flask.cli import with_appcontext
import click

app = create_app()


@app.cli.command("list-materials")
@with_appcontext
def list_materials():
    """Prints every study material, newest first"""
    materials = fetch_materials(get_data_service(), logger=current_app.logger)
    if not materials:
        click.echo("No study materials available yet")
        return
    for material in materials:
        click.echo(f"{material.display_date}\t{material.subject}\t{material.title}\t{material.file_url or '-'}")


@app.cli.command("find-orphans")
@with_appcontext
def find_orphans():
    """Reports uploaded blobs that no study material references"""
    bucket = current_app.config["STUDY_MATERIALS_BUCKET"]
    try:
        orphans = find_orphaned_uploads(get_data_service(), bucket)
    except DataServiceError as e:
        raise click.ClickException(str(e))

    for key in orphans:
        click.echo(f"{bucket}/{key}")
    click.echo(f"{len(orphans)} orphaned upload(s)")
