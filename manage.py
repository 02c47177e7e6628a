from clubcert.app import create_app, db

from flask_migrate import Migrate
from flask.cli import FlaskGroup
import click

from clubcert.services.certificates import (
    build_issuer,
    build_verification,
    get_certificate_for_registration,
)
from clubcert.shared.errors import NotFound, RenderingFailed
from clubcert.shared.storage import write_atomic


migrate = Migrate()


def create_clubcert_app():
    app = create_app()
    migrate.init_app(app, db)
    return app


cli = FlaskGroup(create_app=create_clubcert_app)


@cli.command("issue_bulk")
@click.option("--competition", "competition_id", required=True, type=int)
@click.option(
    "--include-participants",
    is_flag=True,
    help="Also certify registrants ranked below the podium",
)
def issue_bulk(competition_id: int, include_participants: bool):
    """Rank a competition and issue its missing certificates."""
    try:
        created = build_issuer().issue_bulk(competition_id, include_participants)
    except NotFound as exc:
        click.echo(str(exc), err=True)
        return
    for cert in created:
        click.echo(f"{cert.validation_code} {cert.recipient_name} {cert.achievement}")
    click.echo(f"{len(created)} certificate(s) generated")


@cli.command("render_cert")
@click.option("--registration", "registration_id", required=True, type=int)
@click.option("--out", "out_path", required=True, type=click.Path(dir_okay=False))
def render_cert(registration_id: int, out_path: str):
    """Issue (if needed) and write the certificate PDF for a registration."""
    try:
        cert, pdf_bytes = get_certificate_for_registration(registration_id)
    except NotFound as exc:
        click.echo(str(exc), err=True)
        return
    except RenderingFailed as exc:
        click.echo(f"Rendering failed: {exc}", err=True)
        return
    write_atomic(out_path, pdf_bytes)
    click.echo(f"{cert.validation_code} -> {out_path}")


@cli.command("verify_code")
@click.argument("code")
def verify_code(code: str):
    """Show the certificate behind a validation code."""
    service = build_verification()
    try:
        cert = service.get_by_code(code)
    except NotFound:
        click.echo("Not found", err=True)
        return
    summary = service.public_summary(cert)
    click.echo(
        f"{summary['validationCode']} {summary['recipientName']} "
        f"{summary['achievement']} ({summary['category']})"
    )


if __name__ == "__main__":
    cli()
