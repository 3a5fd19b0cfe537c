#!/usr/bin/env python3
"""
Back-office document rendering — CLI entry point.

Usage examples:
  python main.py render invoice.json --kind invoice                 # PDF into ./output
  python main.py render invoice.json --kind invoice --format word   # DOCX
  python main.py render challan.json --kind challan --no-header --output out/
  python main.py render quote.json --kind quotation --business-name "Acme Ltd" --color "#0f766e"

  python main.py export 3f2a... --kind invoice --user u-123         # stored record, stored branding
"""
import json
import logging
from pathlib import Path

import click
from pydantic import ValidationError

from api.services.export import build_render_options
from config import Config
from docgen.database import Database
from docgen.dispatch import DOCUMENT_KINDS, OUTPUT_FORMATS, DocumentGenerationError, RenderedDocument, render_document
from models import RenderOptions, load_record


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quieten noisy third-party loggers
    logging.getLogger("reportlab").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _write(rendered: RenderedDocument, config: Config, output: str | None) -> Path:
    """Write into --output when given, otherwise into the configured output directory."""
    if output:
        output_dir = Path(output)
        output_dir.mkdir(parents=True, exist_ok=True)
    else:
        config.ensure_output_dir()
        output_dir = config.output_dir
    path = output_dir / rendered.filename
    path.write_bytes(rendered.content)
    return path


def _render(record, kind: str, fmt: str, options: RenderOptions) -> RenderedDocument:
    try:
        return render_document(record, kind, fmt, options)
    except (DocumentGenerationError, ValueError) as exc:
        raise click.ClickException(str(exc))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Render quotations, invoices and delivery challans as PDF or Word."""
    _setup_logging(verbose)


# --------------------------------------------------------------------
# render command
# --------------------------------------------------------------------

@cli.command()
@click.argument("record_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--kind", "-k", required=True, type=click.Choice(DOCUMENT_KINDS), help="Record kind")
@click.option("--format", "fmt", default=None, type=click.Choice(OUTPUT_FORMATS), help="Output format (default: pdf)")
@click.option("--output", "-o", default=None, type=click.Path(file_okay=False), help="Output directory")
@click.option("--no-header", is_flag=True, help="Omit the business header block")
@click.option("--no-footer", is_flag=True, help="Omit the footer line")
@click.option("--business-name", default=None, help="Business name for the header")
@click.option("--business-address", default=None, help="Business address line")
@click.option("--business-email", default=None, help="Business contact email")
@click.option("--business-phone", default=None, help="Business contact phone")
@click.option("--footer-text", default=None, help="Footer text (default: business name)")
@click.option("--color", default=None, help="Brand colour as hex, e.g. #1e40af")
def render(
    record_json: str,
    kind: str,
    fmt: str | None,
    output: str | None,
    no_header: bool,
    no_footer: bool,
    business_name: str | None,
    business_address: str | None,
    business_email: str | None,
    business_phone: str | None,
    footer_text: str | None,
    color: str | None,
) -> None:
    """Render a record stored as a JSON file."""
    config = Config()
    try:
        with open(record_json, encoding="utf-8") as f:
            record = load_record(kind, json.load(f))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise click.ClickException(f"Invalid {kind} record in {record_json}: {exc}")

    options = RenderOptions(
        include_header=not no_header,
        include_footer=not no_footer,
        business_name=business_name,
        business_address=business_address,
        business_email=business_email,
        business_phone=business_phone,
        footer_text=footer_text,
        primary_color=color or config.primary_color,
    )
    rendered = _render(record, kind, fmt or config.default_format, options)
    path = _write(rendered, config, output)
    click.echo(f"✓ {path}")


# --------------------------------------------------------------------
# export command
# --------------------------------------------------------------------

@cli.command()
@click.argument("doc_id")
@click.option("--kind", "-k", required=True, type=click.Choice(DOCUMENT_KINDS), help="Record kind")
@click.option("--user", "user_id", required=True, help="Owner of the record")
@click.option("--format", "fmt", default=None, type=click.Choice(OUTPUT_FORMATS), help="Output format (default: pdf)")
@click.option("--output", "-o", default=None, type=click.Path(file_okay=False), help="Output directory")
@click.option("--db", "db_path", default=None, type=click.Path(dir_okay=False), help="Database file")
@click.option("--no-header", is_flag=True, help="Omit the business header block")
@click.option("--no-footer", is_flag=True, help="Omit the footer line")
def export(
    doc_id: str,
    kind: str,
    user_id: str,
    fmt: str | None,
    output: str | None,
    db_path: str | None,
    no_header: bool,
    no_footer: bool,
) -> None:
    """Render a stored record using the owner's business profile."""
    config = Config()
    if db_path:
        config.db_path = Path(db_path)

    db = Database(config.db_path)
    record = db.get_document(user_id, kind, doc_id)
    if record is None:
        raise click.ClickException(f"No {kind} {doc_id} for user {user_id}")

    options = build_render_options(
        db.get_or_create_business(user_id),
        include_header=not no_header,
        include_footer=not no_footer,
        default_color=config.primary_color,
    )
    rendered = _render(record, kind, fmt or config.default_format, options)
    path = _write(rendered, config, output)
    click.echo(f"✓ {path}")


if __name__ == "__main__":
    cli()
