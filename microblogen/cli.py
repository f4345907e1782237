"""Command line interface."""

from __future__ import annotations

from pathlib import Path

import click

from microblogen import __version__
from microblogen.errors import MicroblogenError


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", prog_name="microblogen", message="%(prog)s v%(version)s")
def cli() -> None:
    """Generate a static blog from microCMS content."""


@cli.command("build")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=None,
    help="JSON config file (default: ./config.json when present)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every request and stage transition")
@click.option("--json-logs", is_flag=True, help="Emit one JSON object per log line")
def build_command(config_path: Path | None, verbose: bool, json_logs: bool) -> None:
    """Fetch content and render the whole site into the export directory.

    \b
    Configuration comes from environment variables (or a .env file):
        MICROCMS_API_KEY, SERVICE_DOMAIN      required
        PAGE_SHOW_LIMIT, LATEST_ARTICLES      page sizes
        TIMEZONE, CATEGORY_TAG_NAME           rendering
        EXPORT_PATH, RESOURCES_PATH, ...      locations

    \b
    Examples:
        microblogen build                     # Build with env/.env settings
        microblogen build --config site.json  # Build with a JSON config file
    """
    from microblogen.builder import SiteBuilder
    from microblogen.config import load_settings
    from microblogen.log import configure_logging, get_logger
    from microblogen.source import MicroCMSClient

    configure_logging(verbose=verbose, json_logs=json_logs)
    logger = get_logger("microblogen.cli")
    logger.info("microblogen v%s", __version__)

    try:
        logger.info(">> Loading the setting values from environment variables")
        settings = load_settings(config_path)
        logger.info("Effective settings", **settings.describe())

        with MicroCMSClient(
            settings.service_domain,
            settings.api_key,
            timeout=settings.request_timeout,
        ) as client:
            report = SiteBuilder(settings, client).build()
    except MicroblogenError as exc:
        logger.error("Build failed", error=str(exc), error_type=type(exc).__name__)
        click.echo(f"Error building site: {exc}", err=True)
        raise click.Abort() from exc

    if report.initialized:
        click.echo(f"Created resources skeleton at {settings.paths.resources}")
        return

    click.echo(
        "Site generated: "
        f"{report.pages} pages, "
        f"{report.articles} articles, "
        f"{report.categories_rendered} categories, "
        f"{report.singles} singles"
    )
    click.echo(f"Output: {settings.paths.export}")


def main() -> None:
    """Main entry point."""
    cli()


__all__ = ["cli", "main"]
