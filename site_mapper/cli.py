# === FILE: site_mapper/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point of the SiteMapper crawler.

Commands:
  crawl     Crawl the site and write the sitemap
  config    Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --site-url URL      Crawl root, also read from $SITE_URL (crawl prompts if missing)
  --limit INT         Maximum number of pages (overrides max_pages)
  --output-dir DIR    Where {host}.json is written
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only if omitted)
  --log-format FORMAT Logging format string

crawl options:
  --html PATH         Also render an HTML sitemap
  --crawl-timeout SEC Stop the crawl after SEC seconds and keep partial results

Example:
  site-mapper --site-url https://example.com crawl --html sitemap.html
"""
import asyncio
import sys
from pathlib import Path

import click

from site_mapper import __version__
from site_mapper.config import build_config, has_site_url, read_config_data
from site_mapper.engine import start_crawl
from site_mapper.errors import CrawlAborted, SiteMapperError
from site_mapper.logger import DEFAULT_FORMAT, init_logging
from site_mapper.report.html_report import render_html
from site_mapper.report.json_report import render_json, sitemap_path

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="SiteMapper, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    envvar="SITE_MAPPER_CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to a YAML or JSON config file.",
)
@click.option(
    "--site-url", "-u", "site_url",
    default=None,
    envvar="SITE_URL",
    help="Site to crawl (absolute http(s) URL).",
)
@click.option(
    "--limit", "-l", "limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of pages to crawl (overrides max_pages).",
)
@click.option(
    "--output-dir", "-o", "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the {host}.json sitemap.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level.",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Log file (stdout only if omitted).",
)
@click.option(
    "--log-format", "log_format",
    default=DEFAULT_FORMAT,
    show_default=True,
    help="Logging format string.",
)
@click.pass_context
def cli(ctx, config_path, site_url, limit, output_dir, log_level, log_file, log_format):
    """SiteMapper command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    try:
        data = read_config_data(config_path)
    except SiteMapperError as e:
        print_error(f"Configuration error: {e}")
    ctx.ensure_object(dict)
    ctx.obj.update(data=data, site_url=site_url, max_pages=limit, output_dir=output_dir)


def _load_config(ctx, prompt_for_site: bool):
    """Build the CrawlerConfig from the file data and the group options."""
    opts = ctx.obj
    site_url = opts["site_url"]
    if prompt_for_site and site_url is None and not has_site_url(opts["data"]):
        site_url = click.prompt("Enter site to crawl")
    try:
        return build_config(
            opts["data"], site_url=site_url, max_pages=opts["max_pages"], output_dir=opts["output_dir"]
        )
    except SiteMapperError as e:
        print_error(f"Configuration error: {e}")


def _write_partial(cfg, exc: CrawlAborted) -> None:
    if not exc.partial:
        return
    try:
        saved = render_json(exc.partial.records, sitemap_path(cfg.output_dir, cfg.host))
    except SiteMapperError as e:
        click.secho(f"Partial sitemap lost: {e}", fg="red", err=True)
        return
    click.echo(f"Partial sitemap: {saved}")


@cli.command("crawl", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--html", "html_output",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also save an HTML sitemap to this file.",
)
@click.option(
    "--crawl-timeout", "crawl_timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Stop after this many seconds and keep what was gathered.",
)
@click.pass_context
def crawl(ctx, html_output, crawl_timeout):
    """Crawl the configured site and write {host}.json."""
    cfg = _load_config(ctx, prompt_for_site=True)
    click.echo(f"Crawling {cfg.site_url}")
    try:
        result = asyncio.run(start_crawl(cfg, crawl_timeout=crawl_timeout, handle_signals=True))
    except CrawlAborted as e:
        _write_partial(cfg, e)
        print_error(f"Crawl aborted: {e}")
    except SiteMapperError as e:
        print_error(f"Crawl failed: {e}")

    if result.cancelled:
        click.secho(f"Crawl stopped early after {len(result)} pages", fg="yellow", err=True)

    try:
        saved = render_json(result.records, sitemap_path(cfg.output_dir, cfg.host))
    except SiteMapperError as e:
        print_error(f"Error writing sitemap: {e}")

    if html_output:
        try:
            saved_html = render_html(result.records, html_output, site_url=str(cfg.site_url))
            click.echo(f"HTML sitemap: {saved_html}")
        except SiteMapperError as e:
            print_error(f"Error writing HTML sitemap: {e}")

    click.echo(f"Sitemap: {saved}")


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as JSON; never prompts."""
    cfg = _load_config(ctx, prompt_for_site=False)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
