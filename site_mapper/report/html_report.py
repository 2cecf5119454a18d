# File: site_mapper/report/html_report.py
"""site_mapper.report.html_report: browsable HTML sitemap rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from site_mapper.crawler.models import PageRecord
from site_mapper.errors import SerializationError

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "sitemap.html.j2"


def render_html(
    records: Iterable[PageRecord],
    output_path: Union[Path, str],
    *,
    site_url: str = "",
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Renders the records with ``sitemap.html.j2`` and saves the page.

    Args:
        records: pages in crawl order.
        output_path: path of the resulting HTML file.
        site_url: seed URL shown in the page title.
        template_dir: directory holding ``sitemap.html.j2``; the bundled
            template is used by default.

    Returns:
        Path of the saved HTML file.
    """
    output = Path(output_path)
    env = Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    pages = list(records)
    try:
        template = env.get_template(TEMPLATE_NAME)
        html_content = template.render(
            site_url=site_url,
            pages=pages,
            asset_count=sum(len(p.stylesheets) + len(p.scripts) + len(p.images) for p in pages),
        )
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html_content, encoding="utf-8")
    except (OSError, TemplateError) as exc:
        raise SerializationError(f"Cannot write HTML sitemap {output}: {exc}") from exc

    return output
