# File: site_mapper/report/__init__.py
"""site_mapper.report: sitemap writers (JSON artifact and HTML view)."""

from site_mapper.report.html_report import render_html
from site_mapper.report.json_report import render_json, sitemap_path

__all__ = ["render_json", "render_html", "sitemap_path"]
