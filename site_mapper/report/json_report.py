# site_mapper/report/json_report.py
"""
Sitemap JSON writer: one pretty-printed array of page objects per host.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Union

from site_mapper.crawler.models import PageRecord
from site_mapper.errors import SerializationError
from site_mapper.utils import host_filename


def sitemap_path(output_dir: Union[Path, str], host: str) -> Path:
    """``{output_dir}/{host}.json``."""
    return Path(output_dir) / host_filename(host, ".json")


def render_json(records: Iterable[PageRecord], output_path: Union[Path, str]) -> Path:
    """
    Saves the records as a JSON array (2-space indent) to ``output_path``.

    :param records: pages in crawl order
    :param output_path: path to the JSON file
    :return: Path of the saved file
    :raises SerializationError: the file cannot be written

    Example:
    ```python
    from site_mapper.report.json_report import render_json, sitemap_path
    path = render_json(result.records, sitemap_path(".", "example.com"))
    print(f"Sitemap: {path}")
    ```
    """
    output = Path(output_path)
    data = [record.to_dict() for record in records]
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
    except (OSError, TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot write sitemap {output}: {exc}") from exc

    return output
