# src/output/formatter.py — v1
"""HTML output formatter — rewrite generated pages with tab indentation.

Requires the 'beautifulsoup4' package (4.11 or later for string indents).
"""

from __future__ import annotations

import logging
from pathlib import Path

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from jekyllbuild.core.errors import FormatFailure

logger = logging.getLogger(__name__)

_TAB_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    indent="\t",
)


def format_html(markup: str) -> str:
    """Return ``markup`` pretty-printed with one tab per nesting level."""
    soup = BeautifulSoup(markup, "html.parser")
    return soup.prettify(formatter=_TAB_FORMATTER)


class HtmlOutputFormatter:
    """Rewrite every file matching ``pattern`` under ``root`` in place."""

    def __init__(self, root: Path, pattern: str = "_site/**/*.html") -> None:
        self._root = Path(root)
        self._pattern = pattern

    async def format_all(self) -> list[Path]:
        """Format all output files and return the rewritten paths.

        Raises:
            FormatFailure: If a file cannot be read, decoded, or written.
        """
        files = sorted(p for p in self._root.glob(self._pattern) if p.is_file())
        for path in files:
            logger.debug("%s", path)
            try:
                original = path.read_text(encoding="utf-8")
                path.write_text(format_html(original), encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise FormatFailure(f"Failed to format {path}: {e}") from e
        logger.info("Formatted %d html file(s)", len(files))
        return files
