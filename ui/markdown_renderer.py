# ui/markdown_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from markdown import markdown


@dataclass(frozen=True)
class MarkdownTheme:
    text: str = "#111827"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    header: str = "#F9FAFB"
    accent: str = "#4A90E2"


class MarkdownRenderer:
    """
    Stats report (Markdown) -> HTML page for tkinterweb.

    tkhtml only understands a small subset of CSS, so the stylesheet sticks
    to plain selectors and no custom properties.
    """

    def __init__(self, theme: Optional[MarkdownTheme] = None):
        self.theme = theme or MarkdownTheme()

    def extensions(self) -> List[str]:
        return ["tables", "sane_lists"]

    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, "Segoe UI", Roboto, Arial, sans-serif;
          margin: 10px;
          color: {t.text};
          background: {t.panel};
          font-size: 13px;
        }}
        h2 {{ font-size: 1.2em; margin: 0.4em 0; color: {t.accent}; }}
        h3 {{ font-size: 1.05em; margin: 1em 0 0.4em; }}
        p {{ margin: 0.4em 0; color: {t.muted}; }}
        table {{ border-collapse: collapse; width: 100%; margin: 0.5em 0; }}
        th, td {{ border: 1px solid {t.border}; padding: 4px 8px; text-align: left; }}
        th {{ background: {t.header}; }}
        ul {{ padding-left: 1.2em; margin: 0.4em 0; }}
        """

    def to_html(self, md_text: str) -> str:
        body = markdown(
            md_text or "",
            extensions=self.extensions(),
            output_format="html5",
        )
        return f"""
        <html>
          <head>
            <meta charset="utf-8"/>
            <style>{self.css()}</style>
          </head>
          <body>{body}</body>
        </html>
        """
