"""
Document Export Service
=======================

Formats a document for download.

Formats:
- md: front-matter header followed by the markdown body
- txt: plain header followed by the body with markdown stripped
- pdf: JSON payload rendered to PDF by the client

Stored content may be wrapped in an MDX layout component; only the
body between the opening tag's ``>`` line and ``</MDXLayout>`` is
exported.
"""

import json
import re
from dataclasses import dataclass

from portal.core.enums import ExportFormat
from portal.core.logging import get_logger, log_execution_time
from portal.models.document import Document

logger = get_logger(__name__)

MAX_FILENAME_LENGTH = 50

MIME_TYPES = {
    ExportFormat.MD: "text/markdown",
    ExportFormat.TXT: "text/plain",
    ExportFormat.PDF: "application/json",
}


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    media_type: str
    content: str


def extract_mdx_content(content: str) -> str:
    """Strip an MDX layout wrapper, returning the content unchanged if absent."""
    lines = content.split("\n")
    start = next((i for i, line in enumerate(lines) if line.strip() == ">"), -1)
    end = len(lines) - 1 - lines[::-1].index("</MDXLayout>") if "</MDXLayout>" in lines else -1

    if start != -1 and end != -1 and end > start:
        return "\n".join(lines[start + 1:end]).strip()
    return content


_MARKDOWN_RULES = [
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"_(.*?)_"), r"\1"),
    (re.compile(r"<u>(.*?)</u>"), r"\1"),
    (re.compile(r"~~(.*?)~~"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\(([^)]+)\)"), r"\1 (\2)"),
    (re.compile(r"^[-*+]\s+", re.MULTILINE), "• "),
    (re.compile(r"^\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"^>\s+", re.MULTILINE), ""),
    (re.compile(r"^---+$", re.MULTILINE), ""),
]


def markdown_to_text(markdown: str) -> str:
    text = markdown
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text


def generate_filename(title: str, export_format: ExportFormat) -> str:
    safe = re.sub(r"[^a-zA-Z0-9\s-]", "", title)
    safe = re.sub(r"\s+", "-", safe).lower()[:MAX_FILENAME_LENGTH]
    return f"{safe or 'document'}.{export_format.value}"


class ExportService:
    """
    Usage:
        exported = ExportService().export(document, ExportFormat.MD)
    """

    @staticmethod
    def _metadata(document: Document) -> dict:
        return {
            "title": document.title,
            "author": document.author.name if document.author else "",
            "created": document.created_at.date().isoformat() if document.created_at else "",
            "version": document.version or "1.0",
            "classification": document.classification.value,
        }

    def render(self, document: Document, export_format: ExportFormat) -> str:
        meta = self._metadata(document)
        body = extract_mdx_content(document.content or "")

        if export_format is ExportFormat.MD:
            front_matter = "\n".join(f"{key}: {value}" for key, value in meta.items())
            return f"---\n{front_matter}\n---\n\n{body}"

        if export_format is ExportFormat.TXT:
            return (
                f"{meta['title']}\n"
                f"Author: {meta['author']}\n"
                f"Created: {meta['created']}\n"
                f"Version: {meta['version']}\n"
                f"Classification: {meta['classification']}\n\n"
                f"{markdown_to_text(body)}"
            )

        return json.dumps({**meta, "content": body})

    def export(self, document: Document, export_format: ExportFormat) -> ExportedFile:
        timed_render = log_execution_time(logger, "document_export", format=export_format.value)(self.render)
        return ExportedFile(
            filename=generate_filename(document.title, export_format),
            media_type=MIME_TYPES[export_format],
            content=timed_render(document, export_format),
        )
