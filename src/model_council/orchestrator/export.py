"""Markdown transcripts of threads, singly or bundled into a zip archive."""

from __future__ import annotations

import logging
import re
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterable

from model_council.models import ModelDescriptor, Thread

logger = logging.getLogger(__name__)

EXPORT_FOLDER = "model_council_export"


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def thread_to_markdown(thread: Thread, model_name: str) -> str:
    sections = []
    for msg in thread.messages:
        role = "User" if msg.role == "user" else model_name
        attach = f"[File: {msg.attachment.name}]" if msg.attachment else ""
        sections.append(f"## {role} ({_iso(msg.timestamp)})\n{attach}\n\n{msg.text}\n\n---")
    return "\n\n".join(sections)


def export_filename(model_name: str) -> str:
    return re.sub(r"\s+", "_", model_name) + ".md"


def export_zip(
    models: Iterable[ModelDescriptor],
    threads: dict[str, Thread],
    destination: str | Path | BinaryIO,
) -> list[str]:
    """Write one Markdown file per non-empty thread; returns the archive member names."""
    written = []
    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for model in models:
            thread = threads.get(model.id)
            if thread is None or not thread.messages:
                continue
            name = f"{EXPORT_FOLDER}/{export_filename(model.name)}"
            archive.writestr(name, thread_to_markdown(thread, model.name))
            written.append(name)
    logger.info(f"Exported {len(written)} thread(s)")
    return written
