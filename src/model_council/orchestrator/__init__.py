"""Concurrent fan-out to models, thread state and transcript export."""

from model_council.orchestrator.engine import Orchestrator, wrap_model_response
from model_council.orchestrator.export import export_zip, thread_to_markdown
from model_council.orchestrator.store import ThreadStore

__all__ = [
    "Orchestrator",
    "ThreadStore",
    "export_zip",
    "thread_to_markdown",
    "wrap_model_response",
]
