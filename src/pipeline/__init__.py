"""
Ad ingest pipeline module.

This module orchestrates the batch ingest of advertisement videos:
    1. Feed discovery and selection (src.ingestion)
    2. Video download (src.ingestion.video_download)
    3. Remote indexing (indexing.py)
    4. Structured analysis (analysis.py)
    5. Metadata merge and persistence (metadata.py)
Progress is checkpointed per batch tag (checkpoint.py) and summarized in a
handoff report (report.py).

Usage:
    # CLI interface
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials"
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --limit 5
    uv run -m src.pipeline --tag "2026-super-bowl-lx-commercials" --dry-run

    # Programmatic interface
    from src.config import IngestConfig
    from src.pipeline import IngestPipeline
    summary = IngestPipeline(IngestConfig.from_env()).run("2026-super-bowl-lx-commercials")
"""

__version__ = "0.1.0"

from .analysis import ANALYSIS_SCHEMA, AnalysisResult, AnalysisStage, parse_analysis_payload
from .checkpoint import CheckpointStore, CompletedItem, FailedItem, ProgressRecord
from .indexing import IndexingOrchestrator
from .metadata import build_provenance, merge_metadata, persist_metadata, submission_metadata
from .orchestrator import IngestPipeline, RunSummary
from .report import render_handoff, write_handoff

__all__ = [
    # Orchestration
    "IngestPipeline",
    "RunSummary",
    # Stages
    "IndexingOrchestrator",
    "AnalysisStage",
    "AnalysisResult",
    "ANALYSIS_SCHEMA",
    "parse_analysis_payload",
    "build_provenance",
    "submission_metadata",
    "merge_metadata",
    "persist_metadata",
    # Checkpoint and report
    "CheckpointStore",
    "ProgressRecord",
    "CompletedItem",
    "FailedItem",
    "render_handoff",
    "write_handoff",
]
