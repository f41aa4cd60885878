"""Command-line interface for the history summarizer."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .errors import HistorySummarizerError
from .exporters import EXPORTERS, get_exporter
from .orchestrator import SummaryOrchestrator
from .settings import Settings, load_settings
from .storage import BACKENDS, SummaryCache, open_store
from .transcript import load_transcript

LOGGER = logging.getLogger("history_summarizer.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Incremental chat history summarizer")
    parser.add_argument("--settings", default="settings.yaml", help="Settings YAML path")
    parser.add_argument("--api-url", default=None, help="Summarization endpoint URL")
    parser.add_argument("--cache", default=None, help="Cache database file or directory")
    parser.add_argument("--backend", choices=BACKENDS, default=None, help="Cache backend")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    summarize_parser = subparsers.add_parser("summarize", help="Summarize every block of a chat")
    summarize_parser.add_argument("chat", help="Chat transcript (JSON or JSONL)")

    prompt_parser = subparsers.add_parser("prompt", help="Print the budgeted prompt fragment")
    prompt_parser.add_argument("chat", help="Chat transcript (JSON or JSONL)")

    preview_parser = subparsers.add_parser("preview", help="Show one block and its cached summary")
    preview_parser.add_argument("chat", help="Chat transcript (JSON or JSONL)")
    preview_parser.add_argument("--index", type=int, default=0, help="Zero-based block index")

    edit_parser = subparsers.add_parser("edit", help="Overwrite a block summary by hash")
    edit_parser.add_argument("hash", help="Block hash")
    edit_parser.add_argument("text", help="New summary text")

    subparsers.add_parser("clear-cache", help="Remove every cached summary")

    export_parser = subparsers.add_parser("export", help="Export cached summaries")
    export_parser.add_argument("output", help="Output file")
    export_parser.add_argument("--format", choices=sorted(EXPORTERS), default="json")

    subparsers.add_parser("show-settings", help="Print effective settings")

    return parser


def resolve_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(Path(args.settings))
    overrides = {}
    if args.api_url is not None:
        overrides["api_url"] = args.api_url
    if args.cache is not None:
        overrides["cache_path"] = args.cache
    if args.backend is not None:
        overrides["cache_backend"] = args.backend
    return settings.replace(**overrides) if overrides else settings


def build_orchestrator(settings: Settings) -> SummaryOrchestrator:
    store = open_store(settings.cache_backend, settings.cache_path)
    return SummaryOrchestrator(settings, SummaryCache(store))


def run_command(args: argparse.Namespace, orchestrator: SummaryOrchestrator) -> int:
    if args.command == "summarize":
        run = orchestrator.summarize_all(load_transcript(args.chat))
        print(run.combined_summary)
        if run.had_error:
            LOGGER.warning("Some blocks failed to summarize")
            return 1
        return 0

    if args.command == "prompt":
        composed = orchestrator.build_prompt(load_transcript(args.chat))
        print(composed.fragment)
        return 0

    if args.command == "preview":
        orchestrator.attach(str(args.chat), load_transcript(args.chat))
        preview = orchestrator.get_preview(args.index)
        if not preview.success:
            LOGGER.error("%s", preview.error)
            return 1
        print(f"Block {preview.block_index + 1} / {preview.total_blocks} ({preview.block_hash})")
        print(preview.block_text)
        print("---")
        print(preview.summary_text)
        return 0

    if args.command == "edit":
        result = orchestrator.update_summary(args.hash, args.text)
    elif args.command == "clear-cache":
        result = orchestrator.clear_cache()
    elif args.command == "export":
        exporter = get_exporter(args.format)
        count = exporter.export(orchestrator.cache.entries(), Path(args.output))
        LOGGER.info("Exported %d summaries to %s", count, args.output)
        return 0
    elif args.command == "show-settings":
        print(yaml.safe_dump(orchestrator.get_settings().to_dict(), sort_keys=False), end="")
        return 0
    else:
        raise ValueError(f"Unknown command {args.command}")

    if not result.success:
        LOGGER.error("%s", result.error)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        settings = resolve_settings(args)
        orchestrator = build_orchestrator(settings)
    except (HistorySummarizerError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 2

    try:
        return run_command(args, orchestrator)
    except (OSError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 2
    finally:
        orchestrator.cache.close()


if __name__ == "__main__":
    sys.exit(main())
