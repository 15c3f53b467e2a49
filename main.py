"""CLI entry point for the resume screening assistant."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from src.analysis.client import AnalysisClient
from src.core.config import ConfigStore, Settings
from src.core.errors import ScreeningError
from src.core.schemas import AnalysisStatus, BatchItem, JobContext, Recommendation
from src.core.storage import SQLiteStore
from src.intake.loader import load_file, load_files
from src.pipeline.history import HistoryStore
from src.pipeline.orchestrator import run_batch
from src.pipeline.results import SORT_OPTIONS, export_results_json, filter_and_sort, progress


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resume screening assistant - assess resumes against a job description",
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="Path to settings YAML file (default: built-in defaults)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- screen ---
    screen_parser = subparsers.add_parser("screen", help="Screen resumes against a job")
    screen_parser.add_argument(
        "--job",
        required=True,
        help="Job file: YAML with title/description, or plain text description",
    )
    screen_parser.add_argument(
        "--resume",
        required=True,
        nargs="+",
        help="Resume files (.txt, .md, .pdf, images)",
    )
    screen_parser.add_argument(
        "--sort",
        default="score_desc",
        choices=SORT_OPTIONS,
        help="Result ordering (default: score_desc)",
    )
    screen_parser.add_argument(
        "--min-score",
        type=int,
        default=0,
        help="Only show candidates scoring at least this much",
    )
    screen_parser.add_argument(
        "--recommendation",
        choices=[r.value for r in Recommendation],
        help="Only show candidates with this recommendation",
    )
    screen_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )

    # --- history ---
    history_parser = subparsers.add_parser("history", help="Browse saved sessions")
    history_sub = history_parser.add_subparsers(dest="history_command", required=True)
    history_sub.add_parser("list", help="List saved sessions")
    show_parser = history_sub.add_parser("show", help="Show a saved session")
    show_parser.add_argument("session_id")
    show_parser.add_argument("--export", choices=["json"], help="Export results to format (json)")
    delete_parser = history_sub.add_parser("delete", help="Delete a saved session")
    delete_parser.add_argument("session_id")
    history_sub.add_parser("clear", help="Delete all saved sessions")

    # --- interview ---
    interview_parser = subparsers.add_parser(
        "interview",
        help="Generate a structured interview plan for a screened candidate",
    )
    interview_parser.add_argument("--session", required=True, help="Saved session id")
    interview_parser.add_argument("--file-id", required=True, help="Resume file id in the session")

    # --- extract-text ---
    extract_parser = subparsers.add_parser(
        "extract-text",
        help="Show the text the model reads from a resume",
    )
    extract_parser.add_argument("resume", help="Resume file")

    # --- config ---
    config_parser = subparsers.add_parser("config", help="Manage API key and temperature")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Show current configuration")
    set_key_parser = config_sub.add_parser("set-key", help="Store the Gemini API key")
    set_key_parser.add_argument("key")
    config_sub.add_parser("clear-key", help="Remove the stored API key")
    set_temp_parser = config_sub.add_parser(
        "set-temperature",
        help="Store the sampling temperature (clamped to 0.0-1.0)",
    )
    set_temp_parser.add_argument("temperature", type=float)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_job(path: str | Path) -> JobContext:
    """Load a job from YAML (title/description) or a plain-text description."""
    path = Path(path)
    if not path.exists():
        msg = f"Job file not found: {path}"
        raise FileNotFoundError(msg)
    text = path.read_text(encoding="utf-8")
    raw: Any = yaml.safe_load(text) if path.suffix in (".yaml", ".yml") else None
    if isinstance(raw, dict):
        return JobContext.model_validate(raw)
    return JobContext(title=path.stem, description=text.strip())


def print_items(items: list[BatchItem], show_ids: bool = False) -> None:
    for item in items:
        if show_ids:
            print(f"  id={item.file.id}")
        if item.result is not None:
            r = item.result
            print(f"  [{r.score:3d}] {r.recommendation.value:<6} {r.candidate_name} "
                  f"({item.file.name}) - {r.headline}")
        elif item.status is AnalysisStatus.ERROR:
            print(f"  [ERR] {item.file.name}: {item.error}")
        else:
            print(f"  [---] {item.file.name}: {item.status.value}")


async def cmd_screen(
    args: argparse.Namespace,
    config: ConfigStore,
    history: HistoryStore,
) -> int:
    """Handle the screen subcommand. Returns the exit code."""
    job = load_job(args.job)
    files = await load_files(args.resume)
    if not files:
        print("Error: no supported resume files given.", file=sys.stderr)
        return 1

    client = AnalysisClient(config.client_config())
    print(f"Screening {len(files)} resumes for '{job.title}'...")

    def on_update(index: int, item: BatchItem) -> None:
        print(f"  ({index + 1}/{len(files)}) {item.file.name}: {item.status.value}")

    outcome = await run_batch(files, job, client, history, on_update=on_update)

    if outcome.config_required:
        print(
            "Error: API key missing or invalid. Run: python main.py config set-key <KEY>",
            file=sys.stderr,
        )
        return 2

    completed, total = progress(outcome.items)
    print(f"\nBatch complete: {completed}/{total} analyzed.")
    recommendation = Recommendation(args.recommendation) if args.recommendation else None
    print_items(filter_and_sort(
        outcome.items,
        recommendation=recommendation,
        min_score=args.min_score,
        sort_by=args.sort,
    ))

    if outcome.session is not None:
        print(f"\nSaved session {outcome.session.id} "
              f"(average score {outcome.session.average_score}).")
    if outcome.save_error:
        print(f"Warning: history not saved: {outcome.save_error}", file=sys.stderr)

    if args.export == "json":
        print(f"\n{export_results_json(outcome.items)}")
    return 0


def cmd_history(args: argparse.Namespace, history: HistoryStore) -> int:
    """Handle the history subcommand."""
    if args.history_command == "list":
        sessions = history.list()
        if not sessions:
            print("No saved sessions.")
        for s in sessions:
            print(f"{s.id}  {s.job_title or '(untitled)'}  "
                  f"{s.total_candidates} candidates, average {s.average_score}")
    elif args.history_command == "show":
        session = history.restore(args.session_id)
        if session is None:
            print(f"Error: session not found: {args.session_id}", file=sys.stderr)
            return 1
        print(f"{session.job_title} - average score {session.average_score}")
        print_items(filter_and_sort(session.items), show_ids=True)
        if args.export == "json":
            print(f"\n{export_results_json(session.items)}")
    elif args.history_command == "delete":
        remaining = history.delete(args.session_id)
        print(f"Deleted. {len(remaining)} sessions remain.")
    elif args.history_command == "clear":
        history.clear()
        print("All sessions cleared.")
    return 0


async def cmd_interview(
    args: argparse.Namespace,
    config: ConfigStore,
    history: HistoryStore,
) -> int:
    """Handle the interview subcommand."""
    session = history.restore(args.session)
    if session is None:
        print(f"Error: session not found: {args.session}", file=sys.stderr)
        return 1
    item = next((i for i in session.items if i.file.id == args.file_id), None)
    if item is None or item.result is None:
        print(f"Error: no analyzed resume with id {args.file_id}", file=sys.stderr)
        return 1
    if not item.file.content:
        print("Error: resume content was not kept for this session.", file=sys.stderr)
        return 1

    job = JobContext(title=session.job_title, description=session.job_description)
    client = AnalysisClient(config.client_config())
    plan = await client.generate_interview_plan(item.file, job, item.result.candidate_name)
    print(yaml.dump(plan.model_dump(), allow_unicode=True, sort_keys=False))
    return 0


async def cmd_extract_text(args: argparse.Namespace, config: ConfigStore) -> int:
    """Handle the extract-text subcommand."""
    file = load_file(args.resume)
    client = AnalysisClient(config.client_config())
    print(await client.extract_raw_text(file))
    return 0


def cmd_config(args: argparse.Namespace, config: ConfigStore) -> int:
    """Handle the config subcommand."""
    if args.config_command == "show":
        key = config.get_api_key()
        if key is None:
            masked = "not set"
        elif len(key) > 8:
            masked = f"{key[:4]}...{key[-4:]}"
        else:
            masked = "set"
        print(f"API key: {masked}")
        print(f"Temperature: {config.get_temperature():.1f}")
    elif args.config_command == "set-key":
        config.set_api_key(args.key)
        print("API key updated." if config.get_api_key() else "API key cleared.")
    elif args.config_command == "clear-key":
        config.clear_api_key()
        print("API key cleared.")
    elif args.config_command == "set-temperature":
        stored = config.set_temperature(args.temperature)
        print(f"Temperature set to {stored:.1f}")
    return 0


async def dispatch(args: argparse.Namespace, settings: Settings) -> int:
    store = SQLiteStore(settings.storage.path, settings.storage.max_value_bytes)
    try:
        config = ConfigStore(store, settings.model)
        history = HistoryStore(store, settings.history.max_sessions)

        if args.command == "screen":
            return await cmd_screen(args, config, history)
        if args.command == "history":
            return cmd_history(args, history)
        if args.command == "interview":
            return await cmd_interview(args, config, history)
        if args.command == "extract-text":
            return await cmd_extract_text(args, config)
        return cmd_config(args, config)
    finally:
        store.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.load(args.settings)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        code = asyncio.run(dispatch(args, settings))
    except (FileNotFoundError, ImportError, ValueError, ScreeningError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
