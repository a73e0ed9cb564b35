"""
Command-line entry point: ``studybrick``.

Subcommands:
    parse    Bulk-parse pasted questions into a catalog JSON file
    visible  List what a viewer can see in a catalog
    draft    Inspect and edit the persisted paper draft
    export   Render the draft and write the PDF

Catalogs are JSON exports (``{"questions": [...], "studyBricks": [...]}``,
optionally ``"users": [...]`` for assignee names). Viewers are profile
JSON documents (``id``, ``uid``, ``email``, ``role``, ``allowedSubjects``...).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .catalog import (
    QUESTIONS,
    CatalogError,
    InMemoryCatalogStore,
    StaticIdentityProvider,
    build_records,
    load_catalog,
    parse_questions,
)
from .config import ConfigError, EngineConfig, load_config
from .core.models import Difficulty, PaperMetadata, QuestionType, Viewer
from .core.utils.serialization import load_catalog_json, save_catalog_json
from .drafts import DraftError, DraftRepository, Notice, Notifier, SelectionStore
from .paper import interactive_rows
from .session import PaperBuilderSession
from .utils.logging_utils import configure_logging
from .visibility import AdminFilter, DisplayFilter, admin_listing

logger = logging.getLogger(__name__)

USERS = "users"


class CliError(Exception):
    """Bad input file or argument; reported without a traceback."""
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _load_viewer(path: Path) -> Viewer:
    try:
        profile = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CliError(f"Viewer file not found: {path}") from e
    except (json.JSONDecodeError, OSError) as e:
        raise CliError(f"Viewer file {path} is unreadable: {e}") from e
    if not isinstance(profile, dict):
        raise CliError(f"Viewer file {path} must hold a JSON object")
    try:
        return Viewer.from_profile(profile, auth_uid=profile.get("uid"))
    except ValueError as e:
        raise CliError(f"Invalid viewer profile: {e}") from e


def _display_from_args(viewer: Viewer, args: argparse.Namespace) -> DisplayFilter:
    display = DisplayFilter.default_for(viewer)
    if getattr(args, "subject", None):
        display = display.with_subjects(args.subject)
    if getattr(args, "chapter", None):
        display = display.with_chapters(args.chapter)
    if getattr(args, "search", None):
        display = display.with_search(args.search)
    return display


def _print_notice(notice: Notice) -> None:
    print(notice)


def _notifier() -> Notifier:
    notifier = Notifier()
    notifier.add_listener(_print_notice)
    return notifier


def _repository(config: EngineConfig) -> DraftRepository:
    return DraftRepository(
        config.data_dir,
        default_metadata=PaperMetadata(config.default_institute_name, config.default_exam_title),
    )


def _open_session(args: argparse.Namespace, config: EngineConfig) -> PaperBuilderSession:
    viewer = _load_viewer(args.viewer)
    catalog = load_catalog(args.catalog)
    session = PaperBuilderSession(catalog, StaticIdentityProvider(viewer), config, _notifier())
    session.set_display_filter(_display_from_args(viewer, args))
    return session


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def cmd_parse(args: argparse.Namespace, config: EngineConfig) -> int:
    try:
        raw_text = args.raw.read_text(encoding="utf-8")
    except OSError as e:
        raise CliError(f"Cannot read {args.raw}: {e}") from e

    parsed = parse_questions(raw_text)
    if not parsed:
        print("No questions found. Check the format.")
        return 1
    try:
        records = build_records(
            parsed,
            subject=args.subject,
            chapter=args.chapter,
            difficulty=args.difficulty,
            question_type=args.type,
            assigned_to=args.assign_to,
        )
    except ValueError as e:
        raise CliError(str(e)) from e

    collections = load_catalog_json(args.output) if args.output.exists() else {}
    store = InMemoryCatalogStore(collections)
    ids = [store.add(QUESTIONS, record) for record in records]
    document = {name: store.snapshot(name) for name in collections}
    document[QUESTIONS] = store.snapshot(QUESTIONS)
    save_catalog_json(document, args.output)

    print(f"Successfully added {len(ids)} questions!")
    return 0


def cmd_visible(args: argparse.Namespace, config: EngineConfig) -> int:
    viewer = _load_viewer(args.viewer)
    catalog = load_catalog(args.catalog)

    if viewer.is_admin and args.admin:
        admin_filter = AdminFilter(
            subject=args.subject[0] if args.subject else "all",
            assigned=args.assigned or "all",
            search=args.search or "",
        )
        listing = admin_listing(catalog.snapshot(QUESTIONS), admin_filter)
        for row in interactive_rows(listing, users=catalog.snapshot(USERS)):
            print(row.as_line())
        print(f"{len(listing)} question(s)")
        return 0

    with PaperBuilderSession(catalog, StaticIdentityProvider(viewer), config) as session:
        visible = session.set_display_filter(_display_from_args(viewer, args))
        if visible.error:
            print(f"Catalog unavailable: {visible.error}", file=sys.stderr)
        for row in interactive_rows(visible.questions):
            print(row.as_line())
        print(f"{len(visible.questions)} question(s); chapters: {', '.join(visible.chapters) or '-'}")
        if args.resources:
            for resource in visible.resources:
                print(f"  * {resource.title} [{resource.subject}] {resource.download_url}")
    return 0


def cmd_draft(args: argparse.Namespace, config: EngineConfig) -> int:
    name = args.name or config.draft_name

    if args.draft_command == "list":
        for draft_name in _repository(config).list_names():
            print(draft_name)
        return 0

    if args.draft_command == "discard":
        if _repository(config).discard(name):
            print(f"Discarded draft {name!r}")
        else:
            print(f"No draft named {name!r}")
        return 0

    if args.draft_command == "add":
        draft_config = replace(config, draft_name=name)
        with _open_session(args, draft_config) as session:
            added = [qid for qid in args.question_ids if session.add(qid)]
        return 0 if added or not args.question_ids else 1

    store = SelectionStore(
        _repository(config),
        name,
        notifier=_notifier(),
        max_questions=config.max_questions_per_paper,
    )
    if args.draft_command == "remove":
        for question_id in args.question_ids:
            store.remove(question_id)
    elif args.draft_command == "move":
        # Positions are 1-based on the command line
        if not store.reorder(args.from_position - 1, args.to_position - 1):
            print("Nothing to move")

    metadata = store.metadata
    print(f"Draft {store.name!r}: {metadata.institute_name} / {metadata.exam_title}")
    for row in interactive_rows(store.entries):
        print(row.as_line())
    print(f"{len(store)} of {store.max_questions} question(s)")
    return 0


def cmd_export(args: argparse.Namespace, config: EngineConfig) -> int:
    with _open_session(args, config) as session:
        if args.institute is not None or args.title is not None:
            session.set_metadata(args.institute, args.title)
        result = session.export(args.output)
    if not result.success:
        return 1
    print(f"Wrote {result.output_path} ({result.page_count} page(s), {result.question_count} question(s))")
    return 0


# ─────────────────────────────────────────────────────────────────────────────
# Parser
# ─────────────────────────────────────────────────────────────────────────────

def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--subject", action="append", help="Show only this subject (repeatable)")
    parser.add_argument("--chapter", action="append", help="Show only this chapter (repeatable)")
    parser.add_argument("--search", help="Free-text search over content, subject and chapter")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studybrick", description="StudyBrick paper builder")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, help="Settings JSON file")
    parser.add_argument("--data-dir", type=Path, help="Per-device state directory")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Bulk-parse pasted questions into a catalog file")
    p.add_argument("raw", type=Path, help="Text file with pasted questions")
    p.add_argument("--subject", required=True)
    p.add_argument("--chapter", required=True)
    p.add_argument("--difficulty", default=Difficulty.MEDIUM.value,
                   choices=[d.value for d in Difficulty])
    p.add_argument("--type", default=QuestionType.MCQ.value,
                   choices=[t.value for t in QuestionType])
    p.add_argument("--assign-to", help="Viewer reference to assign the questions to")
    p.add_argument("-o", "--output", type=Path, required=True, help="Catalog JSON to append to")
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("visible", help="List questions visible to a viewer")
    p.add_argument("catalog", type=Path)
    p.add_argument("viewer", type=Path)
    _add_filter_args(p)
    p.add_argument("--resources", action="store_true", help="Also list study materials")
    p.add_argument("--admin", action="store_true", help="Admin listing (admins only)")
    p.add_argument("--assigned", help="Admin listing: 'all', 'none' or a viewer reference")
    p.set_defaults(func=cmd_visible)

    p = sub.add_parser("draft", help="Inspect or edit the paper draft")
    p.add_argument("--name", help="Draft name (defaults to the configured draft)")
    draft_sub = p.add_subparsers(dest="draft_command", required=True)
    draft_sub.add_parser("show")
    draft_sub.add_parser("list")
    draft_sub.add_parser("discard")
    d = draft_sub.add_parser("add", help="Add visible questions by id")
    d.add_argument("catalog", type=Path)
    d.add_argument("viewer", type=Path)
    d.add_argument("question_ids", nargs="+")
    d = draft_sub.add_parser("remove")
    d.add_argument("question_ids", nargs="+")
    d = draft_sub.add_parser("move", help="Move a question between 1-based positions")
    d.add_argument("from_position", type=int)
    d.add_argument("to_position", type=int)
    p.set_defaults(func=cmd_draft)

    p = sub.add_parser("export", help="Export the draft as a PDF")
    p.add_argument("catalog", type=Path)
    p.add_argument("viewer", type=Path)
    _add_filter_args(p)
    p.add_argument("--institute", help="Institute name for the header")
    p.add_argument("--title", help="Exam title for the header")
    p.add_argument("-o", "--output", type=Path, default=Path("."), help="Output directory")
    p.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config, data_dir=args.data_dir)
        return args.func(args, config)
    except (CliError, CatalogError, ConfigError, DraftError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
