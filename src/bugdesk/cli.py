"""BugDesk CLI.

Subcommands:
  list       -> filtered bug listing
  show       -> one bug with its comments
  create     -> open a new bug
  edit       -> change title/description/priority/assignee
  status     -> move a bug to any status
  comment    -> append a comment
  delete     -> remove a bug and its comments
  dashboard  -> counts by status/priority, top assignees, recent bugs
  export     -> dump the collection as JSON

Every command is a thin view over :class:`bugdesk.store.BugStore` and the
pure helpers in :mod:`bugdesk.filters`.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from bugdesk import filters as bug_filters
from bugdesk.config import CONFIG_DEFAULT, DeskConfig
from bugdesk.errors import BugDeskError, NotFoundError, ValidationError, classify_error
from bugdesk.models import ALL, PRIORITIES, STATUSES, Bug, BugFilters, BugFormData
from bugdesk.observability import configure_telemetry
from bugdesk.runtime import execute_command, open_store, prepare_config
from bugdesk.store import BugStore
from bugdesk.storage import encode_bugs
from bugdesk.ux import (
    Colors,
    bar,
    colorize,
    format_bug_line,
    format_relative,
    print_error,
    print_header,
    print_success,
    print_summary_box,
    set_color_enabled,
)

EXIT_NOT_FOUND = 1
EXIT_INVALID = 2
EXIT_WRITE_FAILED = 3

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    """Construct top-level CLI parser with subcommands.

    Keep ordering stable for help output readability.
    """
    common = argparse.ArgumentParser(add_help=False)
    # Subcommand copy only overrides the top-level value when given
    common.add_argument("--config", default=argparse.SUPPRESS)
    common.add_argument(
        "--memory",
        action="store_true",
        help="Use throwaway in-memory storage (seeded demo data)",
    )

    p = _FormatterArgumentParser(prog="bugdesk", description="Track bugs from the terminal")
    p.add_argument("--config", default=CONFIG_DEFAULT, help="Path to bugdesk.config.yaml")
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Plain, uncolored output (env: BUGDESK_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pl = sub.add_parser("list", parents=[common], help="List bugs matching filters")
    pl.add_argument("--status", choices=(ALL, *STATUSES), default=ALL)
    pl.add_argument("--priority", choices=(ALL, *PRIORITIES), default=ALL)
    pl.add_argument("--assignee", default="")
    pl.add_argument("--search", default="")
    pl.add_argument("--limit", type=int, default=50)

    ps = sub.add_parser("show", parents=[common], help="Show one bug with comments")
    ps.add_argument("bug_id")

    pc = sub.add_parser("create", parents=[common], help="Open a new bug")
    pc.add_argument("--title", default="")
    pc.add_argument("--description", default="")
    pc.add_argument("--priority", choices=PRIORITIES, default="Medium")
    pc.add_argument("--assignee", default="")

    pe = sub.add_parser("edit", parents=[common], help="Edit bug fields")
    pe.add_argument("bug_id")
    pe.add_argument("--title")
    pe.add_argument("--description")
    pe.add_argument("--priority", choices=PRIORITIES)
    pe.add_argument("--assignee")

    pst = sub.add_parser("status", parents=[common], help="Change bug status")
    pst.add_argument("bug_id")
    pst.add_argument("status", choices=STATUSES)

    pco = sub.add_parser("comment", parents=[common], help="Add a comment to a bug")
    pco.add_argument("bug_id")
    pco.add_argument("text")
    pco.add_argument("--author")

    pd = sub.add_parser("delete", parents=[common], help="Delete a bug and its comments")
    pd.add_argument("bug_id")

    pdb = sub.add_parser("dashboard", parents=[common], help="Summary counts and recent bugs")
    pdb.add_argument("--top", type=int, default=bug_filters.DEFAULT_TOP)

    px = sub.add_parser("export", parents=[common], help="Export bugs as JSON")
    px.add_argument("--output", help="Write to file instead of stdout")
    px.add_argument("--pretty", action="store_true")
    return p


def _plain(args: argparse.Namespace) -> bool:
    return bool(args.quiet or os.environ.get("BUGDESK_QUIET") == "1")


def _resolve_bug(store: BugStore, ref: str) -> Bug:
    """Exact id, or an unambiguous prefix of one (listings show 8 chars)."""
    bug = store.get_bug_by_id(ref)
    if bug is not None:
        return bug
    candidates = [b for b in store.bugs if ref and b.id.startswith(ref)]
    if len(candidates) == 1:
        return candidates[0]
    raise NotFoundError(ref)


def _report_validation(exc: ValidationError) -> int:
    for message in exc.errors.values():
        print_error(message)
    return EXIT_INVALID


def _print_bug(bug: Bug, args: argparse.Namespace) -> None:
    print_header(bug.title)
    print(f"  id:          {bug.id}")
    print(f"  status:      {bug.status}")
    print(f"  priority:    {bug.priority}")
    print(f"  assigned to: {bug.assigned_to or 'unassigned'}")
    print(f"  created by:  {bug.created_by}")
    print(f"  created:     {bug.created_at.isoformat()} ({format_relative(bug.created_at)})")
    print(f"  updated:     {bug.updated_at.isoformat()} ({format_relative(bug.updated_at)})")
    print()
    print(f"  {bug.description}")
    print()
    print(f"  Comments ({len(bug.comments)})")
    for comment in bug.comments:
        when = format_relative(comment.created_at)
        author = comment.author if _plain(args) else colorize(comment.author, Colors.BOLD)
        print(f"    - {author} ({when}): {comment.text}")


def _cmd_list(store: BugStore, args: argparse.Namespace) -> int:
    criteria = BugFilters(
        status=args.status,
        priority=args.priority,
        assigned_to=args.assignee,
        search=args.search,
    )
    all_bugs = store.bugs
    matched = bug_filters.filtered_bugs(all_bugs, criteria)
    print_header(f"Bugs ({len(matched)} of {len(all_bugs)})")
    for bug in matched[: args.limit]:
        print(format_bug_line(bug))
    if len(matched) > args.limit:
        print(f"  ... ({len(matched) - args.limit} more)")
    if not matched:
        if all_bugs:
            print("  No bugs found. Try adjusting your filters or search terms.")
        else:
            print("  No bugs found. Get started by creating your first bug report.")
    return 0


def _cmd_show(store: BugStore, args: argparse.Namespace) -> int:
    _print_bug(_resolve_bug(store, args.bug_id), args)
    return 0


def _cmd_create(store: BugStore, args: argparse.Namespace) -> int:
    form = BugFormData(
        title=args.title,
        description=args.description,
        priority=args.priority,
        assigned_to=args.assignee,
    )
    try:
        bug = store.create_bug(form)
    except ValidationError as exc:
        return _report_validation(exc)
    print_success(f"Created bug {bug.id}")
    return 0


def _cmd_edit(store: BugStore, args: argparse.Namespace) -> int:
    bug = _resolve_bug(store, args.bug_id)
    changes: dict[str, Any] = {}
    for arg_name, field_name in (
        ("title", "title"),
        ("description", "description"),
        ("priority", "priority"),
        ("assignee", "assigned_to"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            changes[field_name] = value
    if not changes:
        print_error("Nothing to change; pass --title, --description, --priority or --assignee")
        return EXIT_INVALID
    try:
        store.update_bug(bug.id, **changes)
    except ValidationError as exc:
        return _report_validation(exc)
    print_success(f"Updated bug {bug.id}")
    return 0


def _cmd_status(store: BugStore, args: argparse.Namespace) -> int:
    bug = _resolve_bug(store, args.bug_id)
    store.update_status(bug.id, args.status)
    print_success(f"Bug {bug.id} is now {args.status}")
    return 0


def _cmd_comment(store: BugStore, args: argparse.Namespace) -> int:
    bug = _resolve_bug(store, args.bug_id)
    comment = store.add_comment(bug.id, args.text, author=args.author)
    if comment is None:
        print_error("Comment text is required")
        return EXIT_INVALID
    print_success(f"Comment added to {bug.id} ({len(bug.comments)} total)")
    return 0


def _cmd_delete(store: BugStore, args: argparse.Namespace) -> int:
    bug = _resolve_bug(store, args.bug_id)
    store.delete_bug(bug.id)
    print_success(f"Deleted bug {bug.id}")
    return 0


def _cmd_dashboard(store: BugStore, args: argparse.Namespace) -> int:
    bugs = store.bugs
    summary = bug_filters.stats(bugs)
    print_summary_box(
        f"Dashboard ({summary.total} bugs)",
        [("Total", summary.total)] + [(s, n) for s, n in summary.by_status.items()],
    )
    print_header("\nPriority")
    for priority in reversed(PRIORITIES):
        count = summary.by_priority[priority]
        pct = bug_filters.share(count, summary.total)
        print(f"  {priority:<8} {bar(pct)} {count:>3} ({pct:.0f}%)")
    print_header("\nTop assignees")
    for assignee, count in bug_filters.top_assignees(bugs, args.top):
        print(f"  {assignee or 'unassigned':<20} {count}")
    print_header("\nRecent bugs")
    for bug in bug_filters.recent_bugs(bugs, args.top):
        print(format_bug_line(bug))
    return 0


def _cmd_export(store: BugStore, args: argparse.Namespace) -> int:
    bugs = store.bugs
    payload = encode_bugs(bugs) if args.pretty else json.dumps([b.to_dict() for b in bugs])
    if not args.output:
        print(payload)
        return 0
    out_path = Path(args.output)
    try:
        out_path.write_text(payload + "\n", encoding="utf-8")
    except OSError as exc:
        print_error(f"Export failed: {classify_error(exc).message}")
        return EXIT_WRITE_FAILED
    if _plain(args):
        print(f"[export] {len(bugs)} bugs -> {out_path}")
    else:
        print_success(f"Exported {len(bugs)} bugs to {out_path}")
    return 0


_COMMANDS: dict[str, Callable[[BugStore, argparse.Namespace], int]] = {
    "list": _cmd_list,
    "show": _cmd_show,
    "create": _cmd_create,
    "edit": _cmd_edit,
    "status": _cmd_status,
    "comment": _cmd_comment,
    "delete": _cmd_delete,
    "dashboard": _cmd_dashboard,
    "export": _cmd_export,
}


def _run_command(cfg: DeskConfig, args: argparse.Namespace) -> int:
    command = _COMMANDS[args.cmd]
    store = open_store(cfg)
    try:
        return command(store, args)
    except NotFoundError as exc:
        info = classify_error(exc)
        print_error(info.message)
        return EXIT_NOT_FOUND


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    exporter = os.environ.get("BUGDESK_OTEL_EXPORTER")
    if exporter:
        configure_telemetry(
            service_name=os.environ.get("BUGDESK_SERVICE_NAME", "bugdesk-cli"),
            exporter="otlp" if exporter.lower() == "otlp" else "console",
            endpoint=os.environ.get("BUGDESK_OTEL_ENDPOINT"),
        )
    if not args.quiet and os.environ.get("BUGDESK_QUIET") == "1":
        args.quiet = True
    set_color_enabled(not args.quiet)
    try:
        cfg = prepare_config(args)
    except BugDeskError as exc:
        print_error(classify_error(exc).message)
        return EXIT_INVALID
    return execute_command(lambda: _run_command(cfg, args), args, cfg, args.cmd)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
