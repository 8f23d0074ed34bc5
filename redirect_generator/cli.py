"""
Command-line entry point for Redirect Generator.

Commands:
    redirect:add SOURCE TARGET   Add one redirect, resolving duplicates
    redirect:list                Print every stored redirect

Exit codes:
    0  redirect added, overwritten, already present, or dry run
    1  conflicting redirect, unresolvable target, or storage failure
    2  usage error (bad arguments, status code not allowed)

Examples:
    redirect-generator redirect:add /old-page 12 --status-code 301
    redirect-generator redirect:add https://example.com/old "/de/ueber-uns" --overwrite-existing --dry-run
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, TextIO

from .config import settings
from .exceptions import InvalidStatusCodeError
from .manager.outcome import OutcomeKind
from .manager.redirect_store import RedirectStore
from .models.configuration import ALLOWED_STATUS_CODES, Configuration
from .resolver.base import LinkResolver
from .resolver.site_resolver import SiteLinkResolver
from .storage.base import BaseStorage
from .storage.storage_factory import get_storage

log = logging.getLogger("redirect_generator.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


# ---------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------
def render_table(rows: Sequence[Sequence[object]], headers: Optional[Sequence[str]] = None) -> str:
    """Render rows as a plain text table with dashed rules."""
    all_rows = [list(map(str, headers))] if headers else []
    all_rows += [["" if c is None else str(c) for c in row] for row in rows]
    if not all_rows:
        return ""
    widths = [max(len(row[i]) for row in all_rows if i < len(row)) for i in range(max(map(len, all_rows)))]
    rule = " " + " ".join("-" * (w + 2) for w in widths)

    def line(row: List[str]) -> str:
        return " " + " ".join(f" {cell.ljust(w)} " for cell, w in zip(row, widths)).rstrip()

    out = [rule]
    if headers:
        out += [line(all_rows[0]), rule]
        all_rows = all_rows[1:]
    out += [line(row) for row in all_rows]
    out.append(rule)
    return "\n".join(out)


def _block(out: TextIO, label: str, message: str) -> None:
    print(f"\n [{label}] {message}\n", file=out)


def _format_time(ts) -> str:
    if not ts:
        return ""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------
def handle_add(args: argparse.Namespace, store: RedirectStore, resolver: LinkResolver, out: TextIO, err: TextIO) -> int:
    title = "Add redirect to the redirects table"
    print(f"\n{title}\n{'=' * len(title)}", file=out)
    if args.dry_run:
        _block(out, "WARNING", "Dry run enabled!")

    try:
        configuration = Configuration.build(
            status_code=args.status_code,
            overwrite_existing=args.overwrite_existing,
            keep_query_parameters=args.keep_query_parameters,
            is_regexp=args.regexp,
            force_https=args.force_https,
            disable_hitcount=args.disable_hitcount,
            respect_query_parameters=args.respect_query_parameters,
        )
    except InvalidStatusCodeError as exc:
        _block(err, "ERROR", f"{exc} ({exc.code})")
        return EXIT_USAGE

    try:
        result = resolver.resolve(args.target)
        outcome = store.add(args.source, result.canonical_link, configuration, dry_run=args.dry_run)
    except Exception as exc:
        log.debug("redirect:add failed", exc_info=True)
        _block(err, "ERROR", f"Following error occurred: {exc} ({getattr(exc, 'code', None) or type(exc).__name__})")
        return EXIT_FAILURE

    if outcome.kind is OutcomeKind.CONFLICT:
        _block(err, "ERROR", outcome.message)
    elif outcome.kind is OutcomeKind.ALREADY_PRESENT:
        _block(out, "NOTE", outcome.message)
    else:
        _block(out, "OK", outcome.message)

    language = result.language
    print(render_table([
        ["Status Code", configuration.target_status_code],
        ["Source", args.source],
        ["Target", args.target],
        ["Target Page", result.page_id],
        ["Target Language", f"{language.title} (ID {language.id})"],
        ["Target Link", result.canonical_link],
    ]), file=out)

    return EXIT_FAILURE if outcome.is_rejected else EXIT_OK


def handle_list(args: argparse.Namespace, store: RedirectStore, out: TextIO, err: TextIO) -> int:
    try:
        rows = store.list_all()
    except Exception as exc:
        log.debug("redirect:list failed", exc_info=True)
        _block(err, "ERROR", f"Following error occurred: {exc} ({getattr(exc, 'code', None) or type(exc).__name__})")
        return EXIT_FAILURE

    if not rows:
        _block(out, "NOTE", "No redirects stored.")
        return EXIT_OK

    print(render_table(
        [
            [r.get("id"), r.get("source_host"), r.get("source_path"), r.get("target"),
             r.get("status_code"), _format_time(r.get("updated_at"))]
            for r in rows
        ],
        headers=["ID", "Host", "Path", "Target", "Status", "Updated"],
    ), file=out)
    return EXIT_OK


# ---------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="redirect-generator", description="Manage CMS redirects")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log output (-v info, -vv debug)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser(
        "redirect:add",
        help="Add redirect to the redirects table",
        description="Add a single redirect from the given source url to the target url. "
                    "Target URL must be a valid page!",
    )
    add.add_argument("source", help="Source URL or path")
    add.add_argument("target", help="Target page id, page link, URL or path")
    add.add_argument("--dry-run", action="store_true", help="If this option is set, the redirect won't be added")
    add.add_argument(
        "--status-code", "--status", dest="status_code", type=int, default=settings.DEFAULT_STATUS_CODE,
        help="Define the status code, can be " + ",".join(map(str, ALLOWED_STATUS_CODES)),
    )
    add.add_argument(
        "--overwrite-existing", action="store_true",
        help="Overwrite existing source URL with the given target",
    )
    add.add_argument("--keep-query-parameters", action="store_true")
    add.add_argument("--respect-query-parameters", action="store_true")
    add.add_argument("--force-https", action="store_true")
    add.add_argument("--disable-hitcount", action="store_true")
    add.add_argument("--regexp", action="store_true", help="Mark the source path as regular expression")
    add.add_argument("--check-reachable", action="store_true", help="Verify the target link answers HEAD/GET")
    add.add_argument("--site-config", default=settings.SITE_CONFIG, help="Site map JSON (env REDIRECT_SITE_CONFIG)")

    subparsers.add_parser("redirect:list", help="List all stored redirects")
    return parser


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = getattr(logging, settings.LOG_LEVEL, logging.WARNING)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("redirect_generator").setLevel(level)


def main(
    argv: Optional[Sequence[str]] = None,
    storage: Optional[BaseStorage] = None,
    resolver: Optional[LinkResolver] = None,
    clock: Optional[Callable[[], int]] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """
    Run the CLI and return its exit code.

    `storage`, `resolver` and `clock` are injectable for tests and embedding;
    when omitted they come from the environment (see `redirect_generator.config`).
    """
    out = out or sys.stdout
    err = err or sys.stderr
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        store = RedirectStore(storage=storage if storage is not None else get_storage(), clock=clock)
    except ValueError as exc:
        _block(err, "ERROR", f"Following error occurred: {exc}")
        return EXIT_FAILURE

    if args.command == "redirect:list":
        return handle_list(args, store, out, err)

    if resolver is None:
        if not args.site_config:
            _block(err, "ERROR", "No site map configured, use --site-config or REDIRECT_SITE_CONFIG")
            return EXIT_USAGE
        try:
            resolver = SiteLinkResolver.from_file(args.site_config, check_reachable=args.check_reachable)
        except (OSError, ValueError) as exc:
            _block(err, "ERROR", f"Could not load site map {args.site_config}: {exc}")
            return EXIT_FAILURE

    return handle_add(args, store, resolver, out, err)


if __name__ == "__main__":
    sys.exit(main())
