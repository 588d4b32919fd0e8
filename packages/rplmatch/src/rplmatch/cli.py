"""CLI tool for fuzzy lookup of customer names against a restricted party list."""

import argparse

import structlog

from rplmatch.columns import detect_fields, discover_fields
from rplmatch.config import MatchConfig
from rplmatch.errors import RplMatchError
from rplmatch.insights import GeminiTextGenerator, Summarizer
from rplmatch.io import default_output_path, export_results, read_records, tier_counts
from rplmatch.logging import configure_logging
from rplmatch.session import MatchSession, run_session
from rplmatch.types import FieldSelector


def _build_summarizer(args: argparse.Namespace, config: MatchConfig) -> Summarizer | None:
    """Build a Summarizer, optionally wiring up the Gemini provider."""
    log = structlog.get_logger()
    if args.no_gemini or not config.summary.enabled:
        return None

    try:
        provider = GeminiTextGenerator(model=config.summary.model)
    except RuntimeError as e:
        log.warning("gemini_unavailable", error=str(e))
        provider = None
    else:
        log.info("gemini_provider_enabled", model=config.summary.model)
    return Summarizer(config.summary, provider)


def _resolve_selector(args: argparse.Namespace, columns: list[str]) -> FieldSelector:
    detected = detect_fields(columns)
    return FieldSelector(
        customer_field=args.customer_col or detected.customer_field,
        reference_field=args.rpl_col or detected.reference_field,
    )


def cmd_match(args: argparse.Namespace) -> None:
    log = structlog.get_logger()
    config = MatchConfig.from_env()

    records = read_records(args.input)
    columns = discover_fields(records)
    if not columns:
        print("Input table is empty.")
        return
    selector = _resolve_selector(args, columns)
    log.info(
        "column_mapping",
        customer_field=selector.customer_field,
        reference_field=selector.reference_field,
    )

    session = MatchSession.load(records, selector)
    run_session(session, config, summarizer=_build_summarizer(args, config))

    if args.show:
        _show_matches(session)
    _print_summary(session)

    output = args.output or default_output_path(args.input, config.export)
    export_results(records, session.results, output, config.export)
    print(f"\nSaved to: {output}")


def cmd_columns(args: argparse.Namespace) -> None:
    records = read_records(args.input)
    columns = discover_fields(records)
    if not columns:
        print("Input table is empty.")
        return
    detected = detect_fields(columns)
    print("Columns:")
    for name in columns:
        marker = ""
        if name == detected.customer_field:
            marker = "  <- customer"
        elif name == detected.reference_field:
            marker = "  <- rpl"
        print(f"  {name}{marker}")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from rplmatch.server import create_app

    log = structlog.get_logger()
    config = MatchConfig.from_env()
    summarizer = _build_summarizer(args, config)
    log.info("server_start", port=args.port)
    app = create_app(config=config, summarizer=summarizer)
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")


def _show_matches(session: MatchSession) -> None:
    """Display results on screen."""
    print(f"\n=== Results ({len(session.results)}) ===")
    for r in session.results:
        print(
            f"  [{r.tier:>8}] {r.similarity_percent:6.2f}%  "
            f"{r.customer_text!r} -> {r.matched_reference_text!r}"
        )


def _print_summary(session: MatchSession) -> None:
    counts = tier_counts(session.results)
    print("\n--- Summary ---")
    print(f"High match: {counts['High']}")
    print(f"Medium match: {counts['Medium']}")
    print(f"Low match: {counts['Low']}")
    print(f"No match: {counts['No Match']}")
    print(f"Total rows: {counts['Total']}")
    if session.stats is not None:
        print(f"Distinct RPL entries: {session.stats.candidates}")
        print(f"Comparisons: {session.stats.comparisons}")
    if session.insights:
        print("\n--- AI insights ---")
        print(session.insights)


def main() -> None:
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )
    parent_parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        default=None,
        help="Log output format (default: LOG_FORMAT env var or console)",
    )
    parent_parser.add_argument(
        "--no-gemini",
        action="store_true",
        help="Skip the Gemini data quality summary",
    )

    parser = argparse.ArgumentParser(
        description="Fuzzy lookup of customer names against a restricted party list",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    match_parser = subparsers.add_parser("match", parents=[parent_parser], help="Match customers against RPL entries")
    match_parser.add_argument("input", help="Path to .xlsx or .csv file")
    match_parser.add_argument("--customer-col", help="Customer name column (default: auto-detect)")
    match_parser.add_argument("--rpl-col", help="RPL column (default: auto-detect)")
    match_parser.add_argument("--output", help="Output file path (default: <input>_matched.xlsx)")
    match_parser.add_argument("--show", action="store_true", help="Display results on screen")
    match_parser.set_defaults(func=cmd_match)

    columns_parser = subparsers.add_parser("columns", parents=[parent_parser], help="Show columns and detected mapping")
    columns_parser.add_argument("input", help="Path to .xlsx or .csv file")
    columns_parser.set_defaults(func=cmd_columns)

    serve_parser = subparsers.add_parser("serve", parents=[parent_parser], help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8765, help="Server port (default: 8765)")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    configure_logging(args.log_level, args.log_format)
    try:
        args.func(args)
    except RplMatchError as e:
        parser.exit(1, f"error: {e}\n")


if __name__ == "__main__":
    main()
