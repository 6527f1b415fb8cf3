"""Command-line entry points: build the corpus index, print a report, serve."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from pr_report.config import Settings, get_settings
from pr_report.errors import InvalidReference, ReportError
from pr_report.github.urls import parse_pull_request_url
from pr_report.obs.logging import configure_logging, get_logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_REFERENCE = 2

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr-report",
        description="Grade a GitHub pull request's description and code review.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="print the report for one pull request as JSON")
    report.add_argument("url", help="https://github.com/owner/repo/pull/1234")

    index = sub.add_parser("index", help="build the reference corpus index")
    index.add_argument("documents", nargs="+", help="markdown or text documents")
    index.add_argument("--output", help="index file (defaults to CORPUS_PATH)")

    serve = sub.add_parser("serve", help="serve reports over HTTP")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


async def _report(settings: Settings, url: str) -> int:
    from pr_report.bootstrap import build_report_service

    try:
        if parse_pull_request_url(url) is None:
            raise InvalidReference(url)
        service = build_report_service(settings)
        result = await service.report_for_url(url)
    except InvalidReference as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INVALID_REFERENCE
    except ReportError as exc:
        logger.error("report_failed", kind=type(exc).__name__, error=str(exc))
        print(f"Error while generating report: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    print(json.dumps(result.to_wire(), indent=2, ensure_ascii=False))
    return EXIT_OK


def _index(settings: Settings, documents: list[str], output: str | None) -> int:
    from pr_report.bootstrap import build_corpus_builder

    builder = build_corpus_builder(settings)
    chunks = builder.build_and_save(list(documents), output or settings.corpus_path)
    print(f"indexed {len(chunks)} chunks into {output or settings.corpus_path}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    if args.command == "report":
        return asyncio.run(_report(settings, args.url))
    if args.command == "index":
        return _index(settings, args.documents, args.output)

    import uvicorn

    uvicorn.run("pr_report.api.main:app", host=args.host, port=args.port)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
