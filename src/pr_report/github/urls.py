"""Parsing of pull-request URLs."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from pr_report.types import PullRequestParams

_PULL_PATH = re.compile(r"^/(?P<owner>[^/]+)/(?P<repo>[^/]+)/pull/(?P<number>\d+)(?:/.*)?$")


def parse_pull_request_url(url: str) -> PullRequestParams | None:
    """Return the PR coordinates of `https://github.com/{owner}/{repo}/pull/{n}(/...)`.

    Anything else (another host, missing segments, a non-numeric number) is
    not a valid reference and yields None.
    """

    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError:
        return None

    if parts.scheme not in ("http", "https") or hostname != "github.com":
        return None

    match = _PULL_PATH.match(parts.path)
    if match is None:
        return None

    return PullRequestParams(
        owner=match.group("owner"),
        repo=match.group("repo"),
        pull_number=int(match.group("number")),
    )
