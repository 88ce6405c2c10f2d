"""Parsing of the platform CLI's deploy output.

The deploy command only reports its result as human-readable text, so URLs
and the deployment id are scraped from it. Kept free of I/O so it can be
tested against literal output fixtures.
"""

import re
from collections.abc import Iterable

from pydantic import BaseModel

# The host ends unless another label follows; a sentence-ending period is allowed
_HOST_END = r"(?![A-Za-z0-9-]|\.[A-Za-z0-9])"

# Covers project, branch alias and per-deployment hash subdomains
PLATFORM_URL_PATTERN = re.compile(rf"https://(?:[A-Za-z0-9-]+\.)+pages\.dev{_HOST_END}")

DEPLOYMENT_ID_PATTERNS = (
    re.compile(r"Deployment ID: ([a-f0-9-]+)", re.IGNORECASE),
    re.compile(r"deployment-id[:\s]+([a-f0-9-]+)", re.IGNORECASE),
)

DEFAULT_CUSTOM_DOMAIN_SUFFIXES = ("clubemkt.digital",)


class ParsedDeploymentOutput(BaseModel):
    url: str | None = None
    preview_url: str | None = None
    deployment_id: str | None = None


def _custom_domain_pattern(suffix: str) -> re.Pattern[str]:
    return re.compile(rf"https://[A-Za-z0-9.-]+\.{re.escape(suffix)}{_HOST_END}")


def _unique_in_order(urls: Iterable[tuple[int, str]]) -> list[str]:
    seen: dict[str, None] = {}
    for _, url in sorted(urls):
        seen.setdefault(url, None)
    return list(seen)


def parse_deployment_output(
    output: str,
    custom_domain_suffixes: Iterable[str] = DEFAULT_CUSTOM_DOMAIN_SUFFIXES,
) -> ParsedDeploymentOutput:
    """Extract the deployment URLs and id from deploy output.

    A custom-domain URL is preferred for ``url``; the first platform subdomain
    URL becomes ``preview_url`` when it differs. Without any custom-domain
    URL the first platform subdomain URL is the ``url``.

    Args:
        output: Combined stdout/stderr of the deploy command
        custom_domain_suffixes: Domain suffixes that identify custom domains

    Returns:
        ParsedDeploymentOutput: Fields are None when not found
    """
    custom_matches = [
        (match.start(), match.group(0))
        for suffix in custom_domain_suffixes
        for match in _custom_domain_pattern(suffix).finditer(output)
    ]
    platform_matches = [(match.start(), match.group(0)) for match in PLATFORM_URL_PATTERN.finditer(output)]

    custom_urls = _unique_in_order(custom_matches)
    platform_urls = _unique_in_order(platform_matches)

    result = ParsedDeploymentOutput()
    if custom_urls:
        result.url = custom_urls[0]
        if platform_urls and platform_urls[0] != result.url:
            result.preview_url = platform_urls[0]
    elif platform_urls:
        result.url = platform_urls[0]

    for pattern in DEPLOYMENT_ID_PATTERNS:
        match = pattern.search(output)
        if match:
            result.deployment_id = match.group(1)
            break

    return result
