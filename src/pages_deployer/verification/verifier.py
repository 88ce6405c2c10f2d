"""Post-deployment verification.

Black-box HTTP checks against a live deployment: URL reachability, SPA
routing and asset optimization heuristics. Every check captures its own
errors and reports them as a failed ``VerificationCheck``; nothing is
raised to the caller, so one broken check never aborts the others.

Typical Usage:
    verifier = DeploymentVerifier(timeout_ms=10_000)
    result = await verifier.verify(VerificationOptions(url="https://agendai.clubemkt.digital"))
    print(verifier.format_results(result))
"""

import json
from typing import Any

import arrow
import httpx
from loguru import logger

from .models import VerificationCheck, VerificationOptions, VerificationResult, VerificationSummary

SPA_TEST_ROUTES = (
    "/",
    "/app",
    "/auth",
    "/dashboard",
    # Must still serve the entry document on a correctly configured SPA host
    "/nonexistent-route-verification",
)


def _elapsed_ms(start_time: float) -> float:
    return (arrow.utcnow().float_timestamp - start_time) * 1000


def _describe_http_error(error: httpx.HTTPError, timeout_ms: float) -> str:
    if isinstance(error, httpx.TimeoutException):
        return f"Request timeout after {timeout_ms:.0f}ms"
    return str(error) or type(error).__name__


class DeploymentVerifier:
    """Runs verification checks against a deployed site.

    Attributes:
        timeout_ms: Timeout of a single request; the SPA routing check splits
            it across its routes
        verbose: Log check progress at INFO instead of DEBUG
    """

    def __init__(self, timeout_ms: float = 30_000, verbose: bool = False, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout_ms = timeout_ms
        self.verbose = verbose
        self._transport = transport

    def _log(self, message: str, *args: Any) -> None:
        logger.log("INFO" if self.verbose else "DEBUG", message, *args)

    def _client(self, timeout_ms: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000),
            follow_redirects=True,
            transport=self._transport,
        )

    async def verify_url_accessibility(self, url: str) -> VerificationCheck:
        """HEAD ``url``; passes on a 2xx status within the timeout."""
        start_time = arrow.utcnow().float_timestamp
        self._log("Checking URL accessibility: {}", url)

        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            return self._url_failure(f"Invalid URL: {e}", start_time)
        if parsed.scheme not in ("http", "https"):
            return self._url_failure("URL must use HTTP or HTTPS protocol", start_time)

        try:
            async with self._client(self.timeout_ms) as client:
                response = await client.head(url)
        except httpx.HTTPError as e:
            return self._url_failure(_describe_http_error(e, self.timeout_ms), start_time)

        if not response.is_success:
            return self._url_failure(f"HTTP {response.status_code}: {response.reason_phrase}", start_time)

        duration_ms = _elapsed_ms(start_time)
        self._log("URL is accessible ({}) in {:.0f}ms", response.status_code, duration_ms)
        return VerificationCheck(
            name="URL Accessibility",
            success=True,
            message=f"URL is accessible (HTTP {response.status_code})",
            details={
                "status": response.status_code,
                "status_text": response.reason_phrase,
                "headers": dict(response.headers),
            },
            duration_ms=duration_ms,
        )

    def _url_failure(self, error: str, start_time: float) -> VerificationCheck:
        logger.error("URL accessibility check failed: {}", error)
        return VerificationCheck(
            name="URL Accessibility",
            success=False,
            message=f"URL is not accessible: {error}",
            details={"error": error},
            duration_ms=_elapsed_ms(start_time),
        )

    async def verify_spa_routing(self, base_url: str) -> VerificationCheck:
        """HEAD every test route; all of them must resolve with 2xx."""
        start_time = arrow.utcnow().float_timestamp
        self._log("Checking SPA routing configuration")
        route_timeout_ms = self.timeout_ms / len(SPA_TEST_ROUTES)
        routes: list[dict[str, Any]] = []

        try:
            base = httpx.URL(base_url)
            async with self._client(route_timeout_ms) as client:
                for route in SPA_TEST_ROUTES:
                    try:
                        response = await client.head(base.join(route))
                    except httpx.HTTPError as e:
                        error = _describe_http_error(e, route_timeout_ms)
                        routes.append({"route": route, "status": 0, "success": False, "error": error})
                        continue
                    routes.append({"route": route, "status": response.status_code, "success": response.is_success})
        except httpx.InvalidURL as e:
            return VerificationCheck(
                name="SPA Routing",
                success=False,
                message=f"SPA routing verification failed: {e}",
                details={"error": str(e)},
                duration_ms=_elapsed_ms(start_time),
            )

        failed_routes = [r["route"] for r in routes if not r["success"]]
        duration_ms = _elapsed_ms(start_time)

        if not failed_routes:
            self._log("SPA routing verified: {}/{} routes accessible", len(routes), len(SPA_TEST_ROUTES))
            return VerificationCheck(
                name="SPA Routing",
                success=True,
                message=f"All {len(SPA_TEST_ROUTES)} test routes are accessible",
                details={"routes": routes},
                duration_ms=duration_ms,
            )

        logger.error("SPA routing issues: {}/{} routes failed", len(failed_routes), len(SPA_TEST_ROUTES))
        return VerificationCheck(
            name="SPA Routing",
            success=False,
            message=f"{len(failed_routes)} out of {len(SPA_TEST_ROUTES)} routes failed: {', '.join(failed_routes)}",
            details={"routes": routes, "failed_routes": failed_routes},
            duration_ms=duration_ms,
        )

    async def verify_asset_optimization(self, base_url: str) -> VerificationCheck:
        """GET the root document and apply the optimization heuristics.

        Sub-checks: HTML Minification, Asset References, Compression Headers.
        """
        start_time = arrow.utcnow().float_timestamp
        self._log("Checking asset optimization")
        checks = await self._asset_sub_checks(base_url)

        failed = [c["name"] for c in checks if not c["success"]]
        duration_ms = _elapsed_ms(start_time)

        if not failed:
            self._log("Asset optimization verified: {}/{} checks passed", len(checks), len(checks))
            return VerificationCheck(
                name="Asset Optimization",
                success=True,
                message=f"All {len(checks)} optimization checks passed",
                details={"checks": checks},
                duration_ms=duration_ms,
            )

        logger.error("Asset optimization issues: {}/{} checks failed", len(failed), len(checks))
        return VerificationCheck(
            name="Asset Optimization",
            success=False,
            message=f"{len(failed)} out of {len(checks)} optimization checks failed",
            details={"checks": checks, "failed_checks": failed},
            duration_ms=duration_ms,
        )

    async def _asset_sub_checks(self, base_url: str) -> list[dict[str, Any]]:
        try:
            async with self._client(self.timeout_ms) as client:
                response = await client.get(base_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = _describe_http_error(e, self.timeout_ms) if isinstance(e, httpx.HTTPError) else str(e)
            return [{"name": "HTML Fetch", "success": False, "details": {"error": error}}]

        if not response.is_success:
            return [
                {
                    "name": "HTML Response",
                    "success": False,
                    "details": {"status": response.status_code, "status_text": response.reason_phrase},
                }
            ]

        html = response.text
        has_double_spaces = "  " in html
        is_minified = "<!DOCTYPE html><html" in html or len(html.split("\n")) < 10 or not has_double_spaces
        has_js = ".js" in html
        has_css = ".css" in html
        content_encoding = response.headers.get("content-encoding")

        return [
            {
                "name": "HTML Minification",
                "success": is_minified,
                "details": {"content_length": len(html), "has_double_spaces": has_double_spaces},
            },
            {
                "name": "Asset References",
                "success": has_js or has_css,
                "details": {"has_js": has_js, "has_css": has_css},
            },
            {
                "name": "Compression Headers",
                "success": content_encoding is not None,
                "details": {
                    "content_encoding": content_encoding,
                    "content_length": response.headers.get("content-length"),
                },
            },
        ]

    async def verify(self, options: VerificationOptions) -> VerificationResult:
        """Run URL accessibility and, unless skipped, SPA routing and asset checks."""
        self._log("Starting post-deployment verification for: {}", options.url)

        checks = [await self.verify_url_accessibility(options.url)]
        if not options.skip_spa_routing:
            checks.append(await self.verify_spa_routing(options.url))
        if not options.skip_asset_optimization:
            checks.append(await self.verify_asset_optimization(options.url))

        passed = sum(1 for check in checks if check.success)
        summary = VerificationSummary(passed=passed, failed=len(checks) - passed, total=len(checks))
        success = summary.failed == 0

        logger.log("INFO" if success else "WARNING", "Verification complete: {}/{} checks passed", passed, summary.total)
        return VerificationResult(success=success, checks=checks, summary=summary)

    def format_results(self, result: VerificationResult) -> str:
        """Render a report; details are only dumped for failed checks."""
        lines = [
            "=== Post-Deployment Verification Results ===",
            f"Overall Status: {'✅ PASSED' if result.success else '❌ FAILED'}",
            f"Summary: {result.summary.passed}/{result.summary.total} checks passed",
            "",
        ]

        for check in result.checks:
            status = "✅" if check.success else "❌"
            duration = f" ({check.duration_ms:.0f}ms)" if check.duration_ms else ""
            lines.append(f"{status} {check.name}{duration}")
            lines.append(f"   {check.message}")
            if not check.success and check.details:
                lines.append(f"   Details: {json.dumps(check.details, indent=2, default=str)}")
            lines.append("")

        return "\n".join(lines)
