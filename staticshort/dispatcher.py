"""Request-time redirect decision for a single rule."""
from starlette.requests import Request
from starlette.responses import Response
import structlog

from .rules.models import RedirectRule

log = structlog.get_logger()

REDIRECT_URL_PLACEHOLDER = "{REDIRECT_URL}"

REDIRECT_HTML_PAGE = (
    "<!DOCTYPE html><html><head>"
    '<meta http-equiv="refresh" content="0;url={REDIRECT_URL}">'
    "<title>Redirecting...</title></head><body>"
    '<p>If you are not redirected, <a href="{REDIRECT_URL}">click here</a>.</p>'
    "</body></html>"
)


def effective_target(rule: RedirectRule, query: str) -> str:
    """Return the rule target with ``query`` appended, if there is one."""
    if not rule.preserve_query or not query:
        return rule.target
    return f"{rule.target}?{query}"


class RedirectDispatcher:
    """
    Answers requests for one path bound to a redirect rule.

    Several dispatchers share the same rule object; the rule is frozen so
    no synchronisation is needed between concurrent requests.
    """

    def __init__(self, rule: RedirectRule, path: str, metrics=None):
        self.rule = rule
        self.path = path
        self.metrics = metrics

    async def handle(self, request: Request) -> Response:
        """
        Build the redirect response for ``request``.

        The target is passed through untouched. A value the HTTP server
        refuses as a header, such as one holding a line break, is left to
        the server to report.
        """
        target = effective_target(self.rule, request.url.query)

        if self.rule.serve_html_page:
            mode = "html"
            response = Response(
                content=REDIRECT_HTML_PAGE.replace(REDIRECT_URL_PLACEHOLDER, target),
                status_code=200,
                headers={"Content-Type": "text/html"},
            )
        else:
            mode = "header"
            response = Response(status_code=self.rule.status_code)
            # UTF-8 bytes, so targets such as IDNs are not limited to latin-1
            response.raw_headers.append((b"location", target.encode("utf-8")))

        if self.metrics is not None:
            self.metrics.record_redirect_served(self.path, mode)
        log.debug("redirect.served", path=self.path, mode=mode, status=response.status_code)
        return response
