"""Route table compiled from the configured redirect rules."""
import re
from typing import Mapping

from fastapi import APIRouter
from fastapi.routing import APIRoute
import structlog

from .dispatcher import RedirectDispatcher
from .rules.loader import load_rules
from .rules.models import RedirectRule

log = structlog.get_logger()


class LiteralRoute(APIRoute):
    """
    Route matching its path as an exact string.

    Braces are not path parameters here: ``/{x}`` only answers a request
    for ``/{x}``.
    """

    def __init__(self, path: str, endpoint, **kwargs):
        super().__init__("/", endpoint, **kwargs)
        self.path = path
        self.path_format = path
        self.path_regex = re.compile(f"^{re.escape(path)}$")
        self.param_convertors = {}


def build_router(rules: list[RedirectRule], metrics=None) -> APIRouter:
    """
    Register one GET route per path of every rule.

    Paths are matched exactly, with no templating. A path configured
    without a leading slash is registered with one. Duplicate paths are
    all registered and the first one wins at request time.
    """
    router = APIRouter(route_class=LiteralRoute)
    for rule in rules:
        for path in rule.paths:
            route_path = path if path.startswith("/") else f"/{path}"
            dispatcher = RedirectDispatcher(rule, route_path, metrics=metrics)
            router.add_api_route(
                route_path,
                dispatcher.handle,
                methods=["GET"],
                include_in_schema=False,
            )
            log.info("route.registered", path=route_path)
    return router


def get_routers(environ: Mapping[str, str], metrics=None) -> APIRouter:
    """
    Load all rules and compile them into a route table.

    No router is returned unless every rule is valid.

    Raises:
        RuleConfigError: The first missing or malformed key encountered
    """
    rules = load_rules(environ)
    router = build_router(rules, metrics=metrics)
    if metrics is not None:
        metrics.set_rule_counts(len(rules), len(router.routes))
    return router
