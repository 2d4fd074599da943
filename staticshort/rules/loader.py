"""Discovery and loading of redirect rules from a configuration snapshot."""
import re
from typing import Mapping

import structlog

from .models import ENV_PREFIX, RedirectRule

log = structlog.get_logger()

_NAME_KEY = re.compile(rf"{ENV_PREFIX}_([a-zA-Z0-9]+)")


def discover_names(environ: Mapping[str, str]) -> list[str]:
    """
    Find rule names in the configuration snapshot.

    A key names a rule when it is exactly ``SR_REDIR_<NAME>`` with an
    alphanumeric name. Field keys such as ``SR_REDIR_<NAME>__TARGET`` and
    server settings such as ``SR_REDIR__HOST`` are skipped.

    Returns:
        Rule names in snapshot enumeration order
    """
    names = []
    for key in environ:
        match = _NAME_KEY.fullmatch(key)
        if match:
            names.append(match.group(1))
    return names


def load_rules(environ: Mapping[str, str]) -> list[RedirectRule]:
    """
    Load every configured rule, stopping at the first invalid one.

    Raises:
        RuleConfigError: The first missing or malformed key encountered
    """
    names = discover_names(environ)
    log.info("rules.discovered", names=names)

    rules = []
    for name in names:
        rule = RedirectRule.from_name(name, environ)
        log.info(
            "rule.loaded",
            rule_name=name,
            paths=list(rule.paths),
            status_code=rule.status_code,
            serve_html_page=rule.serve_html_page,
            preserve_query=rule.preserve_query,
        )
        rules.append(rule)
    return rules
