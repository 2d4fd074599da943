"""Redirect rule definition models."""
import re
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from .errors import MissingVariable, WrongFormat

ENV_PREFIX = "SR_REDIR"

_UNSIGNED_INT = re.compile(r"\+?[0-9]+")
_BOOLEANS = {"true": True, "false": False}


class RedirectRule(BaseModel):
    """One named redirect behavior, bound to one or more request paths."""
    model_config = ConfigDict(frozen=True)

    paths: tuple[str, ...] = Field(..., min_length=1, description="Request paths answered by this rule")
    target: str = Field(..., description="Redirect destination, used verbatim")
    status_code: int = Field(..., ge=100, le=999, description="Status sent with the Location header")
    serve_html_page: bool = Field(default=False, description="Answer with a meta-refresh page instead")
    preserve_query: bool = Field(default=False, description="Append the request query string to target")

    @classmethod
    def from_name(cls, name: str, environ: Mapping[str, str]) -> "RedirectRule":
        """
        Build the rule configured under ``SR_REDIR_<name>``.

        Keys are read in order (paths, target, code, js-only,
        preserve-params) and the first failure is raised.

        Args:
            name: Rule name token, as found by ``discover_names``
            environ: Configuration snapshot

        Raises:
            MissingVariable: A required key is not set
            WrongFormat: A key is set but cannot be parsed
        """
        key = f"{ENV_PREFIX}_{name}"
        return cls(
            paths=_read_paths(environ, key),
            target=_read_required(environ, f"{key}__TARGET"),
            status_code=_read_status_code(environ, f"{key}__CODE"),
            serve_html_page=_read_flag(environ, f"{key}__JS_ONLY"),
            preserve_query=_read_flag(environ, f"{key}__PRESERVE_PARAMS"),
        )


def _read_required(environ: Mapping[str, str], key: str) -> str:
    try:
        return environ[key]
    except KeyError:
        raise MissingVariable(key) from None


def _read_paths(environ: Mapping[str, str], key: str) -> tuple[str, ...]:
    paths = tuple(p for p in _read_required(environ, key).split(",") if p)
    if not paths:
        raise WrongFormat(key, "List")
    return paths


def _read_status_code(environ: Mapping[str, str], key: str) -> int:
    raw = _read_required(environ, key)
    if not _UNSIGNED_INT.fullmatch(raw):
        raise WrongFormat(key, "Integer")
    code = int(raw)
    if not 100 <= code <= 999:
        raise WrongFormat(key, "Integer")
    return code


def _read_flag(environ: Mapping[str, str], key: str) -> bool:
    raw = environ.get(key)
    if raw is None:
        return False
    try:
        return _BOOLEANS[raw]
    except KeyError:
        raise WrongFormat(key, "Boolean") from None
