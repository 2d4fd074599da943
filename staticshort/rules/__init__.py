"""Redirect rule loading."""
from .errors import MissingVariable, RuleConfigError, WrongFormat
from .loader import discover_names, load_rules
from .models import ENV_PREFIX, RedirectRule

__all__ = [
    "ENV_PREFIX",
    "MissingVariable",
    "RedirectRule",
    "RuleConfigError",
    "WrongFormat",
    "discover_names",
    "load_rules",
]
