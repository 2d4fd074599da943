"""Rule configuration errors."""


class RuleConfigError(Exception):
    """Base class for errors raised while loading redirect rules."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    @property
    def message(self) -> str:
        return f'Variable "{self.key}" is invalid! Exiting.'

    def __str__(self) -> str:
        return self.message


class MissingVariable(RuleConfigError):
    """A required configuration key is not set."""

    @property
    def message(self) -> str:
        return f'Variable "{self.key}" is missing! Exiting.'


class WrongFormat(RuleConfigError):
    """A configuration key is set but cannot be parsed as its type."""

    def __init__(self, key: str, expected_type: str):
        super().__init__(key)
        self.expected_type = expected_type

    @property
    def message(self) -> str:
        return f'Variable "{self.key}" has wrong type, expected {self.expected_type}! Exiting.'
