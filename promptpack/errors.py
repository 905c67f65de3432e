"""Exceptions raised by promptpack."""


class PromptPackError(Exception):
    """Base class for promptpack errors."""


class EmptySelectionError(PromptPackError, ValueError):
    """Raised when a prompt is requested without any selected cell."""


class ConfigError(PromptPackError):
    """Raised when a configuration file cannot be read or parsed."""
