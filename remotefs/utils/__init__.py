"""Utilities for remotefs."""

from remotefs.utils.console import ColorfulFormatter
from remotefs.utils.shell import quote_arg, quote_path, with_sudo
from remotefs.utils.validation import PathValidationError, validate_path

__all__ = [
    "ColorfulFormatter",
    "PathValidationError",
    "quote_arg",
    "quote_path",
    "validate_path",
    "with_sudo",
]
