"""Structured doc-comment linter and autofixer for PHP-style sources."""

from __future__ import annotations

from docsniff.config import LinterConfig, load_config
from docsniff.engine import FixResult, check_text, fix_text
from docsniff.models import CODE_CATALOG, Severity, Violation
from docsniff.tokenizer import tokenize

__version__ = "0.1.0"

__all__ = [
    "CODE_CATALOG",
    "FixResult",
    "LinterConfig",
    "Severity",
    "Violation",
    "__version__",
    "check_text",
    "fix_text",
    "load_config",
    "tokenize",
]
