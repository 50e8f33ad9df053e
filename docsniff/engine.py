"""Walk a token stream, dispatch the sniffs and drive fixes to convergence.

Examples
--------
>>> result = fix_text("<?php\\n/** Foo */\\n$x = 1;\\n")
>>> result.text
'<?php\\n/**\\n * Foo\\n */\\n$x = 1;\\n'
>>> result.converged
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from docsniff._shared.error_codes import format_error_message
from docsniff._shared.logging import get_logger
from docsniff.blocks import locate_block
from docsniff.config import LinterConfig
from docsniff.context import SniffContext
from docsniff.declarations import is_member_variable
from docsniff.fixer import Fixer
from docsniff.functions import check_function
from docsniff.structure import check_block
from docsniff.tokenizer import tokenize
from docsniff.tokens import TokenKind
from docsniff.variables import check_variable

if TYPE_CHECKING:
    from docsniff.models import Violation
    from docsniff.tokens import TokenStream

__all__ = ["FixResult", "check_text", "fix_text", "run_pass"]

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FixResult:
    """Outcome of fixing one source text.

    Attributes
    ----------
    text : str
        Rewritten text; equal to the input when nothing was fixable.
    passes : int
        Number of passes that ran, including the final one that changed
        nothing.
    converged : bool
        ``False`` when the pass limit was hit while fixes were still applied.
    fixed_count : int
        Number of accepted changesets over all passes.
    violations : tuple[Violation, ...]
        Violations remaining in ``text``.
    """

    text: str
    passes: int
    converged: bool
    fixed_count: int
    violations: tuple[Violation, ...]

    @property
    def changed(self) -> bool:
        return self.fixed_count > 0


def run_pass(
    stream: TokenStream, config: LinterConfig, fixer: Fixer | None = None
) -> list[Violation]:
    """Run every sniff over ``stream`` once, in stream order.

    Parameters
    ----------
    stream : TokenStream
        Stream to check.
    config : LinterConfig
        Active configuration.
    fixer : Fixer | None, optional
        When given, fixable violations propose their changesets to it.

    Returns
    -------
    list[Violation]
        Violations in the order they were reported.
    """
    ctx = SniffContext(stream=stream, config=config, fixer=fixer)
    for index, token in enumerate(stream):
        if token.kind is TokenKind.DOC_COMMENT_OPEN:
            check_block(ctx, locate_block(stream, index))
        elif token.kind is TokenKind.FUNCTION:
            check_function(ctx, index)
        elif token.kind is TokenKind.VARIABLE and is_member_variable(stream, index):
            check_variable(ctx, index)
    return ctx.violations


def check_text(text: str, config: LinterConfig | None = None) -> tuple[Violation, ...]:
    """Tokenize ``text`` and return its violations without fixing anything.

    Raises
    ------
    TokenizeError
        If ``text`` cannot be tokenized.
    """
    return tuple(run_pass(tokenize(text), config or LinterConfig()))


def fix_text(text: str, config: LinterConfig | None = None) -> FixResult:
    """Fix ``text`` until a pass accepts no changeset.

    Every pass re-tokenizes the text produced by the previous one. The loop
    stops after ``config.max_fix_passes`` passes; if the last pass still
    changed something the result is marked as not converged.

    Parameters
    ----------
    text : str
        Source text.
    config : LinterConfig | None, optional
        Active configuration; defaults apply when omitted.

    Returns
    -------
    FixResult
        Rewritten text, pass statistics and the remaining violations.

    Raises
    ------
    TokenizeError
        If ``text`` or an intermediate rewrite cannot be tokenized.
    """
    active = config or LinterConfig()
    current = text
    fixed = 0
    passes = 0
    converged = False
    while passes < active.max_fix_passes:
        passes += 1
        stream = tokenize(current)
        fixer = Fixer(stream)
        run_pass(stream, active, fixer)
        LOGGER.debug(
            "Fix pass %s accepted %s and rejected %s changesets",
            passes,
            fixer.accepted,
            fixer.rejected,
            extra={"operation": "fix", "pass": passes},
        )
        if not fixer.changed:
            converged = True
            break
        fixed += fixer.accepted
        current = fixer.text

    if not converged:
        LOGGER.warning(
            format_error_message(
                "DSN-FIX-001", f"Fixes did not converge after {passes} passes"
            ),
            extra={"operation": "fix", "status": "not-converged", "passes": passes},
        )
    elif fixed:
        LOGGER.info(
            "Applied %s fixes in %s passes",
            fixed,
            passes,
            extra={"operation": "fix", "status": "converged", "passes": passes},
        )
    remaining = check_text(current, active)
    return FixResult(
        text=current,
        passes=passes,
        converged=converged,
        fixed_count=fixed,
        violations=remaining,
    )
