"""Per-pass state handed to every sniff."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from docsniff.fixer import Changeset, FixOutcome
from docsniff.models import Severity, Violation

if TYPE_CHECKING:
    from docsniff.config import LinterConfig
    from docsniff.fixer import Fixer
    from docsniff.tokens import TokenStream

__all__ = ["SniffContext"]


@dataclass(slots=True)
class SniffContext:
    """Stream, configuration and optional fixer of one pass.

    Sniffs read ``stream`` and report through :meth:`report`. When ``fixer``
    is set, a changeset passed to :meth:`report` is proposed immediately, so
    later sniffs in the same pass see the "one fix per token" rule enforced.
    """

    stream: TokenStream
    config: LinterConfig
    fixer: Fixer | None = None
    violations: list[Violation] = field(default_factory=list)

    @property
    def fixing(self) -> bool:
        return self.fixer is not None

    def changeset(self) -> Changeset:
        """Return an empty changeset bound to the current stream."""
        return Changeset(self.stream)

    def report(
        self,
        sniff: str,
        code: str,
        message: str,
        index: int,
        *,
        severity: Severity = Severity.ERROR,
        changeset: Changeset | None = None,
    ) -> bool:
        """Record a violation and propose its fix.

        Parameters
        ----------
        sniff : str
            Sniff family name.
        code : str
            Violation code.
        message : str
            Human-readable message.
        index : int
            Token the violation is anchored on.
        severity : Severity, optional
            Defaults to ``Severity.ERROR``.
        changeset : Changeset | None, optional
            Deterministic fix. Its presence marks the violation fixable.

        Returns
        -------
        bool
            ``True`` when the fix was accepted by the fixer.
        """
        token = self.stream[index]
        edits = changeset.edits if changeset is not None else ()
        self.violations.append(
            Violation(
                sniff=sniff,
                code=code,
                message=message,
                index=index,
                line=token.line,
                column=token.column,
                severity=severity,
                fixable=changeset is not None,
                edits=edits,
            )
        )
        if changeset is None or self.fixer is None:
            return False
        return self.fixer.propose(changeset) is FixOutcome.ACCEPTED
