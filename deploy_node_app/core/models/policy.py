"""
Reconciliation policy — how generated files meet existing ones.

Exactly one mode is active per run.  ``dry_run`` is orthogonal: when set,
content goes to the output stream and nothing else about the policy
matters.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

PolicyMode = Literal["interactive", "non_interactive", "force"]


class ReconcilePolicy(BaseModel):
    """Active policy for one run.

    Attributes:
        mode:    ``interactive`` prompts before replacing a differing file,
                 ``non_interactive`` refuses and warns, ``force`` always writes.
        dry_run: Write content to stdout instead of disk (``--output -``).
    """

    mode: PolicyMode = "non_interactive"
    dry_run: bool = False

    @property
    def interactive(self) -> bool:
        return self.mode == "interactive" and not self.dry_run

    @property
    def force(self) -> bool:
        return self.mode == "force"

    @classmethod
    def from_flags(
        cls,
        *,
        update: bool = False,
        force: bool = False,
        output: str | None = None,
    ) -> ReconcilePolicy:
        """Map CLI flags to a policy.

        ``--force`` wins over ``--update``; ``--output -`` turns on dry run.
        """
        if force:
            mode: PolicyMode = "force"
        elif update:
            mode = "interactive"
        else:
            mode = "non_interactive"
        return cls(mode=mode, dry_run=output == "-")
