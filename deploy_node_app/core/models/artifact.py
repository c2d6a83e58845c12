"""
Target artifact — one file the tool may create or update.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator

from deploy_node_app.core.reconcile.errors import ContentSourceError


class TargetArtifact(BaseModel):
    """A path relative to the project root plus its desired content.

    Exactly one content source is allowed: literal ``content``, or a
    bundled ``template`` with an optional ``properties`` overlay.

    Attributes:
        path:       Relative path from project root.
        content:    Literal file content.
        template:   Bundled template name (see ``core/templates``).
        properties: Overlay deep-merged into a YAML template.
        reason:     Why this file is generated (for logs).
    """

    path: str
    content: str | None = None
    template: str | None = None
    properties: dict[str, Any] | None = None
    reason: str = ""

    @model_validator(mode="after")
    def _one_source(self) -> TargetArtifact:
        # ContentSourceError is not a ValueError, so pydantic lets it through
        if self.content is not None and self.template is not None:
            raise ContentSourceError(f"{self.path}: provide only one of content, template")
        if self.content is None and self.template is None:
            raise ContentSourceError(f"{self.path}: provide one of content, template")
        if self.properties and self.template is None:
            raise ContentSourceError(f"{self.path}: properties require a template")
        return self

    def resolve(self) -> str:
        """Fully merged text to reconcile."""
        if self.content is not None:
            return self.content
        from deploy_node_app.core.reconcile.merge import render_template

        assert self.template is not None
        return render_template(self.template, self.properties)
