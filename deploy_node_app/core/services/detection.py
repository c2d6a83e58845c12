"""
Language detection — what kind of project lives in the target directory.

Detection is marker-file based and ordered: the first language whose
markers match wins.  Each language names the Dockerfile template it
scaffolds and its default listening port.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Language(BaseModel):
    """A supported project language/framework."""

    name: str
    markers: list[str] = Field(default_factory=list)
    dockerfile_template: str
    default_port: int = 3000
    default_entrypoint: str = ""
    uses_package_json: bool = False

    def detect(self, root: Path) -> bool:
        return any((root / marker).exists() for marker in self.markers)


# Order matters: a Node project with an index.html must not look like nginx
LANGUAGES: list[Language] = [
    Language(
        name="nodejs",
        markers=["package.json"],
        dockerfile_template="Dockerfile.nodejs",
        default_port=3000,
        default_entrypoint="index.js",
        uses_package_json=True,
    ),
    Language(
        name="python",
        markers=["requirements.txt", "pyproject.toml", "setup.py"],
        dockerfile_template="Dockerfile.python",
        default_port=8000,
        default_entrypoint="app.py",
    ),
    Language(
        name="php",
        markers=["composer.json", "index.php"],
        dockerfile_template="Dockerfile.php",
        default_port=80,
        default_entrypoint="index.php",
    ),
    Language(
        name="nginx",
        markers=["index.html"],
        dockerfile_template="Dockerfile.nginx",
        default_port=80,
        default_entrypoint="index.html",
    ),
]


def get_language(name: str) -> Language | None:
    for lang in LANGUAGES:
        if lang.name == name:
            return lang
    return None


def detect_language(root: Path) -> Language | None:
    """Return the first language whose marker files exist under *root*."""
    for lang in LANGUAGES:
        if lang.detect(root):
            logger.info("Detected %s project in %s", lang.name, root)
            return lang
    logger.debug("No known language markers in %s", root)
    return None
