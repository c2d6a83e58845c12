"""
Tests for language detection.
"""

from pathlib import Path

import pytest

from deploy_node_app.core.services.detection import LANGUAGES, detect_language, get_language
from deploy_node_app.core.templates import template_path


class TestDetectLanguage:
    @pytest.mark.parametrize("marker,expected", [
        ("package.json", "nodejs"),
        ("requirements.txt", "python"),
        ("pyproject.toml", "python"),
        ("composer.json", "php"),
        ("index.html", "nginx"),
    ])
    def test_markers(self, tmp_path: Path, marker: str, expected: str):
        (tmp_path / marker).write_text("")
        assert detect_language(tmp_path).name == expected

    def test_node_wins_over_static(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{}")
        (tmp_path / "index.html").write_text("")
        assert detect_language(tmp_path).name == "nodejs"

    def test_nothing_detected(self, tmp_path: Path):
        assert detect_language(tmp_path) is None


class TestLanguages:
    def test_every_language_has_a_dockerfile(self):
        for lang in LANGUAGES:
            assert template_path(lang.dockerfile_template).is_file()

    def test_only_node_uses_package_json(self):
        assert [lang.name for lang in LANGUAGES if lang.uses_package_json] == ["nodejs"]

    def test_get_language(self):
        assert get_language("python").default_port == 8000
        assert get_language("cobol") is None
