"""Общие фикстуры: временный React-проект и конфиг для него."""

import textwrap
from pathlib import Path

import pytest

from autoi18n.config import I18nConfig
from autoi18n.keys import KeyRegistry
from autoi18n.validator import TextValidator


@pytest.fixture
def project(tmp_path):
    """Корень проекта с пустой папкой src/."""
    (tmp_path / "src").mkdir()
    return tmp_path


@pytest.fixture
def write_source(project):
    """write_source("components/App.tsx", "...") -> Path"""
    def _write(rel_path: str, content: str) -> Path:
        path = project / "src" / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def config(project):
    cfg = I18nConfig(
        project_root=str(project),
        src_dir="src",
        output_dir="src/locales",
        target_languages=["es", "fr"],
    )
    cfg.advanced.create_backup = False
    return cfg


@pytest.fixture
def validator(config):
    return TextValidator(config.validation)


@pytest.fixture
def registry(config):
    return KeyRegistry(config.format, TextValidator(config.validation))
