"""Тесты записи и слияния каталогов."""

import json

import pytest

from autoi18n.catalog import CatalogWriter
from autoi18n.config import FormatOptions
from autoi18n.json_validator import CatalogValidator, Severity


@pytest.fixture
def writer(tmp_path):
    return CatalogWriter(tmp_path / "locales")


def read(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class TestSourceCatalog:

    def test_sorted_utf8_with_newline(self, writer):
        writer.write_source("en", {"b": "Привет", "a": "Hello"})
        text = writer.catalog_path("en").read_text(encoding="utf-8")
        assert text == '{\n  "a": "Hello",\n  "b": "Привет"\n}\n'

    def test_unsorted_and_custom_indent(self, tmp_path):
        writer = CatalogWriter(tmp_path, FormatOptions(indent=4, sort_keys=False))
        writer.write_source("en", {"b": "B text", "a": "A text"})
        text = writer.catalog_path("en").read_text(encoding="utf-8")
        assert text == '{\n    "b": "B text",\n    "a": "A text"\n}\n'

    def test_previous_entries_kept(self, writer):
        writer.write_source("en", {"Old": "Old"})
        catalog = writer.write_source("en", {"New": "New"})
        assert catalog == {"Old": "Old", "New": "New"}
        assert read(writer.catalog_path("en")) == catalog

    def test_source_keeps_nested_entries(self, writer):
        writer.ensure_dir()
        writer.catalog_path("en").write_text(
            json.dumps({"nav": {"home": "Home"}}), encoding="utf-8")

        writer.write_source("en", {"Welcome": "Welcome"})

        assert read(writer.catalog_path("en")) == {"nav": {"home": "Home"}, "Welcome": "Welcome"}


class TestMergeTarget:

    def test_new_keys_get_empty_value(self, writer):
        report = writer.merge_target("es", ["Welcome", "Enter email"])
        assert read(writer.catalog_path("es")) == {"Enter email": "", "Welcome": ""}
        assert report.added == 2
        assert report.written

    def test_translations_never_overwritten(self, writer):
        writer.catalog_path("es").parent.mkdir(parents=True)
        writer.catalog_path("es").write_text(
            json.dumps({"Welcome": "Bienvenido", "Enter email": ""}), encoding="utf-8")

        report = writer.merge_target("es", ["Welcome", "Enter email", "Save Changes"])

        assert read(writer.catalog_path("es")) == {
            "Welcome": "Bienvenido", "Enter email": "", "Save Changes": ""}
        assert report.preserved == 2
        assert report.added == 1

    def test_unchanged_catalog_not_rewritten(self, writer):
        writer.merge_target("es", ["Welcome"])
        path = writer.catalog_path("es")
        mtime = path.stat().st_mtime_ns

        report = writer.merge_target("es", ["Welcome"])

        assert not report.written
        assert path.stat().st_mtime_ns == mtime

    def test_orphans(self, writer):
        writer.catalog_path("fr").parent.mkdir(parents=True)
        writer.catalog_path("fr").write_text(
            json.dumps({"Gone": "Parti", "Stale": "", "Welcome": ""}), encoding="utf-8")

        report = writer.merge_target("fr", ["Welcome"])

        assert read(writer.catalog_path("fr")) == {"Gone": "Parti", "Welcome": ""}
        assert report.orphaned == ["Gone"]
        assert len(writer.warnings) == 1

    def test_non_string_values_kept_verbatim(self, writer):
        path = writer.catalog_path("es")
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"nav": {"home": "Inicio"}, "count": 0,
                                    "Welcome": "Bienvenido"}), encoding="utf-8")

        writer.merge_target("es", ["Welcome", "Save Changes"])

        assert read(path) == {"nav": {"home": "Inicio"}, "count": 0,
                              "Welcome": "Bienvenido", "Save Changes": ""}
        assert any("nav" in w for w in writer.warnings)

    def test_corrupt_catalog_is_regenerated(self, writer):
        writer.catalog_path("de").parent.mkdir(parents=True)
        writer.catalog_path("de").write_text("{not json", encoding="utf-8")

        writer.merge_target("de", ["Welcome"])

        assert read(writer.catalog_path("de")) == {"Welcome": ""}
        assert writer.warnings


class TestTypeManifest:

    def test_keys_listed_sorted(self, writer):
        path = writer.write_type_manifest(["b_key", "Don't stop", "a_key"])
        text = path.read_text(encoding="utf-8")

        assert text.startswith("// Generated by react-auto-i18n. Do not edit manually.\n")
        assert "  'Don\\'t stop': string;\n  'a_key': string;\n  'b_key': string;\n" in text
        assert text.endswith("export type TranslationKey = keyof I18nKeys;\n")


class TestStats:

    def test_coverage(self, writer):
        writer.write_source("en", {"a": "A text", "b": "B text", "c": "C text", "d": "D text"})
        writer.catalog_path("es").write_text(
            json.dumps({"a": "Texto A", "b": "", "x": "Extra"}), encoding="utf-8")

        stats = writer.get_stats("es", "en")

        assert stats == {"total": 4, "translated": 1, "pending": 3, "extra": 1, "coverage": 25.0}
        assert writer.list_locales() == ["en", "es"]


class TestCatalogValidator:

    def test_issues(self, writer):
        writer.write_source("en", {"greet": "Hello {{name}}", "bye": "Bye"})
        writer.catalog_path("es").write_text(
            json.dumps({"greet": "Hola {{nombre}}", "extra": "X"}), encoding="utf-8")
        writer.catalog_path("fr").write_text(
            json.dumps({"greet": "", "bye": "Au revoir"}), encoding="utf-8")

        validator = CatalogValidator(writer.output_dir, "en")
        issues = validator.validate_all()

        assert {(i.severity, i.key, i.language) for i in issues} == {
            (Severity.ERROR, "bye", "es"),
            (Severity.WARNING, "extra", "es"),
            (Severity.ERROR, "greet", "es"),
            (Severity.INFO, "greet", "fr"),
        }
        assert validator.count(Severity.ERROR) == 2
        assert validator.count(Severity.ERROR, "fr") == 0

    def test_missing_reference(self, writer):
        writer.write_source("es", {"a": "A"})
        with pytest.raises(ValueError):
            CatalogValidator(writer.output_dir, "en").validate_all()
