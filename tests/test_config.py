"""Тесты загрузки и проверки конфигурации."""

import json

import pytest

from autoi18n.config import (
    I18nConfig, config_from_dict, ensure_valid, find_config_file, load_config,
    save_config, validate_config,
)
from autoi18n.exceptions import ConfigError


class TestLoad:

    def test_defaults_without_file(self, project):
        config = load_config(project_root=project)
        assert config.source_language == "en"
        assert config.target_languages == ["es", "fr", "de", "pt"]
        assert config.format.key_strategy == "text"
        assert config.advanced.transformer_type == "auto"
        assert config.src_path == (project / "src").resolve()

    def test_yaml_with_camel_case_keys(self, project):
        (project / "autoi18n.config.yaml").write_text(
            "srcDir: ./app\n"
            "targetLanguages: [de, pt-BR]\n"
            "transformation:\n"
            "  extractJSXText: false\n"
            "  extractAriaLabels: false\n"
            "components:\n"
            "  customHookImport: '@/i18n'\n"
            "format:\n"
            "  keyStrategy: hash\n"
            "  keyPrefix: app\n"
            "advanced:\n"
            "  createBackup: false\n",
            encoding="utf-8")

        config = load_config(project_root=project)

        assert config.src_dir == "./app"
        assert config.target_languages == ["de", "pt-BR"]
        assert config.transformation.extract_jsx_text is False
        assert "aria-label" not in config.allowed_attributes()
        assert config.components.hook_import == "@/i18n"
        assert config.format.key_strategy == "hash"
        assert config.format.key_prefix == "app"
        assert config.advanced.create_backup is False
        # Незаданные поля секции остаются по умолчанию
        assert config.format.indent == 2

    def test_package_json_section(self, project):
        (project / "package.json").write_text(json.dumps({
            "name": "shop",
            "autoi18n": {"sourceLanguage": "de", "targetLanguages": ["en"]},
        }), encoding="utf-8")

        assert find_config_file(project) == project / "package.json"
        config = load_config(project_root=project)
        assert config.source_language == "de"
        assert config.target_languages == ["en"]

    def test_explicit_path_sets_project_root(self, tmp_path):
        path = tmp_path / "conf" / "i18n.json"
        path.parent.mkdir()
        path.write_text(json.dumps({"outputDir": "./locales"}), encoding="utf-8")

        config = load_config(path)

        assert config.output_path == (path.parent / "locales").resolve()

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_overrides_applied_last(self, project):
        (project / ".i18nrc.json").write_text(json.dumps({"targetLanguages": ["es"]}),
                                              encoding="utf-8")
        config = load_config(project_root=project,
                             overrides={"target_languages": "fr, it",
                                        "advanced": {"dry_run": True}})
        assert config.target_languages == ["fr", "it"]
        assert config.advanced.dry_run is True

    def test_unknown_keys_are_ignored(self, caplog):
        config = config_from_dict({"srcDir": "lib", "colour": "blue"})
        assert config.src_dir == "lib"
        assert "colour" in caplog.text

    def test_section_must_be_object(self):
        with pytest.raises(ConfigError):
            config_from_dict({"format": "hash"})

    def test_save_and_reload(self, project):
        original = I18nConfig(target_languages=["ja"])
        original.format.key_strategy = "path"
        path = save_config(original, project / "autoi18n.config.yaml")

        loaded = load_config(path)

        assert loaded.target_languages == ["ja"]
        assert loaded.format.key_strategy == "path"


class TestValidate:

    def test_valid_config(self, config):
        assert validate_config(config) == []
        assert ensure_valid(config) is config

    def test_all_errors_reported(self, config):
        config.src_dir = "does-not-exist"
        config.source_language = "english"
        config.target_languages = ["es", "EN_us"]
        config.format.key_strategy = "random"
        config.advanced.transformer_type = "babel"
        config.validation.min_length = 10
        config.validation.max_length = 5

        errors = validate_config(config)

        assert len(errors) == 6
        assert any("does-not-exist" in e for e in errors)
        assert any("EN_us" in e for e in errors)

    def test_source_among_targets(self, config):
        config.target_languages = ["en", "es"]
        assert len(validate_config(config)) == 1

    def test_no_targets(self, config):
        config.target_languages = []
        with pytest.raises(ConfigError) as excinfo:
            ensure_valid(config)
        assert len(excinfo.value.errors) == 1
