"""
Тесты движка правил: какие фрагменты переводятся, какие нет.

Run with: pytest tests/test_validator.py -v
"""

import pytest

from autoi18n.config import ValidationOptions
from autoi18n.validator import Severity, TextValidator, is_path


class TestClassify:
    """Порядок проверок и причины отказа."""

    @pytest.mark.parametrize("text", ["Save Changes", "Hello World", "Welcome back!",
                                      "Enter email", "Привет, мир", "Crème brûlée"])
    def test_accepts_human_text(self, validator, text):
        assert validator.classify(text).accepted

    @pytest.mark.parametrize("text, reason", [
        ("true", "technical-term"),
        ("TRUE", "technical-term"),
        ("123", "number"),
        ("45.67", "number"),
        ("./src/x", "path"),
        ("https://example.com", "path"),
        ("component.tsx", "path"),
        ("100px", "rule-css-units"),
        ("<div>", "rule-jsx-expression"),
        ("' + variable + '", "rule-template-literal"),
        ("bg-blue-500", "rule-css-classes"),
        ("a", "too-short"),
        ("   ", "empty"),
        ("!!!", "symbols-only"),
    ])
    def test_rejects_with_reason(self, validator, text, reason):
        verdict = validator.classify(text)
        assert not verdict.accepted
        assert verdict.reason == reason

    def test_text_is_trimmed_before_checks(self, validator):
        assert validator.classify("   Save Changes \n").accepted
        assert validator.classify("  true  ").reason == "technical-term"

    def test_max_length(self):
        validator = TextValidator(ValidationOptions(max_length=10))
        assert validator.classify("This is far too long").reason == "too-long"

    def test_switches_disable_checks(self):
        validator = TextValidator(ValidationOptions(skip_technical_terms=False,
                                                    skip_paths=False))
        assert validator.classify("loading").accepted
        assert validator.classify("readme.md").accepted

    def test_custom_patterns(self):
        validator = TextValidator(ValidationOptions(custom_skip_patterns=[r"^SKU-\d+"]))
        assert validator.classify("SKU-100 red").reason == "custom-pattern"
        assert validator.classify("Red shirt").accepted

    def test_invalid_custom_pattern_is_skipped(self):
        validator = TextValidator(ValidationOptions(custom_skip_patterns=["([", "^skip"]))
        assert len(validator.compile_warnings) == 1
        assert len(validator.custom_patterns) == 1
        assert validator.classify("skip me").reason == "custom-pattern"
        assert validator.classify("Keep me").accepted


class TestSkipStats:

    def test_counts_rejections_by_reason(self, validator):
        for text in ("true", "false", "123", "Save Changes"):
            validator.classify(text)
        stats = validator.skip_stats()
        assert stats["total"] == 3
        assert stats["reasons"] == {"technical-term": 2, "number": 1}

    def test_record_false_does_not_count(self, validator):
        validator.classify("true", record=False)
        assert validator.skip_stats()["total"] == 0

    def test_reset(self, validator):
        validator.classify("true")
        validator.reset_stats()
        assert validator.skip_stats() == {"total": 0, "reasons": {}}


class TestDetails:

    def test_valid_text_has_no_errors(self, validator):
        details = validator.validate_with_details("Hello World")
        assert details.valid
        assert details.errors == []

    def test_constant_suggestion(self, validator):
        details = validator.validate_with_details("ABC_CONSTANT")
        assert any("constant" in s for s in details.suggestions)

    def test_warning_rules_do_not_reject(self, validator):
        details = validator.validate_with_details("Fix this TODO later")
        assert details.valid
        assert any("dev-notes" in w for w in details.warnings)

    def test_rejected_text_reports_reason(self, validator):
        details = validator.validate_with_details("100px")
        assert not details.valid
        assert "rule-css-units" in details.errors[0]

    def test_rule_severities(self, validator):
        severities = {rule.name: rule.severity for rule in validator.rules}
        assert severities["jsx-expression"] is Severity.REJECT
        assert severities["hex-colors"] is Severity.INFO


def test_is_path():
    assert is_path("C:\\Users\\me")
    assert is_path("images/logo")
    assert not is_path("Terms and conditions")
