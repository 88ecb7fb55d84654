"""
Validator - движок правил: переводимый текст или служебная строка.

Порядок проверок (первое совпадение решает):
1. Пустой текст / длина вне [min_length, max_length]
2. Технический термин (true, null, flex, GET, useState, ...)
3. Число (целое или десятичное)
4. Путь / URL / имя файла
5. Правила уровня REJECT (фрагменты кода, JSX, CSS)
6. Пользовательские паттерны
7. Нет ни одной буквы / только символы

Правила WARNING и INFO на решение не влияют - они видны только
в подробном отчёте validate_with_details().
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Pattern

from .config import ValidationOptions

logger = logging.getLogger(__name__)


class Severity(Enum):
    REJECT = "reject"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ValidationRule:
    """Именованное правило: паттерн + уровень."""
    name: str
    pattern: Pattern
    description: str
    severity: Severity

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


DEFAULT_RULES = (
    ValidationRule(
        "template-literal", re.compile(r"'\s*\+\s*|'\s*\+\s*'"),
        "Фрагмент конкатенации строк", Severity.REJECT),
    ValidationRule(
        "conditional-expression", re.compile(r"\?\s*\(|\)\s*:"),
        "Фрагмент тернарного выражения", Severity.REJECT),
    ValidationRule(
        "jsx-expression", re.compile(r"\{|\}|<|>"),
        "JSX-выражение или HTML-тег", Severity.REJECT),
    ValidationRule(
        "code-keywords",
        re.compile(r"\b(import|export|const|let|var|function|class|return|if|else|for|"
                   r"while|switch|case|break|continue|try|catch|finally|throw|async|"
                   r"await|typeof|instanceof)\b"),
        "Ключевое слово JavaScript/TypeScript", Severity.REJECT),
    ValidationRule(
        "css-units", re.compile(r"^\d+(px|em|rem|vh|vw|%|deg|s|ms)$", re.IGNORECASE),
        "CSS-единицы", Severity.REJECT),
    ValidationRule(
        "css-classes",
        re.compile(r"^(h-|w-|px-|py-|mx-|my-|bg-|text-|border-|rounded-|"
                   r"flex|grid|block|inline|hidden)"),
        "Имена CSS-классов", Severity.REJECT),
    ValidationRule(
        "camel-case-identifier", re.compile(r"^[a-z]+(?:[A-Z][a-z0-9]*)+$"),
        "Похоже на идентификатор в camelCase", Severity.WARNING),
    ValidationRule(
        "dev-notes", re.compile(r"\b(TODO|FIXME|XXX)\b"),
        "Заметки разработчика", Severity.WARNING),
    ValidationRule(
        "hex-colors", re.compile(r"^#[0-9a-fA-F]{3,8}$"),
        "Цвет в HEX", Severity.INFO),
    ValidationRule(
        "urls", re.compile(r"^https?://|^www\.|^/[/\w.-]+"),
        "URL или путь", Severity.INFO),
)

TECHNICAL_TERMS = frozenset(term.casefold() for term in (
    # Булевы и пустые значения
    "true", "false", "null", "undefined", "NaN",
    # CSS
    "auto", "none", "inherit", "initial", "unset", "block", "inline", "flex",
    "grid", "center", "left", "right", "top", "bottom",
    # Типы полей и статусы
    "submit", "button", "text", "email", "password", "loading", "error",
    "success", "warning", "info", "debug",
    # HTTP
    "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS",
    # React и веб-технологии
    "React", "Component", "useState", "useEffect", "useCallback", "useMemo",
    "JSX", "HTML", "CSS", "JavaScript", "TypeScript", "JSON", "XML", "API",
    "HTTP", "HTTPS", "URL", "URI", "DOM", "BOM",
))

_NUMERIC_RE = re.compile(r"^\d+(\.\d+)?$")
_LETTER_RE = re.compile(r"[^\W\d_]")
_SYMBOLS_ONLY_RE = re.compile(r"^[^\w\s]+$")
_CONSTANT_RE = re.compile(r"^[A-Z_]+$")

_PATH_PATTERNS = (
    re.compile(r"^[./]"),
    re.compile(r"^[a-zA-Z]:\\"),
    re.compile(r"^https?://"),
    re.compile(r"^www\."),
    re.compile(r"\.[a-zA-Z]{2,4}$"),
)

_CODE_PATTERNS = (
    re.compile(r"'\s*\+\s*|\s*\+\s*'"),
    re.compile(r"\?\s*\(|\)\s*:|&&|\|\|"),
    re.compile(r"\.\w+\(|\.\w+\[|\[\w+\]"),
    re.compile(r"React\.|useState|useEffect|className|onClick|onChange"),
    re.compile(r"this\."),
    re.compile(r"\{|\}|\[|\]|import |export |const |let |function|=>"),
    re.compile(r"<|>"),
    re.compile(r"[\r\n\t]"),
)


@dataclass(frozen=True)
class Verdict:
    """Результат classify(): принято или отклонено с причиной."""
    accepted: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.accepted


ACCEPT = Verdict(True)


@dataclass
class ValidationDetails:
    """Подробный отчёт по одному тексту (для CLI и диагностики)."""
    text: str
    valid: bool
    reason: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


def is_path(text: str) -> bool:
    """Эвристика: путь к файлу, URL или имя файла."""
    if any(p.search(text) for p in _PATH_PATTERNS):
        return True
    return "/" in text and " " not in text


def is_code_fragment(text: str) -> bool:
    """Грубая проверка на фрагмент кода (вызовы, JSX, операторы)."""
    return any(p.search(text) for p in _CODE_PATTERNS)


class TextValidator:
    """
    Классификатор фрагментов текста.

    Правила и пользовательские паттерны компилируются один раз в
    конструкторе и больше не меняются. Счётчики отказов носят
    справочный характер и на классификацию не влияют.
    """

    def __init__(self, options: Optional[ValidationOptions] = None,
                 rules=DEFAULT_RULES):
        self.options = options or ValidationOptions()
        self.rules = tuple(rules)
        self.compile_warnings: List[str] = []
        self.custom_patterns = self._compile_custom(self.options.custom_skip_patterns)
        self._skip_reasons: Dict[str, int] = {}

    def _compile_custom(self, patterns: List[str]) -> List[Pattern]:
        compiled = []
        for raw in patterns or []:
            try:
                compiled.append(re.compile(raw))
            except re.error as exc:
                message = f"Некорректный пользовательский паттерн '{raw}': {exc}"
                logger.warning(message)
                self.compile_warnings.append(message)
        return compiled

    def classify(self, text: Optional[str], record: bool = True) -> Verdict:
        """
        Принимает или отклоняет фрагмент.

        record=False - не учитывать отказ в статистике (повторный проход
        по уже классифицированному тексту).
        """
        verdict = self._classify(text)
        if record and not verdict.accepted:
            self._skip_reasons[verdict.reason] = self._skip_reasons.get(verdict.reason, 0) + 1
        return verdict

    def _classify(self, text: Optional[str]) -> Verdict:
        opts = self.options
        clean = (text or "").strip()

        if not clean:
            return Verdict(False, "empty")
        if len(clean) < opts.min_length:
            return Verdict(False, "too-short")
        if len(clean) > opts.max_length:
            return Verdict(False, "too-long")

        if opts.skip_technical_terms and clean.casefold() in TECHNICAL_TERMS:
            return Verdict(False, "technical-term")

        if opts.skip_numbers and _NUMERIC_RE.match(clean):
            return Verdict(False, "number")

        if opts.skip_paths and is_path(clean):
            return Verdict(False, "path")

        if opts.skip_code_fragments:
            for rule in self.rules:
                if rule.severity is Severity.REJECT and rule.matches(clean):
                    return Verdict(False, f"rule-{rule.name}")

        for pattern in self.custom_patterns:
            if pattern.search(clean):
                return Verdict(False, "custom-pattern")

        if _SYMBOLS_ONLY_RE.match(clean):
            return Verdict(False, "symbols-only")
        if not _LETTER_RE.search(clean):
            return Verdict(False, "no-letters")

        return ACCEPT

    def is_valid(self, text: Optional[str]) -> bool:
        return self.classify(text).accepted

    def validate_with_details(self, text: str) -> ValidationDetails:
        """
        Подробная проверка: решение + предупреждения + подсказки.

        Используется командой validate и не участвует в трансформации.
        """
        verdict = self.classify(text)
        clean = (text or "").strip()
        details = ValidationDetails(text=clean, valid=verdict.accepted,
                                    reason=verdict.reason)
        if not verdict.accepted:
            details.errors.append(f"Текст отклонён: {verdict.reason}")
            return details

        for rule in self.rules:
            if not rule.matches(clean):
                continue
            if rule.severity is Severity.WARNING:
                details.warnings.append(f"{rule.description}: {rule.name}")
            elif rule.severity is Severity.INFO:
                details.info.append(f"{rule.description}: {rule.name}")

        if is_code_fragment(clean):
            details.warnings.append("Похоже на фрагмент кода")
        if len(clean) < 5:
            details.suggestions.append(
                "Короткий текст - проверьте, нужен ли для него перевод")
        if _CONSTANT_RE.match(clean):
            details.suggestions.append(
                "Похоже на constant - возможно, переводить не нужно")
        if "TODO" in clean or "FIXME" in clean:
            details.suggestions.append(
                "Содержит заметки разработчика - возможно, переводить не нужно")
        return details

    def skip_stats(self) -> Dict[str, object]:
        """Статистика отказов: {"total": N, "reasons": {reason: count}}."""
        return {
            "total": sum(self._skip_reasons.values()),
            "reasons": dict(self._skip_reasons),
        }

    def reset_stats(self) -> None:
        self._skip_reasons.clear()
