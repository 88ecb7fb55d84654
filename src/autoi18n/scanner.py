"""
Scanner - общие типы и примитивы поиска текста в JSX/TSX.

Используется обеими стратегиями:
- CandidateFragment / TextExtraction - найденный фрагмент и запись отчёта
- has_extractable_text() - дешёвая предварительная проверка файла
- already_wrapped() - защита от повторной обёртки t('...')
- js_string_literal() / translation_call() - генерация вызова перевода
"""

import html
import json
import re
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Tuple

from .validator import TextValidator

# Открывающий, закрывающий или самозакрывающийся тег; фрагменты <> и </>.
# Атрибуты-выражения допускают два уровня вложенных {...}
_TAG = (r"<(?:/?[A-Za-z][\w.:-]*"
        r"(?:\s(?:[^<>{}]|\{(?:[^{}]|\{[^{}]*\})*\})*)?)?/?>")

# Текст сразу после тега и до следующего тега, без выражений {...}.
# Сравнение a>b не считается тегом: перед > должен стоять тег целиком
TEXT_RUN_RE = re.compile(_TAG + r"([^<>{}]+)(?=</?[A-Za-z>])")

_WRAPPED_BEFORE_RE = re.compile(r"(?:\bt|\bi18n\.t|\bthis\.props\.t)\(\s*['\"`]?\s*$")
_WRAPPED_AFTER_RE = re.compile(r"^\s*['\"`]?\s*[,)]")


class FragmentKind(Enum):
    """Вид фрагмента."""
    JSX_TEXT = "jsx-text"
    PLACEHOLDER = "placeholder"
    TITLE = "title"
    ARIA_LABEL = "aria-label"
    ATTRIBUTE = "attribute"


def kind_for_attribute(name: str) -> FragmentKind:
    if name in ("placeholder", "aria-placeholder"):
        return FragmentKind.PLACEHOLDER
    if name in ("title", "tooltip"):
        return FragmentKind.TITLE
    if name.startswith("aria-"):
        return FragmentKind.ARIA_LABEL
    return FragmentKind.ATTRIBUTE


@dataclass
class CandidateFragment:
    """
    Кандидат на перевод. Живёт только внутри прохода по файлу.

    start/end - границы заменяемого участка в единицах буфера стратегии
    (символы для pattern, байты для structural).
    """
    text: str
    kind: FragmentKind
    file: str
    line: int
    column: int
    start: int
    end: int
    attribute: Optional[str] = None

    @property
    def is_attribute(self) -> bool:
        return self.attribute is not None


@dataclass
class TextExtraction:
    """Принятый фрагмент (для отчёта и команды extract)."""
    text: str
    key: str
    kind: str
    file: str
    line: int
    column: int
    attribute: Optional[str] = None

    @classmethod
    def from_fragment(cls, fragment: CandidateFragment, key: str) -> "TextExtraction":
        return cls(
            text=fragment.text.strip(),
            key=key,
            kind=fragment.kind.value,
            file=fragment.file,
            line=fragment.line,
            column=fragment.column,
            attribute=fragment.attribute,
        )

    def to_dict(self) -> dict:
        return asdict(self)


def attribute_regex(attributes: Iterable[str]) -> Optional[Pattern]:
    """Регулярка для attr="text" / attr='text' из списка атрибутов."""
    names = sorted({a for a in attributes if a}, key=len, reverse=True)
    if not names:
        return None
    alternation = "|".join(re.escape(n) for n in names)
    return re.compile(
        r"(?<=\s)(?P<attr>" + alternation + r")="
        r"(?P<q>[\"'])(?P<text>(?:(?!(?P=q))[^\n{}])*)(?P=q)"
    )


def line_col(content: str, offset: int) -> Tuple[int, int]:
    """Позиция (строка, колонка) по смещению, обе с 1."""
    line = content.count("\n", 0, offset) + 1
    column = offset - (content.rfind("\n", 0, offset) + 1) + 1
    return line, column


def js_string_literal(text: str) -> str:
    """Строка JS в одинарных кавычках."""
    escaped = (text.replace("\\", "\\\\")
                   .replace("'", "\\'")
                   .replace("\r", "\\r")
                   .replace("\n", "\\n")
                   .replace("\u2028", "\\u2028")
                   .replace("\u2029", "\\u2029"))
    return f"'{escaped}'"


def decode_entities(text: str) -> str:
    """HTML-сущности JSX (&amp;, &nbsp;, &#169;) -> символы, как их покажет React."""
    return html.unescape(text)


def translation_call(key: str, callee: str = "t") -> str:
    return f"{callee}({js_string_literal(key)})"


def already_wrapped(before: str, after: str) -> bool:
    """
    Фрагмент уже стоит внутри вызова перевода: t('...'), i18n.t(...),
    this.props.t(...). Проверяется только непосредственное окружение.
    """
    return bool(_WRAPPED_BEFORE_RE.search(before) and _WRAPPED_AFTER_RE.match(after))


def has_extractable_text(content: str, validator: TextValidator,
                         attributes: Iterable[str] = (),
                         include_text: bool = True) -> bool:
    """
    Поверхностная проверка: есть ли в файле хотя бы один фрагмент,
    который пройдёт валидацию. Может ошибаться на краях - она лишь
    решает, запускать ли полные проходы.
    """
    if include_text:
        for match in TEXT_RUN_RE.finditer(content):
            if validator.is_valid(decode_entities(match.group(1))):
                return True
    attr_re = attribute_regex(attributes)
    if attr_re is not None:
        for match in attr_re.finditer(content):
            if validator.is_valid(decode_entities(match.group("text"))):
                return True
    return False


def export_extractions(extractions: List[TextExtraction], output: Path) -> Path:
    """Сохраняет извлечённые строки в JSON."""
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "total": len(extractions),
        "unique_keys": len({e.key for e in extractions}),
        "extractions": [e.to_dict() for e in extractions],
    }
    with open(output, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return output
