"""
Валидатор JSON-каталогов переводов.

Проверки относительно каталога исходного языка:
1. Полнота (все ключи исходного каталога есть в целевых)
2. Лишние ключи (есть в целевом, нет в исходном)
3. Пустые значения (ожидают перевода)
4. Совпадение плейсхолдеров {{var}} между языками

Вложенные каталоги разворачиваются в dot-notation ключи.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List

_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class Severity(Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass
class Issue:
    severity: Severity
    key: str
    language: str
    message: str


def flatten_dict(d: Dict, parent_key: str = "") -> Dict[str, str]:
    """Вложенный dict -> плоский с dot-notation ключами"""
    items = {}
    for k, v in d.items():
        new_key = f"{parent_key}.{k}" if parent_key else str(k)
        if isinstance(v, dict):
            items.update(flatten_dict(v, new_key))
        else:
            items[new_key] = str(v) if v is not None else ""
    return items


class CatalogValidator:
    """Проверка согласованности каталогов одной директории."""

    def __init__(self, locales_dir: Path, reference_lang: str = "en"):
        self.locales_dir = Path(locales_dir)
        self.reference_lang = reference_lang
        self.translations: Dict[str, Dict[str, str]] = {}
        self.issues: List[Issue] = []

    def load_translations(self):
        """Загрузить все JSON-каталоги директории"""
        if not self.locales_dir.exists():
            raise FileNotFoundError(f"Директория не найдена: {self.locales_dir}")

        for file in sorted(self.locales_dir.glob("*.json")):
            try:
                with open(file, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                self.issues.append(Issue(Severity.ERROR, "", file.stem,
                                         f"Каталог не читается: {e}"))
                continue
            if isinstance(data, dict):
                self.translations[file.stem] = flatten_dict(data)

        if self.reference_lang not in self.translations:
            raise ValueError(
                f"Каталог исходного языка '{self.reference_lang}' не найден. "
                f"Доступны: {sorted(self.translations)}"
            )

    def targets(self) -> List[str]:
        return [lang for lang in sorted(self.translations) if lang != self.reference_lang]

    def check_completeness(self):
        """Проверка 1-2: пропущенные и лишние ключи"""
        ref_keys = set(self.translations[self.reference_lang])
        for lang in self.targets():
            lang_keys = set(self.translations[lang])
            for key in sorted(ref_keys - lang_keys):
                self.issues.append(Issue(
                    Severity.ERROR, key, lang,
                    f"Отсутствует ключ (есть в {self.reference_lang}, нет в {lang})"))
            for key in sorted(lang_keys - ref_keys):
                self.issues.append(Issue(
                    Severity.WARNING, key, lang,
                    f"Лишний ключ (есть в {lang}, нет в {self.reference_lang})"))

    def check_empty_values(self):
        """Проверка 3: пустые значения"""
        for lang, flat in self.translations.items():
            severity = Severity.ERROR if lang == self.reference_lang else Severity.INFO
            for key, value in flat.items():
                if not value.strip():
                    message = "Пустое значение" if severity is Severity.ERROR else "Ожидает перевода"
                    self.issues.append(Issue(severity, key, lang, message))

    def check_placeholders(self):
        """Проверка 4: плейсхолдеры {{var}} совпадают"""
        ref_flat = self.translations[self.reference_lang]
        for lang in self.targets():
            lang_flat = self.translations[lang]
            for key, ref_text in ref_flat.items():
                lang_text = lang_flat.get(key, "")
                if not lang_text:
                    continue
                ref_placeholders = set(_PLACEHOLDER_RE.findall(ref_text))
                lang_placeholders = set(_PLACEHOLDER_RE.findall(lang_text))
                if ref_placeholders != lang_placeholders:
                    self.issues.append(Issue(
                        Severity.ERROR, key, lang,
                        f"Плейсхолдеры не совпадают: {self.reference_lang}={sorted(ref_placeholders)}, "
                        f"{lang}={sorted(lang_placeholders)}"))

    def validate_all(self) -> List[Issue]:
        """Запустить все проверки"""
        self.load_translations()
        self.check_completeness()
        self.check_empty_values()
        self.check_placeholders()
        return self.issues

    def count(self, severity: Severity, language: str = "") -> int:
        return sum(1 for i in self.issues
                   if i.severity is severity and (not language or i.language == language))
