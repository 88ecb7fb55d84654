"""
Catalog - запись каталогов переводов.

Хранит переводы в JSON-файлах: {output_dir}/{locale}.json
Формат: плоский {"key": "text", ...}

Правила слияния:
- каталог исходного языка: key -> text для каждого ключа реестра;
- целевые каталоги: только дописываются. Новые ключи получают "",
  существующие значения (даже пустые) никогда не перезаписываются;
- файл переписывается, только если его содержимое реально изменилось.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .config import FormatOptions
from .exceptions import CatalogError
from .files import atomic_write
from .scanner import js_string_literal

logger = logging.getLogger(__name__)

TYPES_FILENAME = "types.ts"


@dataclass
class MergeReport:
    """Итог слияния одного целевого каталога."""
    locale: str
    added: int = 0
    preserved: int = 0
    orphaned: List[str] = field(default_factory=list)
    written: bool = False


class CatalogWriter:
    """
    Запись каталогов для исходного и целевых языков.

    Структура файлов:
        locales/
            en.json   - исходный язык (key -> text)
            es.json   - шаблон перевода (key -> "" или перевод)
            types.ts  - список ключей для TypeScript
    """

    def __init__(self, output_dir: Path, options: Optional[FormatOptions] = None):
        self.output_dir = Path(output_dir)
        self.options = options or FormatOptions()
        self.warnings: List[str] = []

    def catalog_path(self, locale: str) -> Path:
        return self.output_dir / f"{locale}.json"

    def ensure_dir(self) -> None:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CatalogError(f"Не удалось создать директорию каталогов {self.output_dir}: {exc}") from exc

    def load(self, locale: str) -> Dict[str, Any]:
        """
        Загружает каталог локали.

        Значения возвращаются как есть: вложенные объекты и числа
        из чужих инструментов не приводятся к строкам и переписываются
        без изменений.

        Нечитаемый или повреждённый файл не фатален: предупреждение
        и пустой каталог (файл будет сгенерирован заново).
        """
        path = self.catalog_path(locale)
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            self._warn(f"Каталог {path} не прочитан ({exc}), считается пустым")
            return {}
        if not isinstance(data, dict):
            self._warn(f"Каталог {path} не является объектом, считается пустым")
            return {}
        foreign = sorted(k for k, v in data.items() if not isinstance(v, str))
        if foreign:
            self._warn(f"Каталог {path}: {len(foreign)} нестроковых значений "
                       f"({', '.join(foreign[:5])}) сохраняются без изменений")
        return data

    def render(self, data: Dict[str, Any]) -> str:
        if self.options.sort_keys:
            data = dict(sorted(data.items()))
        return json.dumps(data, ensure_ascii=False, indent=self.options.indent) + "\n"

    def _write_if_changed(self, path: Path, text: str) -> bool:
        try:
            if path.exists() and path.read_text(encoding="utf-8") == text:
                return False
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Каталог %s будет перезаписан: %s", path, exc)
        try:
            atomic_write(path, text)
        except OSError as exc:
            raise CatalogError(f"Не удалось записать каталог {path}: {exc}") from exc
        return True

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def write_source(self, locale: str, entries: Dict[str, str]) -> Dict[str, str]:
        """
        Записывает каталог исходного языка.

        Записи прежнего файла, ключей которых нет в entries, сохраняются:
        каталог исходного языка только растёт.

        Returns:
            Итоговый каталог (key -> text)
        """
        self.ensure_dir()
        catalog = {k: v for k, v in self.load(locale).items() if k not in entries}
        catalog.update(entries)
        written = self._write_if_changed(self.catalog_path(locale), self.render(catalog))
        if written:
            logger.info("Каталог %s записан: %d ключей", self.catalog_path(locale), len(catalog))
        return catalog

    def merge_target(self, locale: str, source_keys: Iterable[str]) -> MergeReport:
        """Дописывает в каталог локали недостающие ключи с пустым значением."""
        self.ensure_dir()
        report = MergeReport(locale=locale)
        existing = self.load(locale)
        source_keys = list(source_keys)
        merged = dict(existing)
        for key in source_keys:
            if key in merged:
                report.preserved += 1
            else:
                merged[key] = ""
                report.added += 1

        known = set(source_keys)
        for key in existing:
            if key in known:
                continue
            if existing[key] or not isinstance(existing[key], str):
                report.orphaned.append(key)
            else:
                del merged[key]
        if report.orphaned:
            self._warn(f"[{locale}] {len(report.orphaned)} ключей отсутствуют в исходном "
                       f"каталоге; переводы сохранены")

        report.written = self._write_if_changed(self.catalog_path(locale), self.render(merged))
        return report

    def merge_targets(self, locales: Iterable[str], source_keys: Iterable[str]) -> List[MergeReport]:
        keys = list(source_keys)
        return [self.merge_target(locale, keys) for locale in locales]

    def write_type_manifest(self, keys: Iterable[str], path: Optional[Path] = None) -> Path:
        """Генерирует types.ts со всеми ключами каталога."""
        path = Path(path) if path else self.output_dir / TYPES_FILENAME
        lines = [
            "// Generated by react-auto-i18n. Do not edit manually.",
            "",
            "export interface I18nKeys {",
        ]
        lines.extend(f"  {js_string_literal(key)}: string;" for key in sorted(set(keys)))
        lines.extend([
            "}",
            "",
            "export type TranslationKey = keyof I18nKeys;",
            "",
        ])
        self.ensure_dir()
        self._write_if_changed(path, "\n".join(lines))
        return path

    def list_locales(self) -> List[str]:
        if not self.output_dir.exists():
            return []
        return sorted(p.stem for p in self.output_dir.glob("*.json"))

    def get_stats(self, locale: str, source_locale: str) -> Dict:
        """
        Покрытие переводами локали относительно исходного каталога.

        Returns:
            {"total", "translated", "pending", "extra", "coverage"}
        """
        source = self.load(source_locale)
        target = self.load(locale)
        total = len(source)
        translated = sum(1 for key in source if target.get(key))
        return {
            "total": total,
            "translated": translated,
            "pending": total - translated,
            "extra": len(set(target) - set(source)),
            "coverage": round(translated / total * 100, 1) if total else 0.0,
        }
