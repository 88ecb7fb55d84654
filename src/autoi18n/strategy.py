"""
Strategy - общий контракт стратегий извлечения/перезаписи.

Обе стратегии (structural и pattern) проходят один и тот же конвейер
на каждый файл:

    describe -> (нет переводимого текста? файл не трогаем)
             -> extract  (кандидаты -> валидатор -> реестр ключей)
             -> rewrite  (повторный поиск -> t('key') + импорт/хук)

Проходы extract и rewrite сканируют файл независимо и согласуются
только через детерминированный KeyRegistry.resolve() и защиту от
повторной обёртки.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .components import ComponentDescriptor, describe_component
from .config import I18nConfig
from .exceptions import TransformError
from .keys import KeyRegistry
from .scanner import CandidateFragment, TextExtraction
from .validator import TextValidator

logger = logging.getLogger(__name__)


@dataclass
class RewriteResult:
    """Результат прохода перезаписи по одному файлу."""
    content: str
    texts: int = 0
    attributes: int = 0
    import_added: bool = False
    hook_added: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def replacements(self) -> int:
        return self.texts + self.attributes


@dataclass
class FileOutcome:
    """Итог обработки файла (до записи на диск)."""
    path: str
    original: str
    descriptor: Optional[ComponentDescriptor] = None
    extractions: List[TextExtraction] = field(default_factory=list)
    duplicates: int = 0
    rewrite: Optional[RewriteResult] = None

    @property
    def content(self) -> str:
        return self.rewrite.content if self.rewrite else self.original

    @property
    def changed(self) -> bool:
        return self.rewrite is not None and self.rewrite.content != self.original


def read_source(path: Path) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise TransformError(path, f"не удалось прочитать файл: {exc}") from exc


class TransformStrategy:
    """
    Базовая стратегия. Наследники реализуют find_fragments() и rewrite().
    """

    name = "base"

    def __init__(self, config: I18nConfig, registry: KeyRegistry,
                 validator: Optional[TextValidator] = None):
        self.config = config
        self.registry = registry
        self.validator = validator or TextValidator(config.validation)
        # Отдельный экземпляр: предварительная проверка не портит статистику отказов
        self._precheck = TextValidator(config.validation)
        self.attributes = config.allowed_attributes()

    def describe(self, content: str, file_path: str) -> ComponentDescriptor:
        return describe_component(content, file_path, self.config, self._precheck)

    def find_fragments(self, content: str, file_path: str) -> List[CandidateFragment]:
        """Все кандидаты файла (ещё не классифицированные), без обёрнутых."""
        raise NotImplementedError

    def rewrite(self, content: str, file_path: str,
                descriptor: ComponentDescriptor) -> RewriteResult:
        raise NotImplementedError

    def accepts(self, text: str) -> bool:
        """Проверка для прохода перезаписи, без учёта в статистике."""
        return self.validator.classify(text, record=False).accepted

    def extract(self, content: str, file_path: str) -> Tuple[List[TextExtraction], int]:
        """
        Проход извлечения.

        Returns:
            (принятые фрагменты, число повторов уже встречавшегося текста)
        """
        extractions = []
        duplicates = 0
        for fragment in self.find_fragments(content, file_path):
            if not self.validator.classify(fragment.text):
                continue
            key, duplicate = self.registry.register(fragment.text)
            if duplicate:
                duplicates += 1
            extractions.append(TextExtraction.from_fragment(fragment, key))
        return extractions, duplicates

    def process_file(self, path: Path) -> FileOutcome:
        """Полный конвейер по одному файлу. Ничего не пишет на диск."""
        content = read_source(path)
        file_path = str(path)
        descriptor = self.describe(content, file_path)
        outcome = FileOutcome(path=file_path, original=content, descriptor=descriptor)
        if not descriptor.needs_translation:
            logger.debug("%s: переводимый текст не найден", file_path)
            return outcome

        outcome.extractions, outcome.duplicates = self.extract(content, file_path)
        outcome.rewrite = self.rewrite(content, file_path, descriptor)
        return outcome
