"""
Keys - реестр ключей перевода.

Связь "нормализованный текст <-> ключ" в рамках одного запуска:
- один текст всегда получает один и тот же ключ (побеждает первый);
- один ключ никогда не указывает на два разных текста;
- реестр только пополняется, записи не удаляются.

Реестр заполняется из существующего каталога исходного языка, поэтому
ключи стабильны между запусками, пока не меняется сам текст.
"""

import logging
import re
from typing import Dict, Iterator, Optional, Tuple

from .config import FormatOptions
from .validator import TextValidator

logger = logging.getLogger(__name__)

PATH_KEY_MAX_LENGTH = 50
CUSTOM_KEY_WORDS = 3
HASH_KEY_TAG = "text_"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def string_hash(text: str) -> int:
    """
    32-битный строковый хеш (h = h * 31 + code) по UTF-16 единицам.

    Совпадает с хешем, которым исторически генерировались ключи
    в JS-версии инструмента, поэтому старые каталоги остаются валидными.
    """
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def hash_key(text: str) -> str:
    return HASH_KEY_TAG + _base36(abs(string_hash(text)))


def path_key(text: str) -> str:
    key = re.sub(r"[^a-z0-9\s]", "", text.lower()).strip()
    return re.sub(r"\s+", "_", key)[:PATH_KEY_MAX_LENGTH]


def custom_key(text: str, separator: str = "_") -> str:
    words = text.split()[:CUSTOM_KEY_WORDS]
    cleaned = (re.sub(r"[^a-z]", "", word.lower()) for word in words)
    return separator.join(word for word in cleaned if word)


def derive_key(text: str, strategy: str = "text", prefix: str = "",
               separator: str = ".") -> str:
    """
    Выводит ключ из текста по стратегии.

    Args:
        text: Нормализованный текст
        strategy: text | hash | path | custom
        prefix: Префикс ключа (пустой - без префикса)
        separator: Разделитель префикса и ключа

    Returns:
        Ключ. Если path/custom дают пустую строку (например, текст без
        латиницы), используется hash-ключ.
    """
    if strategy == "hash":
        key = hash_key(text)
    elif strategy == "path":
        key = path_key(text) or hash_key(text)
    elif strategy == "custom":
        key = custom_key(text) or hash_key(text)
    else:
        key = text
    if prefix:
        key = f"{prefix}{separator}{key}"
    return key


def normalize(text: str) -> str:
    """Только trim - внутренние пробелы сохраняются."""
    return text.strip()


class KeyRegistry:
    """Реестр текст -> ключ одного запуска трансформации."""

    def __init__(self, options: Optional[FormatOptions] = None,
                 validator: Optional[TextValidator] = None):
        self.options = options or FormatOptions()
        self.validator = validator
        self._text_to_key: Dict[str, str] = {}
        self._key_to_text: Dict[str, str] = {}
        self._seen_this_run = set()
        self.duplicates = 0
        self.collisions = 0
        self.seeded = 0

    def __len__(self) -> int:
        return len(self._text_to_key)

    def __contains__(self, text: str) -> bool:
        return normalize(text) in self._text_to_key

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._key_to_text.items())

    def key_for(self, text: str) -> Optional[str]:
        """Ключ уже известного текста (без регистрации)."""
        return self._text_to_key.get(normalize(text))

    def text_for(self, key: str) -> Optional[str]:
        return self._key_to_text.get(key)

    def _derive_unique(self, text: str) -> str:
        opts = self.options
        base = derive_key(text, opts.key_strategy, opts.key_prefix, opts.key_separator)
        key = base
        n = 1
        while key in self._key_to_text:
            n += 1
            key = f"{base}_{n}"
        if key != base:
            self.collisions += 1
            logger.warning("Коллизия ключа '%s': текст '%s' получил ключ '%s'",
                           base, text, key)
        return key

    def _insert(self, text: str, key: str) -> None:
        self._text_to_key[text] = key
        self._key_to_text[key] = text

    def register(self, text: str) -> Tuple[str, bool]:
        """
        Регистрирует текст.

        Returns:
            (key, is_duplicate) - is_duplicate=True, если текст уже
            встречался в этом запуске
        """
        clean = normalize(text)
        duplicate = clean in self._seen_this_run
        if duplicate:
            self.duplicates += 1
        self._seen_this_run.add(clean)

        key = self._text_to_key.get(clean)
        if key is None:
            key = self._derive_unique(clean)
            self._insert(clean, key)
        return key, duplicate

    def resolve(self, text: str) -> str:
        """Ключ для текста; новый текст регистрируется."""
        clean = normalize(text)
        key = self._text_to_key.get(clean)
        if key is None:
            key = self._derive_unique(clean)
            self._insert(clean, key)
        return key

    def seed(self, catalog: Dict[str, str]) -> int:
        """
        Заполняет реестр из каталога исходного языка {key: text}.

        Пропускаются нестроковые значения, тексты, не прошедшие
        валидацию, и повторы (первая запись побеждает).

        Returns:
            Количество добавленных записей
        """
        added = 0
        for key, text in catalog.items():
            if not isinstance(text, str) or not isinstance(key, str):
                continue
            clean = normalize(text)
            if self.validator is not None and not self.validator.is_valid(clean):
                logger.debug("Запись каталога '%s' пропущена при загрузке", key)
                continue
            if clean in self._text_to_key or key in self._key_to_text:
                continue
            self._insert(clean, key)
            added += 1
        self.seeded += added
        return added

    def to_catalog(self) -> Dict[str, str]:
        """Каталог исходного языка: {key: text} в порядке регистрации."""
        return dict(self._key_to_text)
