"""
Исключения react-auto-i18n.

Иерархия:
    AutoI18nError
    ├── ConfigError      - ошибки конфигурации (до обработки файлов)
    ├── TransformError   - ошибка обработки одного файла (файл пропускается)
    ├── CatalogError     - фатальная ошибка записи каталогов
    └── BackupError      - фатальная ошибка создания бэкапа
"""

from pathlib import Path
from typing import List, Optional, Union


class AutoI18nError(Exception):
    """Базовое исключение пакета."""


class ConfigError(AutoI18nError):
    """Конфигурация невалидна. Содержит полный список найденных ошибок."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Некорректная конфигурация")


class TransformError(AutoI18nError):
    """Ошибка трансформации конкретного файла."""

    def __init__(self, path: Union[str, Path, None], message: str):
        self.path = str(path) if path is not None else None
        self.message = message
        prefix = f"{self.path}: " if self.path else ""
        super().__init__(f"{prefix}{message}")


class CatalogError(AutoI18nError):
    """Каталог переводов невозможно записать. Прерывает весь запуск."""


class BackupError(AutoI18nError):
    """Не удалось создать резервную копию. Прерывает весь запуск."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)
