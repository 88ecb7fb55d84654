"""
autoi18n - автоматическая интернационализация React-компонентов.

Модули:
- validator: движок правил (переводимый текст или служебная строка)
- keys: реестр ключей и стратегии генерации ключей
- scanner: типы фрагментов и общие примитивы поиска текста
- components: дескриптор компонента и код привязки t()
- pattern_transformer / tree_transformer: две стратегии extract + rewrite
- catalog: запись и слияние JSON-каталогов, types.ts
- transformer: оркестратор запуска, выбор стратегии, анализ проекта
- manager: CLI (autoi18n)
"""

from pathlib import Path
from typing import Optional, Union

from .config import I18nConfig, load_config, sample_config, save_config, validate_config
from .exceptions import AutoI18nError, BackupError, CatalogError, ConfigError, TransformError
from .keys import KeyRegistry
from .transformer import I18nTransformer, TransformResult, TransformStats, analyze_project
from .validator import TextValidator, ValidationDetails

__version__ = "1.0.0"

__all__ = [
    "I18nConfig", "I18nTransformer", "KeyRegistry", "TextValidator",
    "TransformResult", "TransformStats", "ValidationDetails",
    "AutoI18nError", "BackupError", "CatalogError", "ConfigError", "TransformError",
    "analyze_project", "create_config", "load_config", "transform_project",
    "validate_config", "validate_text",
]


def transform_project(config: Optional[I18nConfig] = None) -> TransformResult:
    """Трансформирует проект с конфигом (по умолчанию - найденным в cwd)."""
    return I18nTransformer(config or load_config()).run()


def validate_text(text: str, config: Optional[I18nConfig] = None) -> ValidationDetails:
    """Подробная проверка одного текста."""
    config = config or I18nConfig()
    return TextValidator(config.validation).validate_with_details(text)


def create_config(output_path: Optional[Union[str, Path]] = None) -> I18nConfig:
    """Конфиг по умолчанию; при output_path - ещё и сохраняет его."""
    config = sample_config()
    if output_path:
        save_config(config, Path(output_path))
    return config
