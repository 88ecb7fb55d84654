"""
Config - конфигурация трансформации.

Конфигурация - явный объект I18nConfig, который передаётся в каждый
компонент через конструктор. Глобального состояния нет.

Источники (первый найденный):
    1. Явно указанный путь (--config)
    2. autoi18n.config.yaml / autoi18n.config.yml / autoi18n.config.json
    3. .i18nrc.json
    4. package.json, ключ "autoi18n"

Ключи в файле допускаются как в snake_case, так и в camelCase
(srcDir, targetLanguages, keyStrategy, ...). Значения пользователя
накладываются на значения по умолчанию посекционно.
"""

import json
import logging
import re
from dataclasses import dataclass, field, asdict, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (
    "autoi18n.config.yaml",
    "autoi18n.config.yml",
    "autoi18n.config.json",
    ".i18nrc.json",
)

PACKAGE_JSON_KEY = "autoi18n"

KEY_STRATEGIES = ("text", "hash", "path", "custom")
TRANSFORMER_TYPES = ("auto", "structural", "pattern")

LANGUAGE_CODE_RE = re.compile(r"^[a-z]{2}(-[A-Z]{2})?$")

# Атрибуты, значения которых считаются переводимым текстом
DEFAULT_ATTRIBUTES = ["placeholder", "title", "alt", "aria-label", "label"]

PLACEHOLDER_ATTRIBUTES = {"placeholder", "aria-placeholder"}
TOOLTIP_ATTRIBUTES = {"title", "tooltip"}

DEFAULT_EXCLUDE = [
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/*.test.*",
    "**/*.spec.*",
    "**/*.stories.*",
]

# camelCase-имена, которые не переводятся в snake_case механически
_ALIASES = {
    "extractJSXText": "extract_jsx_text",
    "customHookImport": "hook_import",
    "addUseTranslationHook": "add_use_translation_hook",
}


@dataclass
class TransformationOptions:
    """Что извлекать из разметки."""
    extract_jsx_text: bool = True
    extract_attributes: bool = True
    extract_placeholders: bool = True
    extract_tooltips: bool = True
    extract_aria_labels: bool = True
    attributes: List[str] = field(default_factory=lambda: list(DEFAULT_ATTRIBUTES))


@dataclass
class ComponentOptions:
    """Внедрение импорта и привязки функции перевода."""
    add_use_translation_hook: bool = True
    support_class_components: bool = True
    hook_import: str = "react-i18next"


@dataclass
class ValidationOptions:
    """Пороги и переключатели движка правил."""
    min_length: int = 2
    max_length: int = 500
    skip_technical_terms: bool = True
    skip_code_fragments: bool = True
    skip_numbers: bool = True
    skip_paths: bool = True
    custom_skip_patterns: List[str] = field(default_factory=list)


@dataclass
class FormatOptions:
    """Формат каталогов и генерация ключей."""
    indent: int = 2
    sort_keys: bool = True
    key_strategy: str = "text"      # text | hash | path | custom
    key_prefix: str = ""
    key_separator: str = "."


@dataclass
class AdvancedOptions:
    generate_type_definitions: bool = True
    create_backup: bool = True
    transformer_type: str = "auto"  # auto | structural | pattern
    dry_run: bool = False


@dataclass
class I18nConfig:
    """Полная конфигурация одного запуска."""
    src_dir: str = "./src"
    output_dir: str = "./src/locales"
    backup_dir: str = "./i18n-backup"
    source_language: str = "en"
    target_languages: List[str] = field(default_factory=lambda: ["es", "fr", "de", "pt"])
    include: List[str] = field(default_factory=lambda: ["**/*.{tsx,jsx}"])
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    transformation: TransformationOptions = field(default_factory=TransformationOptions)
    components: ComponentOptions = field(default_factory=ComponentOptions)
    validation: ValidationOptions = field(default_factory=ValidationOptions)
    format: FormatOptions = field(default_factory=FormatOptions)
    advanced: AdvancedOptions = field(default_factory=AdvancedOptions)
    # Корень проекта: относительно него разрешаются все пути
    project_root: str = "."

    def resolve(self, value: str) -> Path:
        """Разрешает путь из конфига относительно корня проекта."""
        path = Path(value)
        if path.is_absolute():
            return path
        return (Path(self.project_root) / path).resolve()

    @property
    def src_path(self) -> Path:
        return self.resolve(self.src_dir)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def backup_path(self) -> Path:
        return self.resolve(self.backup_dir)

    def allowed_attributes(self) -> List[str]:
        """
        Итоговый список атрибутов с учётом переключателей.

        extract_attributes=False отключает все атрибуты; остальные флаги
        отключают свои группы (placeholder, title, aria-*).
        """
        opts = self.transformation
        if not opts.extract_attributes:
            return []
        result = []
        for attr in opts.attributes:
            if attr in PLACEHOLDER_ATTRIBUTES and not opts.extract_placeholders:
                continue
            if attr in TOOLTIP_ATTRIBUTES and not opts.extract_tooltips:
                continue
            if attr.startswith("aria-") and not opts.extract_aria_labels:
                continue
            result.append(attr)
        return result


def _snake(name: str) -> str:
    if name in _ALIASES:
        return _ALIASES[name]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _apply(target: Any, data: Dict[str, Any], section: str = "") -> None:
    """Накладывает словарь на dataclass-секцию, рекурсивно для вложенных."""
    known = {f.name for f in fields(target)}
    for raw_key, value in data.items():
        key = _snake(raw_key)
        where = f"{section}.{key}" if section else key
        if key not in known:
            logger.warning("Неизвестный параметр конфигурации: %s", where)
            continue
        current = getattr(target, key)
        if is_dataclass(current):
            if not isinstance(value, dict):
                raise ConfigError([f"Секция '{where}' должна быть объектом"])
            _apply(current, value, where)
        elif isinstance(current, list) and isinstance(value, str):
            setattr(target, key, [v.strip() for v in value.split(",") if v.strip()])
        else:
            setattr(target, key, value)


def config_from_dict(data: Optional[Dict[str, Any]],
                     project_root: Optional[Path] = None) -> I18nConfig:
    """Создаёт конфиг из словаря поверх значений по умолчанию."""
    config = I18nConfig()
    if data:
        _apply(config, data)
    if project_root is not None:
        config.project_root = str(project_root)
    return config


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError([f"Не удалось прочитать конфиг {path}: {exc}"]) from exc

    if path.name == "package.json":
        data = (data or {}).get(PACKAGE_JSON_KEY) or {}
    if not isinstance(data, dict):
        raise ConfigError([f"Конфиг {path} должен содержать объект"])
    return data


def find_config_file(project_root: Path) -> Optional[Path]:
    """Ищет файл конфигурации в корне проекта."""
    for name in CONFIG_FILENAMES:
        candidate = project_root / name
        if candidate.exists():
            return candidate

    package_json = project_root / "package.json"
    if package_json.exists():
        try:
            with open(package_json, "r", encoding="utf-8") as f:
                if PACKAGE_JSON_KEY in json.load(f):
                    return package_json
        except (OSError, ValueError) as exc:
            logger.debug("package.json не разобран: %s", exc)
    return None


def load_config(path: Optional[Path] = None,
                project_root: Optional[Path] = None,
                overrides: Optional[Dict[str, Any]] = None) -> I18nConfig:
    """
    Загружает конфигурацию.

    Args:
        path: Явный путь к файлу конфига (YAML или JSON)
        project_root: Корень проекта (по умолчанию - папка конфига или cwd)
        overrides: Значения из командной строки, применяются последними

    Returns:
        I18nConfig (ещё не провалидированный, см. validate_config)
    """
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError([f"Файл конфигурации не найден: {path}"])
        root = Path(project_root) if project_root else path.resolve().parent
    else:
        root = Path(project_root) if project_root else Path.cwd()
        path = find_config_file(root)

    data: Dict[str, Any] = {}
    if path is not None:
        data = _read_file(path)
        logger.info("Конфигурация загружена из %s", path)
    else:
        logger.debug("Файл конфигурации не найден, используются значения по умолчанию")

    config = config_from_dict(data, project_root=root)
    if overrides:
        _apply(config, overrides)
    return config


def validate_config(config: I18nConfig) -> List[str]:
    """Возвращает список ошибок конфигурации (пустой - конфиг валиден)."""
    errors = []

    if not config.src_dir:
        errors.append("Не указан src_dir")
    elif not config.src_path.is_dir():
        errors.append(f"Директория исходников не существует: {config.src_path}")
    if not config.output_dir:
        errors.append("Не указан output_dir")
    if not config.source_language:
        errors.append("Не указан source_language")
    elif not LANGUAGE_CODE_RE.match(config.source_language):
        errors.append(f"Некорректный код исходного языка: {config.source_language}")

    if not config.target_languages:
        errors.append("Нужен хотя бы один целевой язык (target_languages)")
    for lang in config.target_languages:
        if not LANGUAGE_CODE_RE.match(str(lang)):
            errors.append(f"Некорректный код языка: {lang}")
    if config.source_language in config.target_languages:
        errors.append(f"Исходный язык '{config.source_language}' указан среди целевых")

    if config.format.key_strategy not in KEY_STRATEGIES:
        errors.append(f"Неизвестная стратегия ключей: {config.format.key_strategy} "
                      f"(допустимо: {', '.join(KEY_STRATEGIES)})")
    if config.advanced.transformer_type not in TRANSFORMER_TYPES:
        errors.append(f"Неизвестный тип трансформера: {config.advanced.transformer_type} "
                      f"(допустимо: {', '.join(TRANSFORMER_TYPES)})")

    v = config.validation
    if v.min_length < 0 or v.max_length < 1:
        errors.append("Границы длины текста должны быть положительными")
    elif v.min_length > v.max_length:
        errors.append(f"min_length ({v.min_length}) больше max_length ({v.max_length})")
    if config.format.indent < 0:
        errors.append("format.indent не может быть отрицательным")

    return errors


def ensure_valid(config: I18nConfig) -> I18nConfig:
    """Бросает ConfigError со всеми ошибками, если конфиг невалиден."""
    errors = validate_config(config)
    if errors:
        raise ConfigError(errors)
    return config


def config_to_dict(config: I18nConfig) -> Dict[str, Any]:
    data = asdict(config)
    data.pop("project_root", None)
    return data


def sample_config() -> I18nConfig:
    """Конфиг-пример для команды init."""
    return I18nConfig()


def save_config(config: I18nConfig, path: Path) -> Path:
    """Сохраняет конфиг в YAML (или JSON, если расширение .json)."""
    path = Path(path)
    data = config_to_dict(config)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix == ".json":
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
        else:
            yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
    return path
