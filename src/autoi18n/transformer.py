"""
Transformer - оркестратор запуска трансформации.

Порядок одного запуска:
    1. Проверка конфигурации (ConfigError - до любых изменений)
    2. Поиск файлов, выбор стратегии (structural / pattern)
    3. Реестр ключей заполняется из каталога исходного языка
    4. Резервная копия (ошибка - запуск прерывается)
    5. Файлы по одному: extract -> rewrite -> запись, если изменился.
       Ошибка файла записывается в stats.errors, обработка продолжается
    6. Каталоги: исходный язык, целевые языки, types.ts
       (ошибка - запуск прерывается, success=False)

Использование:
    config = load_config()
    result = I18nTransformer(config).run()
    print(result.stats.texts_transformed)
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Type

from .catalog import CatalogWriter
from .config import I18nConfig, ensure_valid
from .exceptions import BackupError, CatalogError, TransformError
from .files import atomic_write, create_backup, discover_files, unified_diff
from .keys import KeyRegistry
from .pattern_transformer import PatternStrategy
from .scanner import TextExtraction
from .strategy import TransformStrategy, read_source
from .tree_transformer import TreeStrategy
from .validator import TextValidator, ValidationDetails

logger = logging.getLogger(__name__)

STRATEGIES: Dict[str, Type[TransformStrategy]] = {
    TreeStrategy.name: TreeStrategy,
    PatternStrategy.name: PatternStrategy,
}

TS_SUFFIXES = (".ts", ".tsx")
JS_SUFFIXES = (".js", ".jsx")


@dataclass
class TransformStats:
    """Агрегированная статистика запуска."""
    files_found: int = 0
    files_processed: int = 0
    files_modified: int = 0
    texts_transformed: int = 0
    attributes_transformed: int = 0
    imports_added: int = 0
    hooks_added: int = 0
    duplicates_found: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped: Dict[str, int] = field(default_factory=dict)

    @property
    def fragments_transformed(self) -> int:
        return self.texts_transformed + self.attributes_transformed


@dataclass
class TransformResult:
    """Результат запуска для CLI и вызывающего кода."""
    success: bool
    stats: TransformStats
    translation_keys: Dict[str, str] = field(default_factory=dict)
    modified_files: List[str] = field(default_factory=list)
    strategy: str = ""
    backup_path: Optional[str] = None
    dry_run: bool = False
    extractions: List[TextExtraction] = field(default_factory=list)
    diffs: Dict[str, str] = field(default_factory=dict)


@dataclass
class ProjectAnalysis:
    """Результат анализа проекта (команда analyze)."""
    project_type: str
    strategy: str
    has_tsconfig: bool = False
    has_typescript_dependency: bool = False
    ts_files: List[str] = field(default_factory=list)
    js_files: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


def _package_json_has_typescript(root: Path) -> bool:
    package_json = root / "package.json"
    if not package_json.exists():
        return False
    try:
        with open(package_json, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.debug("package.json не разобран: %s", exc)
        return False
    deps = {}
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        deps.update(data.get(section) or {})
    return "typescript" in deps or any(name.startswith("@types/") for name in deps)


def analyze_project(config: I18nConfig, files: Optional[List[Path]] = None) -> ProjectAnalysis:
    """
    Определяет тип проекта и рекомендуемую стратегию.

    TypeScript (-> structural), если есть tsconfig.json в корне или src/,
    typescript/@types/* в package.json, либо хотя бы один .ts/.tsx файл.
    """
    root = Path(config.project_root)
    if files is None:
        files = discover_files(config.src_path, config.include, config.exclude)

    analysis = ProjectAnalysis(project_type="javascript", strategy=PatternStrategy.name)
    analysis.has_tsconfig = any((d / "tsconfig.json").exists()
                                for d in (root, config.src_path))
    analysis.has_typescript_dependency = _package_json_has_typescript(root)
    analysis.ts_files = [str(f) for f in files if f.suffix in TS_SUFFIXES]
    analysis.js_files = [str(f) for f in files if f.suffix in JS_SUFFIXES]

    if analysis.has_tsconfig or analysis.has_typescript_dependency or analysis.ts_files:
        analysis.project_type = "typescript"
        analysis.strategy = TreeStrategy.name

    if not files:
        analysis.recommendations.append(
            "Файлы не найдены - проверьте src_dir и шаблоны include/exclude")
    if analysis.ts_files and analysis.js_files:
        analysis.recommendations.append(
            "Смешанный проект JS/TS - structural-стратегия обработает оба типа файлов")
    if analysis.project_type == "javascript":
        analysis.recommendations.append(
            "JavaScript-проект: используется облегчённая pattern-стратегия; "
            "для точной перезаписи укажите transformer_type: structural")
    if not config.advanced.create_backup:
        analysis.recommendations.append(
            "Резервное копирование отключено - убедитесь, что изменения под git")
    return analysis


def select_strategy(config: I18nConfig, files: List[Path]) -> str:
    """Явный transformer_type или результат analyze_project()."""
    requested = config.advanced.transformer_type
    if requested in STRATEGIES:
        return requested
    return analyze_project(config, files).strategy


class I18nTransformer:
    """Один запуск трансформации проекта."""

    def __init__(self, config: I18nConfig):
        self.config = config

    def _discover(self, files: Optional[List[Path]]) -> List[Path]:
        if files is not None:
            return sorted({Path(f) for f in files}, key=lambda p: p.as_posix())
        return discover_files(self.config.src_path, self.config.include, self.config.exclude)

    def _prepare(self, files: List[Path], stats: TransformStats):
        config = self.config
        validator = TextValidator(config.validation)
        stats.warnings.extend(validator.compile_warnings)

        registry = KeyRegistry(config.format, TextValidator(config.validation))
        writer = CatalogWriter(config.output_path, config.format)
        seeded = registry.seed(writer.load(config.source_language))
        if seeded:
            logger.info("Из каталога %s загружено %d ключей", config.source_language, seeded)

        name = select_strategy(config, files)
        strategy = STRATEGIES[name](config, registry, validator)
        logger.info("Стратегия: %s, файлов: %d", name, len(files))
        return strategy, registry, writer

    def run(self, files: Optional[List[Path]] = None,
            dry_run: Optional[bool] = None) -> TransformResult:
        """
        Полный запуск.

        Raises:
            ConfigError: конфигурация невалидна (файлы не тронуты)
        """
        config = ensure_valid(self.config)
        dry_run = config.advanced.dry_run if dry_run is None else dry_run
        files = self._discover(files)
        stats = TransformStats(files_found=len(files))
        strategy, registry, writer = self._prepare(files, stats)
        result = TransformResult(success=False, stats=stats, strategy=strategy.name,
                                 dry_run=dry_run)

        if config.advanced.create_backup and not dry_run:
            try:
                result.backup_path = str(create_backup(config))
            except BackupError as exc:
                stats.errors.append(str(exc))
                logger.error("%s", exc)
                return result

        for path in files:
            self._process(strategy, path, result)

        stats.duplicates_found = registry.duplicates
        stats.skipped = strategy.validator.skip_stats()["reasons"]

        if dry_run:
            result.translation_keys = registry.to_catalog()
            result.success = True
            return result

        try:
            catalog = writer.write_source(config.source_language, registry.to_catalog())
            writer.merge_targets(config.target_languages, catalog.keys())
            if config.advanced.generate_type_definitions:
                writer.write_type_manifest(catalog.keys())
        except CatalogError as exc:
            stats.errors.append(str(exc))
            stats.warnings.extend(writer.warnings)
            logger.error("%s", exc)
            return result

        stats.warnings.extend(writer.warnings)
        result.translation_keys = catalog
        result.success = True
        return result

    def _process(self, strategy: TransformStrategy, path: Path, result: TransformResult) -> None:
        stats = result.stats
        try:
            outcome = strategy.process_file(path)
        except TransformError as exc:
            stats.errors.append(str(exc))
            logger.error("%s", exc)
            return
        except Exception as exc:
            stats.errors.append(f"{path}: {exc}")
            logger.exception("Непредвиденная ошибка при обработке %s", path)
            return

        stats.files_processed += 1
        result.extractions.extend(outcome.extractions)
        rewrite = outcome.rewrite
        if rewrite is None:
            return
        stats.warnings.extend(f"{path}: {w}" for w in rewrite.warnings)
        if not outcome.changed:
            return

        if result.dry_run:
            result.diffs[str(path)] = unified_diff(outcome.original, outcome.content, str(path))
        else:
            try:
                atomic_write(path, outcome.content)
            except OSError as exc:
                stats.errors.append(f"{path}: не удалось записать файл: {exc}")
                logger.error("Не удалось записать %s: %s", path, exc)
                return

        stats.files_modified += 1
        stats.texts_transformed += rewrite.texts
        stats.attributes_transformed += rewrite.attributes
        stats.imports_added += int(rewrite.import_added)
        stats.hooks_added += int(rewrite.hook_added)
        result.modified_files.append(str(path))
        logger.info("%s: %d замен", path, rewrite.replacements)

    def extract_only(self, files: Optional[List[Path]] = None) -> TransformResult:
        """Только проход извлечения: ничего не пишет на диск."""
        config = ensure_valid(self.config)
        files = self._discover(files)
        stats = TransformStats(files_found=len(files))
        strategy, registry, _ = self._prepare(files, stats)
        result = TransformResult(success=True, stats=stats, strategy=strategy.name, dry_run=True)

        for path in files:
            try:
                content = read_source(path)
                descriptor = strategy.describe(content, str(path))
                if not descriptor.needs_translation:
                    stats.files_processed += 1
                    continue
                extractions, _ = strategy.extract(content, str(path))
            except TransformError as exc:
                stats.errors.append(str(exc))
                continue
            stats.files_processed += 1
            result.extractions.extend(extractions)

        stats.duplicates_found = registry.duplicates
        stats.skipped = strategy.validator.skip_stats()["reasons"]
        result.translation_keys = registry.to_catalog()
        return result

    def inspect_file(self, path: Path) -> List[ValidationDetails]:
        """Подробная валидация каждого кандидата одного файла."""
        files = [Path(path)]
        strategy, _, _ = self._prepare(files, TransformStats())
        content = read_source(Path(path))
        return [strategy.validator.validate_with_details(fragment.text)
                for fragment in strategy.find_fragments(content, str(path))]
