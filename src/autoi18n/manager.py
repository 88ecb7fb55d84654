#!/usr/bin/env python3
"""
Manager - CLI react-auto-i18n.

Команды:
  transform  Извлекает тексты, оборачивает их в t() и обновляет каталоги (по умолчанию)
  init       Создаёт файл конфигурации с настройками по умолчанию
  validate   Проверяет каталоги, отдельный текст (--text) или файл (--file)
  extract    Только извлечение строк, без изменения файлов
  analyze    Анализ проекта и выбор стратегии
  stats      Покрытие переводами по языкам

Использование:
  autoi18n                              # transform с конфигом из текущей папки
  autoi18n transform -s ./src -l es,fr --dry-run --diff
  autoi18n validate --text "Save Changes"
  python -m autoi18n stats
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from .catalog import CatalogWriter
from .config import load_config, sample_config, save_config
from .exceptions import AutoI18nError, ConfigError
from .json_validator import CatalogValidator, Severity
from .scanner import export_extractions
from .transformer import I18nTransformer, analyze_project
from .validator import TextValidator, ValidationDetails

console = Console()

COMMANDS = ("transform", "init", "validate", "extract", "analyze", "stats")
DEFAULT_CONFIG_NAME = "autoi18n.config.yaml"
MAX_LISTED = 20


def setup_logging(verbose: bool = False) -> None:
    """Логи - в stderr через RichHandler, вывод команд - в stdout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False,
                              rich_tracebacks=verbose)],
        force=True,
    )


def _overrides(args) -> Dict[str, Any]:
    """Параметры командной строки поверх файла конфигурации."""
    overrides: Dict[str, Any] = {}
    advanced: Dict[str, Any] = {}
    if getattr(args, "src", None):
        overrides["src_dir"] = args.src
    if getattr(args, "output", None) and args.command == "transform":
        overrides["output_dir"] = args.output
    if getattr(args, "languages", None):
        overrides["target_languages"] = args.languages
    if getattr(args, "source_language", None):
        overrides["source_language"] = args.source_language
    if getattr(args, "key_strategy", None):
        overrides["format"] = {"key_strategy": args.key_strategy}
    if getattr(args, "transformer", None):
        advanced["transformer_type"] = args.transformer
    if getattr(args, "dry_run", False):
        advanced["dry_run"] = True
    if getattr(args, "no_backup", False):
        advanced["create_backup"] = False
    if getattr(args, "no_types", False):
        advanced["generate_type_definitions"] = False
    if advanced:
        overrides["advanced"] = advanced
    return overrides


def _load(args):
    return load_config(
        path=Path(args.config) if args.config else None,
        project_root=Path(args.project_root) if args.project_root else None,
        overrides=_overrides(args),
    )


def _print_list(title: str, items: List[str], style: str) -> None:
    if not items:
        return
    console.print(f"\n[bold {style}]{title} ({len(items)}):[/bold {style}]")
    for item in items[:MAX_LISTED]:
        console.print(f"  • {item}", markup=False, highlight=False)
    if len(items) > MAX_LISTED:
        console.print(f"  ... и ещё {len(items) - MAX_LISTED}")


def cmd_transform(args) -> int:
    """Команда: трансформация проекта."""
    config = _load(args)
    result = I18nTransformer(config).run()
    stats = result.stats

    title = "Dry run: файлы не изменены" if result.dry_run else "Трансформация завершена"
    color = "green" if result.success else "red"
    console.print(Panel(f"[bold {color}]{title}[/bold {color}]", expand=False))

    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Метрика", style="cyan", no_wrap=True)
    table.add_column("Значение", justify="right")
    table.add_row("Стратегия", result.strategy)
    table.add_row("Файлов найдено", str(stats.files_found))
    table.add_row("Файлов обработано", str(stats.files_processed))
    table.add_row("Файлов изменено", str(stats.files_modified))
    table.add_row("Текстов обёрнуто", str(stats.texts_transformed))
    table.add_row("Атрибутов обёрнуто", str(stats.attributes_transformed))
    table.add_row("Импортов добавлено", str(stats.imports_added))
    table.add_row("Хуков/обёрток добавлено", str(stats.hooks_added))
    table.add_row("Повторов текста", str(stats.duplicates_found))
    table.add_row("Ключей в каталоге", str(len(result.translation_keys)))
    if result.backup_path:
        table.add_row("Резервная копия", result.backup_path)
    console.print(table)

    if args.verbose and stats.skipped:
        skipped = Table(title="Отклонённые фрагменты", box=box.SIMPLE)
        skipped.add_column("Причина", style="dim")
        skipped.add_column("Кол-во", justify="right")
        for reason, count in sorted(stats.skipped.items(), key=lambda x: -x[1]):
            skipped.add_row(reason, str(count))
        console.print(skipped)

    _print_list("Изменённые файлы" if not result.dry_run else "Будут изменены",
                result.modified_files, "cyan")
    if result.dry_run and args.diff:
        for diff in result.diffs.values():
            console.print(Syntax(diff, "diff", theme="ansi_dark"))
    _print_list("Предупреждения", stats.warnings, "yellow")
    _print_list("Ошибки", stats.errors, "red")
    return 0 if result.success else 1


def cmd_init(args) -> int:
    """Команда: создание конфигурации."""
    root = Path(args.project_root) if args.project_root else Path.cwd()
    target = Path(args.output) if args.output else root / DEFAULT_CONFIG_NAME
    if target.exists() and not args.force:
        console.print(f"[yellow]Файл {target} уже существует (используйте --force)[/yellow]")
        return 1
    save_config(sample_config(), target)
    console.print(f"[green]Конфигурация создана:[/green] {target}")
    return 0


def _print_details(details: ValidationDetails) -> None:
    status = "[green]переводимый[/green]" if details.valid else "[red]отклонён[/red]"
    console.print(f"\n  {details.text!r}: {status}", highlight=False)
    for label, items, style in (("Ошибки", details.errors, "red"),
                                ("Предупреждения", details.warnings, "yellow"),
                                ("Инфо", details.info, "blue"),
                                ("Подсказки", details.suggestions, "dim")):
        for item in items:
            console.print(f"    [{style}]{label}:[/{style}] {item}", highlight=False)


def cmd_validate(args) -> int:
    """Команда: валидация текста, файла или каталогов."""
    config = _load(args)

    if args.text is not None:
        details = TextValidator(config.validation).validate_with_details(args.text)
        _print_details(details)
        return 0 if details.valid else 1

    if args.file:
        results = I18nTransformer(config).inspect_file(Path(args.file))
        table = Table(title=f"Кандидаты: {args.file}", box=box.ROUNDED)
        table.add_column("Текст", overflow="fold")
        table.add_column("Статус", justify="center")
        table.add_column("Детали", style="dim", overflow="fold")
        for details in results:
            status = "✅" if details.valid else "❌"
            notes = details.errors + details.warnings + details.suggestions
            table.add_row(details.text, status, "; ".join(notes))
        console.print(table)
        return 0

    validator = CatalogValidator(config.output_path, config.source_language)
    try:
        issues = validator.validate_all()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1

    table = Table(title="Проверка каталогов", box=box.ROUNDED)
    table.add_column("Язык", style="cyan")
    table.add_column("Ключей", justify="right")
    table.add_column("Ошибки", justify="right", style="red")
    table.add_column("Предупреждения", justify="right", style="yellow")
    table.add_column("Ожидают перевода", justify="right")
    for lang in sorted(validator.translations):
        table.add_row(lang, str(len(validator.translations[lang])),
                      str(validator.count(Severity.ERROR, lang)),
                      str(validator.count(Severity.WARNING, lang)),
                      str(validator.count(Severity.INFO, lang)))
    console.print(table)

    shown = [f"[{i.language}] {i.key}: {i.message}" for i in issues
             if i.severity is not Severity.INFO]
    _print_list("Проблемы", shown, "red")
    errors = validator.count(Severity.ERROR)
    if errors:
        console.print(f"[red]❌ Валидация не пройдена: {errors} ошибок[/red]")
        return 1
    console.print("[green]✅ Каталоги согласованы[/green]")
    return 0


def cmd_extract(args) -> int:
    """Команда: извлечение строк без изменения файлов."""
    config = _load(args)
    result = I18nTransformer(config).extract_only()

    if args.output:
        path = export_extractions(result.extractions, Path(args.output))
        console.print(f"[green]Сохранено {len(result.extractions)} строк:[/green] {path}")
    else:
        table = Table(title="Извлечённые строки", box=box.ROUNDED)
        table.add_column("Файл", style="dim", overflow="fold")
        table.add_column("Строка", justify="right")
        table.add_column("Вид")
        table.add_column("Ключ", style="cyan", overflow="fold")
        for e in result.extractions:
            table.add_row(e.file, str(e.line), e.kind, e.key)
        console.print(table)

    console.print(f"Уникальных ключей: {len(result.translation_keys)}, "
                  f"повторов: {result.stats.duplicates_found}")
    _print_list("Ошибки", result.stats.errors, "red")
    return 0 if not result.stats.errors else 1


def cmd_analyze(args) -> int:
    """Команда: анализ проекта."""
    config = _load(args)
    analysis = analyze_project(config)

    table = Table(title="Анализ проекта", box=box.ROUNDED, show_header=False)
    table.add_column("Параметр", style="cyan")
    table.add_column("Значение")
    table.add_row("Тип проекта", analysis.project_type)
    table.add_row("Стратегия", analysis.strategy)
    table.add_row("tsconfig.json", "да" if analysis.has_tsconfig else "нет")
    table.add_row("typescript в package.json", "да" if analysis.has_typescript_dependency else "нет")
    table.add_row("TS-файлов", str(len(analysis.ts_files)))
    table.add_row("JS-файлов", str(len(analysis.js_files)))
    console.print(table)
    _print_list("Рекомендации", analysis.recommendations, "yellow")
    return 0


def cmd_stats(args) -> int:
    """Команда: статистика каталогов."""
    config = _load(args)
    writer = CatalogWriter(config.output_path, config.format)
    locales = writer.list_locales()
    if config.source_language not in locales:
        console.print(f"\n  Каталоги переводов не найдены: {config.output_path}")
        return 1

    table = Table(title="📊 Статистика переводов", box=box.ROUNDED)
    table.add_column("Язык", style="cyan")
    table.add_column("Всего", justify="right")
    table.add_column("Переведено", justify="right")
    table.add_column("Ожидают", justify="right")
    table.add_column("Покрытие", justify="right")
    for locale in locales:
        if locale == config.source_language:
            continue
        stats = writer.get_stats(locale, config.source_language)
        color = "green" if stats["coverage"] >= 90 else "yellow" if stats["coverage"] >= 50 else "red"
        table.add_row(locale, str(stats["total"]), str(stats["translated"]),
                      str(stats["pending"]), f"[{color}]{stats['coverage']}%[/{color}]")
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Строит парсер аргументов."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-c", "--config", default="", help="Файл конфигурации (YAML/JSON)")
    common.add_argument("--project-root", default="", help="Корень проекта")
    common.add_argument("-v", "--verbose", action="store_true", help="Подробный вывод")

    parser = argparse.ArgumentParser(
        prog="autoi18n",
        description="Автоматическая интернационализация React-компонентов (react-i18next)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  # Трансформация с конфигом по умолчанию
  autoi18n

  # Просмотр изменений без записи
  autoi18n transform --dry-run --diff

  # Проверка каталогов
  autoi18n validate
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Команда")

    # === transform ===
    p_tr = subparsers.add_parser("transform", parents=[common], help="Трансформировать проект")
    p_tr.add_argument("-s", "--src", default="", help="Директория исходников")
    p_tr.add_argument("-o", "--output", default="", help="Директория каталогов")
    p_tr.add_argument("-l", "--languages", default="", help="Целевые языки через запятую")
    p_tr.add_argument("--source-language", default="", help="Исходный язык")
    p_tr.add_argument("-t", "--transformer", choices=["auto", "structural", "pattern"],
                      help="Стратегия трансформации")
    p_tr.add_argument("-k", "--key-strategy", choices=["text", "hash", "path", "custom"],
                      help="Стратегия генерации ключей")
    p_tr.add_argument("--dry-run", action="store_true", help="Ничего не записывать")
    p_tr.add_argument("--diff", action="store_true", help="Показать diff (с --dry-run)")
    p_tr.add_argument("--no-backup", action="store_true", help="Без резервной копии")
    p_tr.add_argument("--no-types", action="store_true", help="Не генерировать types.ts")

    # === init ===
    p_init = subparsers.add_parser("init", parents=[common], help="Создать конфигурацию")
    p_init.add_argument("-o", "--output", default="", help="Путь к файлу конфигурации")
    p_init.add_argument("--force", action="store_true", help="Перезаписать существующий файл")

    # === validate ===
    p_val = subparsers.add_parser("validate", parents=[common], help="Проверить каталоги/текст/файл")
    group = p_val.add_mutually_exclusive_group()
    group.add_argument("--text", default=None, help="Проверить один текст")
    group.add_argument("--file", default="", help="Проверить кандидатов в файле")

    # === extract ===
    p_ext = subparsers.add_parser("extract", parents=[common], help="Извлечь строки без изменений")
    p_ext.add_argument("-o", "--output", default="", help="JSON-файл для результата")
    p_ext.add_argument("-t", "--transformer", choices=["auto", "structural", "pattern"],
                       help="Стратегия извлечения")

    # === analyze ===
    subparsers.add_parser("analyze", parents=[common], help="Анализ проекта")

    # === stats ===
    subparsers.add_parser("stats", parents=[common], help="Статистика каталогов")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Точка входа CLI."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help")):
        argv = ["transform"] + argv

    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    commands = {
        "transform": cmd_transform,
        "init": cmd_init,
        "validate": cmd_validate,
        "extract": cmd_extract,
        "analyze": cmd_analyze,
        "stats": cmd_stats,
    }
    try:
        return commands[args.command](args)
    except ConfigError as exc:
        console.print("[bold red]Ошибки конфигурации:[/bold red]")
        for error in exc.errors:
            console.print(f"  • {error}", markup=False, highlight=False)
        return 1
    except AutoI18nError as exc:
        console.print("[bold red]Ошибка:[/bold red]")
        console.print(f"  {exc}", markup=False, highlight=False, soft_wrap=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
