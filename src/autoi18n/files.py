"""
Files - поиск исходников, резервные копии и атомарная запись.
"""

import difflib
import fnmatch
import logging
import os
import re
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from .config import I18nConfig
from .exceptions import BackupError

logger = logging.getLogger(__name__)

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """'**/*.{tsx,jsx}' -> ['**/*.tsx', '**/*.jsx']"""
    match = _BRACE_RE.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    result = []
    for option in match.group(1).split(","):
        result.extend(expand_braces(head + option + tail))
    return result


def _expand_all(patterns: Iterable[str]) -> List[str]:
    expanded = []
    for pattern in patterns:
        expanded.extend(expand_braces(pattern))
    return expanded


def matches_glob(rel_path: str, pattern: str) -> bool:
    """
    Сопоставление posix-пути с glob. Ведущий '**/' может совпадать
    с пустым префиксом, чтобы '**/*.tsx' находил и 'App.tsx' в корне.
    """
    if fnmatch.fnmatchcase(rel_path, pattern):
        return True
    while pattern.startswith("**/"):
        pattern = pattern[3:]
        if fnmatch.fnmatchcase(rel_path, pattern):
            return True
    return False


def discover_files(src_dir: Path, include: Iterable[str],
                   exclude: Iterable[str] = ()) -> List[Path]:
    """
    Файлы под src_dir, подходящие под include и не подходящие под exclude.

    Returns:
        Отсортированный по относительному пути список без повторов
    """
    src_dir = Path(src_dir)
    includes = _expand_all(include)
    excludes = _expand_all(exclude)

    def excluded(rel: str) -> bool:
        return any(matches_glob(rel, pattern) for pattern in excludes)

    found = {}
    for dirpath, dirnames, filenames in os.walk(src_dir):
        rel_dir = Path(dirpath).relative_to(src_dir).as_posix()
        prefix = "" if rel_dir == "." else rel_dir + "/"
        # Исключённые папки (node_modules, dist) не обходим
        dirnames[:] = [d for d in dirnames if not excluded(prefix + d + "/")]
        for filename in filenames:
            rel = prefix + filename
            if excluded(rel):
                continue
            if any(matches_glob(rel, pattern) for pattern in includes):
                found[rel] = Path(dirpath) / filename

    return [found[rel] for rel in sorted(found)]


def create_backup(config: I18nConfig, timestamp: Optional[str] = None) -> Path:
    """
    Копирует исходники и каталоги в <backup_dir>/backup-<timestamp>/.

    Raises:
        BackupError: копирование не удалось (запуск прерывается)
    """
    stamp = timestamp or datetime.now().strftime("%Y%m%d-%H%M%S")
    backup_root = config.backup_path / f"backup-{stamp}"
    src = config.src_path
    output = config.output_path

    def ignore_backup(directory: str, names: List[str]) -> List[str]:
        # Папка бэкапов внутри src не должна копироваться сама в себя
        return [n for n in names if (Path(directory) / n).resolve() == config.backup_path]

    try:
        backup_root.mkdir(parents=True, exist_ok=False)
        shutil.copytree(src, backup_root / "src", ignore=ignore_backup)
        if output.exists():
            shutil.copytree(output, backup_root / "locales")
    except (OSError, shutil.Error) as exc:
        raise BackupError(f"Не удалось создать резервную копию: {exc}", backup_root) from exc

    logger.info("Резервная копия создана: %s", backup_root)
    return backup_root


def atomic_write(path: Path, data: str) -> None:
    """Запись через временный файл в той же папке и os.replace."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = path.stat().st_mode & 0o777 if path.exists() else None

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent,
                                         encoding="utf-8", newline="") as tf:
            tmp_name = tf.name
            tf.write(data)
            tf.flush()
            os.fsync(tf.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
        if mode is not None:
            os.chmod(path, mode)
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def unified_diff(before: str, after: str, path: str) -> str:
    return "".join(difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
    ))
