"""
Components - описание компонента в файле и код привязки перевода.

Для каждого файла строится ComponentDescriptor:
    стиль объявления  -> function | arrow | class
    has_binding_already -> есть ли импорт из модуля перевода
    needs_translation -> есть ли хотя бы один переводимый фрагмент

От дескриптора зависит, что вставит проход перезаписи:
    function/arrow -> import { useTranslation } + const { t } = useTranslation();
    class          -> import { withTranslation } + export default withTranslation()(Name);
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from .config import I18nConfig
from .scanner import has_extractable_text
from .validator import TextValidator

HOOK_NAME = "useTranslation"
ADAPTER_NAME = "withTranslation"
HOOK_STATEMENT = "const { t } = useTranslation();"

_EXPORTED_CLASS_RE = re.compile(
    r"^export\s+(?:default\s+)?class\s+([A-Za-z_$][\w$]*)", re.MULTILINE)
_CLASS_RE = re.compile(
    r"^class\s+([A-Za-z_$][\w$]*)\s+extends\s+(?:React\.)?(?:Pure)?Component\b", re.MULTILINE)
_EXPORTED_FUNCTION_RE = re.compile(
    r"^export\s+(?:default\s+)?(?:async\s+)?function\s+([A-Za-z_$][\w$]*)", re.MULTILINE)
_FUNCTION_RE = re.compile(
    r"^(?:async\s+)?function\s+([A-Za-z_$][\w$]*)", re.MULTILINE)
_ARROW_RE = re.compile(
    r"^(?:export\s+)?(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*(?::[^=\n]+)?=\s*"
    r"(?:(?:React\.)?(?:memo|forwardRef)\s*\(\s*)?"
    r"(?:async\s+)?(?:function\b|\([^()]*(?:\([^()]*\)[^()]*)*\)\s*(?::[^=\n]+)?=>|[\w$]+\s*=>)",
    re.MULTILINE)
_DEFAULT_EXPORT_NAME_RE = re.compile(r"^export\s+default\s+([A-Za-z_$][\w$]*)\s*;?\s*$",
                                     re.MULTILINE)
_HOOK_CALL_RE = re.compile(r"\b" + HOOK_NAME + r"\s*\(")
_ADAPTER_CALL_RE = re.compile(r"\b" + ADAPTER_NAME + r"\s*\(\s*[^)]*\)\s*\(")


class ComponentStyle(Enum):
    FUNCTION = "function"
    ARROW = "arrow"
    CLASS = "class"


@dataclass
class ComponentDescriptor:
    """Метаданные компонента одного файла."""
    name: str
    style: ComponentStyle
    has_binding_already: bool = False
    has_hook_already: bool = False
    needs_translation: bool = False

    @property
    def is_class(self) -> bool:
        return self.style is ComponentStyle.CLASS

    @property
    def binding_name(self) -> str:
        return ADAPTER_NAME if self.is_class else HOOK_NAME

    @property
    def callee(self) -> str:
        """Выражение, через которое вызывается перевод внутри компонента."""
        return "this.props.t" if self.is_class else "t"


def component_name_from_path(file_path: str) -> str:
    """Button.tsx -> Button, user-card.jsx -> UserCard, index.tsx -> папка."""
    path = Path(file_path)
    stem = path.stem
    if stem == "index" and path.parent.name:
        stem = path.parent.name
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", stem) if p]
    name = "".join(p[:1].upper() + p[1:] for p in parts)
    if not name or name[0].isdigit():
        name = "Component" + name
    return name


def _imports_module(content: str, module: str) -> bool:
    quoted = r"['\"]" + re.escape(module) + r"['\"]"
    return bool(re.search(r"\bfrom\s+" + quoted, content)
                or re.search(r"\bimport\s+" + quoted, content)
                or re.search(r"\brequire\(\s*" + quoted + r"\s*\)", content))


def infer_style(content: str, file_path: str = "") -> ComponentStyle:
    return _infer(content, file_path)[1]


def _infer(content: str, file_path: str):
    match = _EXPORTED_CLASS_RE.search(content)
    if match:
        return match.group(1), ComponentStyle.CLASS
    match = _CLASS_RE.search(content)
    if match:
        exported = _DEFAULT_EXPORT_NAME_RE.search(content)
        if exported and exported.group(1) == match.group(1):
            return match.group(1), ComponentStyle.CLASS
    match = _EXPORTED_FUNCTION_RE.search(content)
    if match:
        return match.group(1), ComponentStyle.FUNCTION
    arrows = _ARROW_RE.findall(content)
    if arrows:
        capitalized = [a for a in arrows if a[:1].isupper()]
        return (capitalized or arrows)[0], ComponentStyle.ARROW
    match = _FUNCTION_RE.search(content)
    if match:
        return match.group(1), ComponentStyle.FUNCTION
    return component_name_from_path(file_path), ComponentStyle.FUNCTION


def describe_component(content: str, file_path: str, config: I18nConfig,
                       validator: Optional[TextValidator] = None) -> ComponentDescriptor:
    """
    Строит дескриптор по тексту файла (регулярные выражения).

    Приоритет: экспортируемый класс > экспортируемая функция >
    переменная со стрелочной функцией > функция по имени файла.
    """
    name, style = _infer(content, file_path)
    if style is ComponentStyle.CLASS and not config.components.support_class_components:
        style = ComponentStyle.FUNCTION

    module = config.components.hook_import
    validator = validator or TextValidator(config.validation)
    return ComponentDescriptor(
        name=name,
        style=style,
        has_binding_already=_imports_module(content, module),
        has_hook_already=bool(_HOOK_CALL_RE.search(content) if style is not ComponentStyle.CLASS
                              else _ADAPTER_CALL_RE.search(content)),
        needs_translation=has_extractable_text(
            content, validator,
            attributes=config.allowed_attributes(),
            include_text=config.transformation.extract_jsx_text,
        ),
    )


# ── Генерация кода привязки ──

def import_statement(names: Iterable[str], module: str) -> str:
    return f"import {{ {', '.join(names)} }} from '{module}';"


def adapter_export(name: str) -> str:
    return f"export default {ADAPTER_NAME}()({name});"


def imports_name(content: str, name: str, module: str) -> bool:
    """Импортировано ли имя name из модуля module."""
    pattern = (r"\bimport\s*(?:type\s+)?(?:[\w$]+\s*,\s*)?\{[^}]*\b" + re.escape(name)
               + r"\b[^}]*\}\s*from\s*['\"]" + re.escape(module) + r"['\"]")
    return re.search(pattern, content) is not None


def extend_named_import(content: str, name: str, module: str) -> Optional[str]:
    """
    Добавляет name в существующий именованный импорт из module.

    Returns:
        Новый текст или None, если подходящего импорта нет
    """
    pattern = re.compile(r"(\bimport\s*(?:[\w$]+\s*,\s*)?\{)([^}]*)(\}\s*from\s*['\"]"
                         + re.escape(module) + r"['\"])")
    match = pattern.search(content)
    if not match:
        return None
    names = match.group(2).rstrip()
    separator = ", " if names.strip() and not names.endswith(",") else " "
    updated = f"{match.group(1)}{names}{separator}{name} {match.group(3)}"
    return content[:match.start()] + updated + content[match.end():]


def is_anchor_import(module: str) -> bool:
    """Импорт, после которого вставляется наш: React-модули и относительные пути."""
    return ("react" in module.lower() or module.startswith("@/")
            or module.startswith("./") or module.startswith("../"))
