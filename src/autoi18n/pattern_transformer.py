"""
Pattern Transformer - облегчённая стратегия на регулярных выражениях.

Не строит дерево разбора. Ищет:
- текст сразу после тега и до следующего тега (без выражений {...});
- значения атрибутов из списка (placeholder="...", title='...').

Это осознанная эвристика: она не видит комментарии и строки JS,
зато работает с любым диалектом JSX без парсера. Текст ищется только
после полного тега, поэтому сравнение a>b в коде не принимается за
разметку. Для TypeScript-проектов по умолчанию выбирается
structural-стратегия.
"""

import logging
import re
from typing import List, Optional, Tuple

from .components import (
    ComponentDescriptor, ComponentStyle, HOOK_STATEMENT, adapter_export,
    extend_named_import, import_statement, imports_name, is_anchor_import,
)
from .scanner import (
    CandidateFragment, FragmentKind, TEXT_RUN_RE, already_wrapped,
    attribute_regex, decode_entities, kind_for_attribute, line_col,
    translation_call,
)
from .strategy import RewriteResult, TransformStrategy

logger = logging.getLogger(__name__)

# import ... from 'module'; (в т.ч. многострочный) и import 'module';
IMPORT_RE = re.compile(
    r"^import\s(?:[^;'\"]|\n)*?\bfrom\s*(['\"])(?P<from>[^'\"]+)\1[ \t]*;?[^\n]*\n?"
    r"|^import\s*(['\"])(?P<bare>[^'\"]+)\3[ \t]*;?[^\n]*\n?",
    re.MULTILINE,
)
DIRECTIVE_RE = re.compile(r"\A(?:\s*(['\"])use (?:client|server|strict)\1;?[^\n]*\n)+")

_CONTEXT = 40


def _indent_after(content: str, offset: int, fallback: str) -> str:
    """Отступ первой непустой строки после offset."""
    match = re.compile(r"\n([ \t]*)\S").search(content, offset)
    if match and match.group(1):
        return match.group(1)
    return fallback


def _line_indent(content: str, offset: int) -> str:
    start = content.rfind("\n", 0, offset) + 1
    match = re.match(r"[ \t]*", content[start:])
    return match.group(0) if match else ""


def _matching_paren(content: str, open_pos: int) -> int:
    """Индекс закрывающей скобки для скобки в open_pos (-1, если нет)."""
    pairs = {"(": ")", "{": "}", "[": "]"}
    closing = pairs[content[open_pos]]
    opening = content[open_pos]
    depth = 0
    quote = None
    i = open_pos
    while i < len(content):
        ch = content[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"`":
            quote = ch
        elif ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def import_insert_offset(content: str) -> Tuple[int, bool]:
    """
    Позиция для нового импорта.

    После последнего React-/относительного импорта; иначе после
    директив 'use client' в начале файла; иначе в самом начале.

    Returns:
        (offset, нужен_перевод_строки_перед_импортом)
    """
    offset = 0
    directive = DIRECTIVE_RE.match(content)
    if directive:
        offset = directive.end()
    for match in IMPORT_RE.finditer(content):
        module = match.group("from") or match.group("bare")
        if is_anchor_import(module):
            offset = match.end()
    needs_newline = offset > 0 and content[offset - 1] != "\n"
    return offset, needs_newline


def ensure_import(content: str, name: str, module: str) -> Tuple[str, bool]:
    """Добавляет импорт name из module, если его ещё нет."""
    if imports_name(content, name, module):
        return content, False
    extended = extend_named_import(content, name, module)
    if extended is not None:
        return extended, True
    offset, needs_newline = import_insert_offset(content)
    line = import_statement([name], module) + "\n"
    if needs_newline:
        line = "\n" + line
    return content[:offset] + line + content[offset:], True


class PatternStrategy(TransformStrategy):
    """Извлечение и перезапись регулярными выражениями."""

    name = "pattern"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._attr_re = attribute_regex(self.attributes)

    # ── Поиск фрагментов ──

    def find_fragments(self, content: str, file_path: str) -> List[CandidateFragment]:
        fragments = []
        if self.config.transformation.extract_jsx_text:
            for match in TEXT_RUN_RE.finditer(content):
                raw = match.group(1)
                stripped = raw.strip()
                if not stripped:
                    continue
                start = match.start(1) + (len(raw) - len(raw.lstrip()))
                end = start + len(stripped)
                if already_wrapped(content[max(0, start - _CONTEXT):start], content[end:end + _CONTEXT]):
                    continue
                line, column = line_col(content, start)
                fragments.append(CandidateFragment(
                    text=decode_entities(stripped), kind=FragmentKind.JSX_TEXT, file=file_path,
                    line=line, column=column, start=start, end=end,
                ))

        if self._attr_re is not None:
            for match in self._attr_re.finditer(content):
                text = match.group("text")
                if not text.strip():
                    continue
                if already_wrapped(content[max(0, match.start() - _CONTEXT):match.start()],
                                   content[match.end():match.end() + _CONTEXT]):
                    continue
                attr = match.group("attr")
                line, column = line_col(content, match.start("text"))
                fragments.append(CandidateFragment(
                    text=decode_entities(text), kind=kind_for_attribute(attr), file=file_path,
                    line=line, column=column, start=match.start(), end=match.end(),
                    attribute=attr,
                ))

        fragments.sort(key=lambda f: f.start)
        result = []
        last_end = -1
        for fragment in fragments:
            if fragment.start < last_end:
                continue
            result.append(fragment)
            last_end = fragment.end
        return result

    # ── Перезапись ──

    def rewrite(self, content: str, file_path: str,
                descriptor: ComponentDescriptor) -> RewriteResult:
        result = RewriteResult(content=content)
        edits = []
        for fragment in self.find_fragments(content, file_path):
            if not self.accepts(fragment.text):
                continue
            call = translation_call(self.registry.resolve(fragment.text), descriptor.callee)
            if fragment.is_attribute:
                edits.append((fragment.start, fragment.end, f"{fragment.attribute}={{{call}}}"))
                result.attributes += 1
            else:
                edits.append((fragment.start, fragment.end, f"{{{call}}}"))
                result.texts += 1

        # С конца файла, чтобы смещения оставались верными
        for start, end, replacement in sorted(edits, key=lambda e: e[0], reverse=True):
            content = content[:start] + replacement + content[end:]

        if result.replacements and not descriptor.has_hook_already:
            content = self._inject_binding(content, descriptor, result)
        if result.replacements:
            content, result.import_added = self._inject_import(content, descriptor)

        result.content = content
        return result

    def _inject_import(self, content: str, descriptor: ComponentDescriptor) -> Tuple[str, bool]:
        opts = self.config.components
        if descriptor.is_class or opts.add_use_translation_hook:
            return ensure_import(content, descriptor.binding_name, opts.hook_import)
        return content, False

    def _inject_binding(self, content: str, descriptor: ComponentDescriptor,
                        result: RewriteResult) -> str:
        if descriptor.is_class:
            updated = self._wrap_class_export(content, descriptor.name)
        elif self.config.components.add_use_translation_hook:
            updated = self._insert_hook(content, descriptor)
        else:
            return content

        if updated is None:
            message = f"не найдено место для привязки t() в компоненте {descriptor.name}"
            result.warnings.append(message)
            logger.warning("%s", message)
            return content
        result.hook_added = True
        return updated

    def _insert_hook(self, content: str, descriptor: ComponentDescriptor) -> Optional[str]:
        name = re.escape(descriptor.name)
        if descriptor.style is ComponentStyle.ARROW:
            decl = re.search(r"(?:const|let|var)\s+" + name + r"\b[^=]*=", content)
            if not decl:
                return None
            arrow = re.compile(r"=>\s*|\bfunction\b[^(]*\(").search(content, decl.end())
            if not arrow:
                return None
            if arrow.group(0).startswith("function"):
                paren_close = _matching_paren(content, arrow.end() - 1)
                brace = content.find("{", paren_close) if paren_close >= 0 else -1
                return self._insert_after_brace(content, brace) if brace >= 0 else None
            body_start = arrow.end()
            if body_start < len(content) and content[body_start] == "{":
                return self._insert_after_brace(content, body_start)
            return self._expand_expression_body(content, body_start)

        decl = re.search(r"\bfunction\s+" + name + r"\s*(?:<[^>]*>)?\s*\(", content)
        if not decl:
            decl = re.search(r"\bfunction\s*\(", content)
        if not decl:
            return None
        paren_close = _matching_paren(content, decl.end() - 1)
        if paren_close < 0:
            return None
        brace = content.find("{", paren_close)
        return self._insert_after_brace(content, brace) if brace >= 0 else None

    def _insert_after_brace(self, content: str, brace: int) -> str:
        indent = _indent_after(content, brace, _line_indent(content, brace) + "  ")
        return content[:brace + 1] + "\n" + indent + HOOK_STATEMENT + content[brace + 1:]

    def _expand_expression_body(self, content: str, body_start: int) -> Optional[str]:
        """() => (<div/>)  ->  () => { const { t } = ...; return (<div/>); }"""
        if body_start >= len(content) or content[body_start] != "(":
            return None
        body_end = _matching_paren(content, body_start)
        if body_end < 0:
            return None
        base = _line_indent(content, body_start)
        indent = base + "  "
        expression = content[body_start:body_end + 1]
        block = ("{\n" + indent + HOOK_STATEMENT + "\n"
                 + indent + "return " + expression + ";\n" + base + "}")
        return content[:body_start] + block + content[body_end + 1:]

    def _wrap_class_export(self, content: str, name: str) -> Optional[str]:
        escaped = re.escape(name)
        exported = re.search(r"^export\s+default\s+" + escaped + r"\s*;?[ \t]*$",
                             content, re.MULTILINE)
        if exported:
            return content[:exported.start()] + adapter_export(name) + content[exported.end():]

        declaration = re.search(r"^export\s+default\s+(?=class\s+" + escaped + r"\b)",
                                content, re.MULTILINE)
        if not declaration:
            declaration = re.search(r"^export\s+(?=class\s+" + escaped + r"\b)",
                                    content, re.MULTILINE)
            if declaration and re.search(r"^export\s+default\b", content, re.MULTILINE):
                return None
        if not declaration:
            return None
        keep_named = "default" not in declaration.group(0)
        if not keep_named:
            content = content[:declaration.start()] + content[declaration.end():]
        return content.rstrip("\n") + "\n\n" + adapter_export(name) + "\n"
