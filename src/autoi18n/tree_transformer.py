"""
Tree Transformer - структурная стратегия на tree-sitter.

Разбирает файл грамматикой TSX (для .ts - TypeScript), обходит дерево и
находит узлы:
    jsx_element / jsx_fragment  -> подряд идущие jsx_text (текст элемента)
    jsx_attribute со строковым значением из списка атрибутов

Замены собираются как байтовые диапазоны и применяются с конца файла.
Привязка t() (хук или обёртка withTranslation) и импорт вставляются
по позициям узлов повторно разобранного дерева.

Файл с синтаксическими ошибками не трогается: TransformError.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

from .components import (
    ComponentDescriptor, ComponentStyle, HOOK_STATEMENT, adapter_export,
    component_name_from_path, extend_named_import, import_statement,
    imports_name, is_anchor_import,
)
from .exceptions import TransformError
from .scanner import (
    CandidateFragment, FragmentKind, already_wrapped, decode_entities,
    kind_for_attribute, translation_call,
)
from .strategy import RewriteResult, TransformStrategy

logger = logging.getLogger(__name__)

TEXT_NODES = ("jsx_text", "html_character_reference")
ELEMENT_NODES = ("jsx_element", "jsx_fragment")
TAG_NODES = ("jsx_opening_element", "jsx_self_closing_element")
FUNCTION_NODES = ("arrow_function", "function_expression", "function")
FUNCTION_DECLARATIONS = ("function_declaration", "generator_function_declaration")
CLASS_DECLARATIONS = ("class_declaration", "abstract_class_declaration", "class")
VARIABLE_DECLARATIONS = ("lexical_declaration", "variable_declaration")

_CONTEXT = 40

_LANGUAGES: Dict[str, Language] = {}


def get_language(file_path: str) -> Language:
    """TSX-грамматика для .tsx/.jsx/.js, TypeScript - для .ts."""
    dialect = "typescript" if Path(file_path).suffix == ".ts" else "tsx"
    if dialect not in _LANGUAGES:
        if dialect == "typescript":
            _LANGUAGES[dialect] = Language(tstypescript.language_typescript())
        else:
            _LANGUAGES[dialect] = Language(tstypescript.language_tsx())
    return _LANGUAGES[dialect]


def walk(node: Node) -> Iterator[Node]:
    """Обход дерева в порядке исходного текста."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _first_error(node: Node) -> Optional[Node]:
    for current in walk(node):
        if current.type == "ERROR" or current.is_missing:
            return current
    return None


def parse(source: bytes, file_path: str) -> Tree:
    tree = Parser(get_language(file_path)).parse(source)
    if tree.root_node.has_error:
        error = _first_error(tree.root_node)
        line = error.start_point[0] + 1 if error is not None else 0
        raise TransformError(file_path, f"синтаксическая ошибка разбора (строка {line})")
    return tree


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8")


def _line_indent(source: bytes, offset: int) -> str:
    start = source.rfind(b"\n", 0, offset) + 1
    line = source[start:offset].decode("utf-8", errors="ignore")
    return line[:len(line) - len(line.lstrip(" \t"))]


def _top_level(root: Node) -> Iterator[Tuple[Optional[Node], Optional[Node]]]:
    """Пары (export_statement или None, объявление/значение)."""
    for child in root.named_children:
        if child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
            yield child, declaration or child.child_by_field_name("value")
        else:
            yield None, child


def _is_default_export(export: Node) -> bool:
    return any(child.type == "default" for child in export.children)


def _unwrap_function(value: Optional[Node]) -> Optional[Node]:
    """Функция из значения: () => ..., function () {}, memo(() => ...)."""
    if value is None:
        return None
    if value.type in FUNCTION_NODES:
        return value
    if value.type == "call_expression":
        arguments = value.child_by_field_name("arguments")
        if arguments is not None:
            for argument in arguments.named_children:
                found = _unwrap_function(argument)
                if found is not None:
                    return found
    return None


def _name_of(node: Node, source: bytes) -> str:
    name = node.child_by_field_name("name")
    return node_text(name, source) if name is not None else ""


def component_functions(root: Node, source: bytes) -> List[Tuple[str, Node, ComponentStyle, bool]]:
    """Верхнеуровневые функции-кандидаты: (имя, узел, стиль, экспортирована)."""
    found = []
    for export, node in _top_level(root):
        if node is None:
            continue
        if node.type in FUNCTION_DECLARATIONS:
            found.append((_name_of(node, source), node, ComponentStyle.FUNCTION, export is not None))
        elif node.type in VARIABLE_DECLARATIONS:
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                function = _unwrap_function(declarator.child_by_field_name("value"))
                if function is not None:
                    found.append((_name_of(declarator, source), function,
                                  ComponentStyle.ARROW, export is not None))
        elif export is not None and node.type in FUNCTION_NODES:
            found.append((_name_of(node, source), node, ComponentStyle.FUNCTION, True))
    return found


def _default_export_name(root: Node, source: bytes) -> str:
    for export, node in _top_level(root):
        if export is not None and node is not None and node.type == "identifier" \
                and _is_default_export(export):
            return node_text(node, source)
    return ""


def infer_component(root: Node, source: bytes, file_path: str) -> Tuple[str, ComponentStyle]:
    """
    Стиль и имя компонента по дереву.

    Экспортируемый класс > экспортируемая функция > переменная с функцией >
    любая функция > имя файла.
    """
    default_name = _default_export_name(root, source)
    for export, node in _top_level(root):
        if node is not None and node.type in CLASS_DECLARATIONS:
            name = _name_of(node, source)
            if export is not None or name == default_name:
                return name, ComponentStyle.CLASS

    functions = component_functions(root, source)
    for name, _, style, exported in functions:
        if exported and style is ComponentStyle.FUNCTION and name:
            return name, style
    arrows = [name for name, _, style, _ in functions if style is ComponentStyle.ARROW]
    if arrows:
        capitalized = [name for name in arrows if name[:1].isupper()]
        return (capitalized or arrows)[0], ComponentStyle.ARROW
    for name, _, style, _ in functions:
        if name:
            return name, style
    return component_name_from_path(file_path), ComponentStyle.FUNCTION


class TreeStrategy(TransformStrategy):
    """Извлечение и перезапись по дереву разбора tree-sitter."""

    name = "structural"

    def describe(self, content: str, file_path: str) -> ComponentDescriptor:
        descriptor = super().describe(content, file_path)
        if not descriptor.needs_translation:
            return descriptor
        source = content.encode("utf-8")
        tree = parse(source, file_path)
        name, style = infer_component(tree.root_node, source, file_path)
        if style is ComponentStyle.CLASS and not self.config.components.support_class_components:
            style = ComponentStyle.FUNCTION
        return replace(descriptor, name=name, style=style)

    # ── Поиск фрагментов ──

    def find_fragments(self, content: str, file_path: str) -> List[CandidateFragment]:
        source = content.encode("utf-8")
        tree = parse(source, file_path)
        fragments = []
        for node in walk(tree.root_node):
            if node.type in ELEMENT_NODES and self.config.transformation.extract_jsx_text:
                fragments.extend(self._text_runs(node, source, file_path))
            elif node.type in TAG_NODES and self.attributes:
                fragments.extend(self._attribute_values(node, source, file_path))
        fragments.sort(key=lambda f: f.start)
        return fragments

    def _text_runs(self, element: Node, source: bytes, file_path: str) -> List[CandidateFragment]:
        """
        Подряд идущие текстовые узлы элемента. Прогон рядом с {выражением}
        пропускается: "Hello {name}!" нельзя переводить по частям.
        """
        fragments = []
        run: List[Node] = []
        previous = None
        for child in element.children:
            if child.type in TEXT_NODES:
                run.append(child)
                continue
            if run and previous != "jsx_expression" and child.type != "jsx_expression":
                fragment = self._run_fragment(run, source, file_path)
                if fragment is not None:
                    fragments.append(fragment)
            run = []
            previous = child.type
        return fragments

    def _run_fragment(self, run: List[Node], source: bytes,
                      file_path: str) -> Optional[CandidateFragment]:
        raw = source[run[0].start_byte:run[-1].end_byte].decode("utf-8")
        text = raw.strip()
        if not text:
            return None
        leading = raw[:len(raw) - len(raw.lstrip())]
        start = run[0].start_byte + len(leading.encode("utf-8"))
        end = start + len(text.encode("utf-8"))
        if self._wrapped(source, start, end):
            return None
        line = source.count(b"\n", 0, start) + 1
        column = start - (source.rfind(b"\n", 0, start) + 1) + 1
        return CandidateFragment(
            text=decode_entities(text), kind=FragmentKind.JSX_TEXT, file=file_path,
            line=line, column=column, start=start, end=end,
        )

    def _attribute_values(self, tag: Node, source: bytes,
                          file_path: str) -> List[CandidateFragment]:
        fragments = []
        for attribute in tag.named_children:
            if attribute.type != "jsx_attribute" or not attribute.named_children:
                continue
            name = node_text(attribute.named_children[0], source)
            if name not in self.attributes:
                continue
            value = next((c for c in attribute.named_children[1:] if c.type == "string"), None)
            if value is None:
                continue
            text = source[value.start_byte + 1:value.end_byte - 1].decode("utf-8")
            if not text.strip() or self._wrapped(source, attribute.start_byte, attribute.end_byte):
                continue
            fragments.append(CandidateFragment(
                text=decode_entities(text), kind=kind_for_attribute(name), file=file_path,
                line=value.start_point[0] + 1, column=value.start_point[1] + 2,
                start=attribute.start_byte, end=attribute.end_byte, attribute=name,
            ))
        return fragments

    @staticmethod
    def _wrapped(source: bytes, start: int, end: int) -> bool:
        before = source[max(0, start - _CONTEXT):start].decode("utf-8", errors="ignore")
        after = source[end:end + _CONTEXT].decode("utf-8", errors="ignore")
        return already_wrapped(before, after)

    # ── Перезапись ──

    def rewrite(self, content: str, file_path: str,
                descriptor: ComponentDescriptor) -> RewriteResult:
        result = RewriteResult(content=content)
        source = content.encode("utf-8")
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

        for start, end, replacement in sorted(edits, key=lambda e: e[0], reverse=True):
            source = source[:start] + replacement.encode("utf-8") + source[end:]

        if result.replacements and not descriptor.has_hook_already:
            source = self._inject_binding(source, file_path, descriptor, result)
        if result.replacements:
            source, result.import_added = self._inject_import(source, file_path, descriptor)

        result.content = source.decode("utf-8")
        return result

    def _inject_binding(self, source: bytes, file_path: str,
                        descriptor: ComponentDescriptor, result: RewriteResult) -> bytes:
        root = parse(source, file_path).root_node
        if descriptor.is_class:
            updated = self._wrap_class_export(root, source, descriptor.name)
        elif self.config.components.add_use_translation_hook:
            updated = self._insert_hook(root, source, descriptor.name)
        else:
            return source

        if updated is None:
            message = f"не найдено место для привязки t() в компоненте {descriptor.name}"
            result.warnings.append(message)
            logger.warning("%s: %s", file_path, message)
            return source
        result.hook_added = True
        return updated

    def _insert_hook(self, root: Node, source: bytes, name: str) -> Optional[bytes]:
        functions = component_functions(root, source)
        target = next((fn for fname, fn, _, _ in functions if fname == name), None)
        if target is None and functions:
            target = functions[0][1]
        if target is None:
            return None

        body = target.child_by_field_name("body")
        if body is None:
            return None
        if body.type == "statement_block":
            statements = [c for c in body.named_children if c.type != "comment"]
            if statements:
                indent = _line_indent(source, statements[0].start_byte)
            else:
                indent = _line_indent(source, body.start_byte) + "  "
            insert_at = body.start_byte + 1
            hook = ("\n" + indent + HOOK_STATEMENT).encode("utf-8")
            return source[:insert_at] + hook + source[insert_at:]

        # Стрелочная функция с телом-выражением: превращаем в блок с return
        base = _line_indent(source, target.start_byte)
        indent = base + "  "
        expression = node_text(body, source)
        block = ("{\n" + indent + HOOK_STATEMENT + "\n" + indent + "return "
                 + expression + ";\n" + base + "}")
        return source[:body.start_byte] + block.encode("utf-8") + source[body.end_byte:]

    def _wrap_class_export(self, root: Node, source: bytes, name: str) -> Optional[bytes]:
        adapter = adapter_export(name).encode("utf-8")
        has_default = False
        class_export = None
        for export, node in _top_level(root):
            if export is None or node is None:
                continue
            if _is_default_export(export):
                has_default = True
                if node.type == "identifier" and node_text(node, source) == name:
                    return source[:export.start_byte] + adapter + source[export.end_byte:]
            if node.type in CLASS_DECLARATIONS and _name_of(node, source) == name:
                class_export = export

        if class_export is not None and _is_default_export(class_export):
            declaration = (class_export.child_by_field_name("declaration")
                           or class_export.child_by_field_name("value"))
            source = source[:class_export.start_byte] + source[declaration.start_byte:]
        elif has_default:
            return None
        return source.rstrip(b"\n") + b"\n\n" + adapter + b"\n"

    def _inject_import(self, source: bytes, file_path: str,
                       descriptor: ComponentDescriptor) -> Tuple[bytes, bool]:
        opts = self.config.components
        if not (descriptor.is_class or opts.add_use_translation_hook):
            return source, False
        name, module = descriptor.binding_name, opts.hook_import
        content = source.decode("utf-8")
        if imports_name(content, name, module):
            return source, False
        extended = extend_named_import(content, name, module)
        if extended is not None:
            return extended.encode("utf-8"), True

        root = parse(source, file_path).root_node
        offset = 0
        leading = True
        for child in root.named_children:
            if child.type == "comment":
                continue
            if child.type == "import_statement":
                leading = False
                module_node = child.child_by_field_name("source")
                if module_node is not None and is_anchor_import(node_text(module_node, source)[1:-1]):
                    offset = child.end_byte
            elif leading and child.type == "expression_statement" \
                    and child.named_children and child.named_children[0].type == "string":
                offset = child.end_byte
            else:
                leading = False

        line = import_statement([name], module).encode("utf-8")
        if offset:
            return source[:offset] + b"\n" + line + source[offset:], True
        return line + b"\n" + source, True
