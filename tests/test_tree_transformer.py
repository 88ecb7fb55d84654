"""Структурная стратегия: разбор tree-sitter и поиск компонентов."""

import pytest

from autoi18n.components import ComponentStyle
from autoi18n.exceptions import TransformError
from autoi18n.scanner import FragmentKind
from autoi18n.tree_transformer import TreeStrategy, infer_component, parse


@pytest.fixture
def tree_strategy(config, registry, validator):
    return TreeStrategy(config, registry, validator)


def infer(source: str, file_path: str = "Widget.tsx"):
    data = source.encode("utf-8")
    return infer_component(parse(data, file_path).root_node, data, file_path)


class TestParse:

    def test_syntax_error_raises(self):
        with pytest.raises(TransformError) as excinfo:
            parse(b"export default function Broken() {\n  return <div><p>Hi</p>;\n}\n", "Broken.tsx")
        assert "Broken.tsx" in str(excinfo.value)

    def test_broken_file_is_reported_not_rewritten(self, tree_strategy, write_source):
        path = write_source("Broken.tsx", """
            export default function Broken() {
              return <div><p>Hello world</p>;
            }
        """)
        before = path.read_text(encoding="utf-8")
        with pytest.raises(TransformError):
            tree_strategy.process_file(path)
        assert path.read_text(encoding="utf-8") == before

    def test_plain_typescript_module(self):
        tree = parse(b"const answer: number = 42;\nexport default answer;\n", "answer.ts")
        assert not tree.root_node.has_error


class TestInferComponent:

    def test_exported_class(self):
        source = "export class Settings extends React.Component {\n  render() { return null; }\n}\n"
        assert infer(source) == ("Settings", ComponentStyle.CLASS)

    def test_class_exported_by_name(self):
        source = "class Modal extends Component {}\nexport default Modal;\n"
        assert infer(source) == ("Modal", ComponentStyle.CLASS)

    def test_unexported_helper_class_is_ignored(self):
        source = ("class Cache {}\n"
                  "export function List() {\n  return <ul />;\n}\n")
        assert infer(source) == ("List", ComponentStyle.FUNCTION)

    def test_forward_ref_arrow(self):
        source = ("const Field = React.forwardRef((props, ref) => {\n"
                  "  return <input ref={ref} />;\n});\n")
        assert infer(source) == ("Field", ComponentStyle.ARROW)

    def test_capitalized_arrow_preferred(self):
        source = ("const toLabel = (x) => String(x);\n"
                  "const Label = () => <span />;\n")
        assert infer(source) == ("Label", ComponentStyle.ARROW)

    def test_fallback_to_file_name(self):
        assert infer("export {};\n", "src/nav-bar.tsx") == ("NavBar", ComponentStyle.FUNCTION)


class TestFragments:

    def test_text_next_to_expression_is_skipped(self, tree_strategy):
        content = ("export function Hi({ name }) {\n"
                   "  return <p>Hello {name}, welcome back</p>;\n}\n")
        assert tree_strategy.find_fragments(content, "Hi.tsx") == []

    def test_fragment_positions_and_kinds(self, tree_strategy):
        content = ("export function Form() {\n"
                   "  return (\n"
                   "    <>\n"
                   "      <label>Your name</label>\n"
                   "      <input aria-label=\"Name field\" title='Full name' />\n"
                   "    </>\n"
                   "  );\n}\n")
        fragments = tree_strategy.find_fragments(content, "Form.tsx")

        assert [(f.text, f.kind) for f in fragments] == [
            ("Your name", FragmentKind.JSX_TEXT),
            ("Name field", FragmentKind.ARIA_LABEL),
            ("Full name", FragmentKind.TITLE),
        ]
        assert (fragments[0].line, fragments[0].column) == (4, 14)

    def test_disabled_attribute_group(self, config, registry, validator):
        config.transformation.extract_aria_labels = False
        strategy = TreeStrategy(config, registry, validator)
        content = "export const A = () => <button aria-label=\"Close dialog\">Close</button>;\n"
        assert [f.text for f in strategy.find_fragments(content, "A.tsx")] == ["Close"]

    def test_expression_attribute_is_ignored(self, tree_strategy):
        content = "export const A = () => <img alt={caption} title=\"Company logo\" />;\n"
        assert [f.attribute for f in tree_strategy.find_fragments(content, "A.tsx")] == ["title"]

    def test_non_ascii_text_rewritten_by_bytes(self, tree_strategy, write_source):
        path = write_source("Ru.tsx", """
            export function Ru() {
              return <p>Привет, мир</p>;
            }
        """)
        content = tree_strategy.process_file(path).content
        assert "<p>{t('Привет, мир')}</p>" in content
