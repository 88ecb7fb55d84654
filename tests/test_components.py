"""Тесты дескриптора компонента и генерации импортов."""

import pytest

from autoi18n.components import (
    ComponentStyle, component_name_from_path, describe_component,
    extend_named_import, imports_name, is_anchor_import,
)


class TestDescriptor:

    def test_exported_class_wins(self, config):
        content = (
            "export function helper() {}\n"
            "export default class Dashboard extends React.Component {\n"
            "  render() { return <h2>Dashboard overview</h2>; }\n"
            "}\n"
        )
        descriptor = describe_component(content, "Dashboard.jsx", config)
        assert descriptor.style is ComponentStyle.CLASS
        assert descriptor.name == "Dashboard"
        assert descriptor.callee == "this.props.t"
        assert descriptor.binding_name == "withTranslation"

    def test_class_with_separate_default_export(self, config):
        content = (
            "class Greeting extends Component {\n"
            "  render() { return <p>Hello there</p>; }\n"
            "}\n\n"
            "export default Greeting;\n"
        )
        assert describe_component(content, "Greeting.jsx", config).style is ComponentStyle.CLASS

    def test_exported_function(self, config):
        content = "export default function App() {\n  return <h1>Welcome</h1>;\n}\n"
        descriptor = describe_component(content, "App.tsx", config)
        assert descriptor.style is ComponentStyle.FUNCTION
        assert descriptor.name == "App"
        assert descriptor.needs_translation
        assert not descriptor.has_binding_already

    def test_arrow_component(self, config):
        content = (
            "const formatDate = (d) => d.toISOString();\n"
            "export const Card: React.FC<Props> = ({ title }) => <div>Read more</div>;\n"
        )
        descriptor = describe_component(content, "Card.tsx", config)
        assert descriptor.style is ComponentStyle.ARROW
        assert descriptor.name == "Card"

    def test_memo_wrapped_arrow(self, config):
        content = "const Item = memo((props) => {\n  return <li>List item</li>;\n});\n"
        descriptor = describe_component(content, "Item.jsx", config)
        assert descriptor.style is ComponentStyle.ARROW
        assert descriptor.name == "Item"

    def test_fallback_name_from_file(self, config):
        descriptor = describe_component("<p>Just markup</p>\n", "user-card.jsx", config)
        assert descriptor.style is ComponentStyle.FUNCTION
        assert descriptor.name == "UserCard"

    def test_class_support_disabled(self, config):
        config.components.support_class_components = False
        content = "export default class Old extends Component {}\n"
        assert describe_component(content, "Old.jsx", config).style is ComponentStyle.FUNCTION

    def test_existing_binding_detected(self, config):
        content = (
            "import { useTranslation } from 'react-i18next';\n"
            "export function App() {\n  const { t } = useTranslation();\n"
            "  return <p>{t('Hi')}</p>;\n}\n"
        )
        descriptor = describe_component(content, "App.tsx", config)
        assert descriptor.has_binding_already
        assert descriptor.has_hook_already
        assert not descriptor.needs_translation

    def test_custom_translation_module(self, config):
        config.components.hook_import = "@/i18n"
        content = "import { useTranslation } from '@/i18n';\nexport function A() {}\n"
        assert describe_component(content, "A.tsx", config).has_binding_already


class TestImports:

    def test_imports_name(self):
        content = "import { Trans, useTranslation } from 'react-i18next';\n"
        assert imports_name(content, "useTranslation", "react-i18next")
        assert not imports_name(content, "withTranslation", "react-i18next")

    def test_extend_named_import(self):
        content = "import { Trans } from 'react-i18next';\n"
        updated = extend_named_import(content, "useTranslation", "react-i18next")
        assert updated == "import { Trans, useTranslation } from 'react-i18next';\n"

    def test_extend_without_matching_import(self):
        assert extend_named_import("import React from 'react';\n", "useTranslation",
                                   "react-i18next") is None

    @pytest.mark.parametrize("module, expected", [
        ("react", True), ("react-dom/client", True), ("./Button", True),
        ("../utils", True), ("@/hooks", True), ("lodash", False),
    ])
    def test_anchor_imports(self, module, expected):
        assert is_anchor_import(module) is expected


@pytest.mark.parametrize("path, expected", [
    ("src/Button.tsx", "Button"),
    ("src/user-card.jsx", "UserCard"),
    ("src/profile/index.tsx", "Profile"),
])
def test_component_name_from_path(path, expected):
    assert component_name_from_path(path) == expected
