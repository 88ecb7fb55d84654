"""Тесты CLI (autoi18n.manager.main)."""

import json

from autoi18n.manager import build_parser, main


def run_cli(project, *args):
    return main([args[0], "--project-root", str(project), *args[1:]])


class TestParser:

    def test_transform_is_default_command(self):
        args = build_parser().parse_args(["transform", "--dry-run"])
        assert args.command == "transform"
        assert args.dry_run

    def test_bare_options_go_to_transform(self, project, write_source, capsys):
        write_source("App.jsx", "export function App() {\n  return <p>Hello there</p>;\n}\n")
        code = main(["--project-root", str(project), "--dry-run", "--no-backup"])
        assert code == 0
        assert "Dry run" in capsys.readouterr().out


class TestCommands:

    def test_validate_text(self, project, capsys):
        assert run_cli(project, "validate", "--text", "Save Changes") == 0
        assert run_cli(project, "validate", "--text", "100px") == 1
        assert "rule-css-units" in capsys.readouterr().out

    def test_init_creates_config(self, project):
        assert run_cli(project, "init") == 0
        assert (project / "autoi18n.config.yaml").exists()
        # Повторно без --force файл не перезаписывается
        assert run_cli(project, "init") == 1
        assert run_cli(project, "init", "--force") == 0

    def test_config_error_exit_code(self, project, capsys):
        code = run_cli(project, "transform", "-l", "en", "--no-backup")
        assert code == 1
        assert "Ошибки конфигурации" in capsys.readouterr().out

    def test_validate_broken_file_reports_error(self, project, write_source, capsys):
        path = write_source("Broken.tsx", """
            export default function Broken() {
              return <div><p>Hello world</p>;
            }
        """)

        assert run_cli(project, "validate", "--file", str(path)) == 1
        assert "синтаксическая ошибка" in capsys.readouterr().out

    def test_transform_then_validate_and_stats(self, project, write_source, capsys):
        app = write_source("App.jsx", """
            export function App() {
              return <h1>Welcome</h1>;
            }
        """)
        code = run_cli(project, "transform", "-l", "es,fr", "--no-backup", "-t", "pattern")

        assert code == 0
        assert "{t('Welcome')}" in app.read_text(encoding="utf-8")
        locales = project / "src" / "locales"
        assert json.loads((locales / "es.json").read_text(encoding="utf-8")) == {"Welcome": ""}

        assert run_cli(project, "validate") == 0
        assert run_cli(project, "stats") == 0
        out = capsys.readouterr().out
        assert "Каталоги согласованы" in out

    def test_extract_to_json(self, project, write_source, tmp_path):
        write_source("App.jsx", "export function App() {\n  return <p>Hello there</p>;\n}\n")
        output = tmp_path / "report" / "strings.json"

        assert run_cli(project, "extract", "-o", str(output)) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["total"] == 1
        assert data["extractions"][0]["text"] == "Hello there"

    def test_analyze(self, project, write_source, capsys):
        write_source("App.tsx", "export const App = () => null;\n")
        assert run_cli(project, "analyze") == 0
        assert "structural" in capsys.readouterr().out

    def test_stats_without_catalogs(self, project):
        assert run_cli(project, "stats") == 1
