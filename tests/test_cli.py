import json
import importlib.util
from pathlib import Path

import pytest
from click.testing import CliRunner

from tsmover.cli import cli, main

from .conftest import write

SOURCE = "libs/kros-module1/src/lib/test-component.ts"
TARGET_DIR = "libs/kros-module2/src/lib/"

runner = CliRunner()


class TestMoveFileCommand:
    def test_move_with_explicit_modules(self, workspace):
        result = runner.invoke(
            cli,
            [
                "move-file",
                str(workspace / SOURCE),
                TARGET_DIR,
                "--workspace-root",
                str(workspace),
                "--old-module",
                "@kros-sk/module1",
                "--new-module",
                "@kros-sk/module2",
            ],
        )
        assert result.exit_code == 0, result.output
        assert (workspace / TARGET_DIR / "test-component.ts").exists()
        assert "Exported names: TestComponent, TestOptions" in result.output
        assert "Updated 3 import(s) in 2 of 4 file(s); 0 file(s) skipped." in result.output
        assert "Done." in result.output

    def test_prompts_with_guessed_modules(self, workspace):
        result = runner.invoke(
            cli,
            [
                "move-file",
                str(workspace / SOURCE),
                TARGET_DIR,
                "--workspace-root",
                str(workspace),
                "--scope",
                "@kros-sk",
                "--folder-prefix",
                "kros-",
            ],
            input="\n\n",
        )
        assert result.exit_code == 0, result.output
        assert "[@kros-sk/module1]" in result.output
        assert "[@kros-sk/module2]" in result.output
        text = (workspace / "libs/kros-module1/src/lib/using-component.ts").read_text(encoding="utf-8")
        assert "from '@kros-sk/module2'" in text

    def test_dry_run(self, workspace):
        result = runner.invoke(
            cli,
            [
                "move-file",
                str(workspace / SOURCE),
                TARGET_DIR,
                "--workspace-root",
                str(workspace),
                "--old-module",
                "@kros-sk/module1",
                "--new-module",
                "@kros-sk/module2",
                "--dry-run",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Would update 3 import(s)" in result.output
        assert (workspace / SOURCE).exists()

    def test_rejects_non_typescript_source(self, workspace):
        source = write(workspace, "libs/kros-module1/src/lib/readme.md", "# hi\n")
        result = runner.invoke(
            cli,
            ["move-file", str(source), TARGET_DIR, "--workspace-root", str(workspace)],
        )
        assert result.exit_code == 2
        assert "TypeScript" in result.output

    def test_no_exports_is_an_error(self, workspace):
        source = write(workspace, "libs/kros-module1/src/lib/internal.ts", "const a = 1;\n")
        result = runner.invoke(
            cli,
            [
                "move-file",
                str(source),
                TARGET_DIR,
                "--workspace-root",
                str(workspace),
                "--old-module",
                "@kros-sk/module1",
                "--new-module",
                "@kros-sk/module2",
            ],
        )
        assert result.exit_code == 1
        assert "No exported declarations" in result.output
        assert source.exists()

    def test_empty_module_names_are_rejected(self, workspace):
        result = runner.invoke(
            cli,
            ["move-file", str(workspace / SOURCE), TARGET_DIR, "--workspace-root", str(workspace)],
            input="\n\n",
        )
        assert result.exit_code == 2
        assert "Module names are required" in result.output


class TestMain:
    def test_errors_are_printed_and_exit_nonzero(self, workspace, capsys):
        source = write(workspace, "libs/kros-module1/src/lib/internal.ts", "const a = 1;\n")
        with pytest.raises(SystemExit) as excinfo:
            main(
                [
                    "move-file",
                    str(source),
                    TARGET_DIR,
                    "--workspace-root",
                    str(workspace),
                    "--old-module",
                    "@kros-sk/module1",
                    "--new-module",
                    "@kros-sk/module2",
                ]
            )
        assert excinfo.value.code == 1
        assert "Error: No exported declarations" in capsys.readouterr().err
        assert source.exists()

    def test_usage_errors_exit_with_two(self, workspace, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["update-imports", "A", "--workspace-root", str(workspace / "missing"), "--old-module", "a", "--new-module", "b"])
        assert excinfo.value.code == 2
        assert "does not exist" in capsys.readouterr().err


class TestOtherCommands:
    def test_update_imports(self, workspace):
        result = runner.invoke(
            cli,
            [
                "update-imports",
                "AnotherComponent",
                "--old-module",
                "@kros-sk/module1",
                "--new-module",
                "@kros-sk/shared",
                "--workspace-root",
                str(workspace),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Updated 2 import(s) in 2 of 5 file(s)" in result.output

    def test_update_imports_reports_skipped_files(self, workspace):
        write(workspace, "libs/kros-module3/src/lib/broken.ts", "import { from ;\n")
        result = runner.invoke(
            cli,
            [
                "update-imports",
                "AnotherComponent",
                "--old-module",
                "@kros-sk/module1",
                "--new-module",
                "@kros-sk/shared",
                "--workspace-root",
                str(workspace),
            ],
        )
        assert result.exit_code == 1
        assert "1 file(s) skipped" in result.output

    def test_exports(self, workspace):
        result = runner.invoke(cli, ["exports", str(workspace / SOURCE)])
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["TestComponent\tclass", "TestOptions\tinterface"]

    def test_list_modules(self, workspace):
        result = runner.invoke(
            cli,
            ["list-modules", "--workspace-root", str(workspace), "--scope", "@kros-sk", "--folder-prefix", "kros-"],
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["@kros-sk/module1", "@kros-sk/module2", "@kros-sk/module3"]


def load_bridge():
    path = Path(__file__).resolve().parent.parent / "python" / "move_ts_file.py"
    spec = importlib.util.spec_from_file_location("move_ts_file", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestEditorBridge:
    def test_moves_and_prints_report(self, workspace, capsys):
        payload = {
            "workspace_root": str(workspace),
            "source": SOURCE,
            "target": TARGET_DIR + "test-component.ts",
            "old_module": "@kros-sk/module1",
            "new_module": "@kros-sk/module2",
        }
        assert load_bridge().main([json.dumps(payload)]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["files_changed"] == 2
        assert report["bindings_changed"] == 3
        assert report["moved_symbols"] == ["TestComponent", "TestOptions"]

    @pytest.mark.parametrize("argv", [[], ["not json"], ['{"workspace_root": "."}']])
    def test_bad_payload(self, argv):
        assert load_bridge().main(argv) == 2

    def test_operation_error(self, workspace, capsys):
        source = write(workspace, "libs/kros-module1/src/lib/internal.ts", "const a = 1;\n")
        payload = {
            "workspace_root": str(workspace),
            "source": str(source),
            "target": TARGET_DIR + "internal.ts",
            "old_module": "@kros-sk/module1",
            "new_module": "@kros-sk/module2",
        }
        assert load_bridge().main([json.dumps(payload)]) == 1
        assert "No exported declarations" in capsys.readouterr().err
