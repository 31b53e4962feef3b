"""
Shared fixtures: temporary TypeScript workspaces laid out like an Nx
monorepo (``libs/kros-<name>/src``).
"""

import textwrap
from pathlib import Path

import pytest


def write(root: Path, relative: str, content: str) -> Path:
    """Write dedented ``content`` to ``root/relative`` and return the path."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return path


@pytest.fixture
def write_file(tmp_path):
    def _write(relative: str, content: str) -> Path:
        return write(tmp_path, relative, content)

    return _write


@pytest.fixture
def workspace(tmp_path):
    """A workspace with a component in module1 and several importers."""
    write(
        tmp_path,
        "libs/kros-module1/src/lib/test-component.ts",
        """
        export class TestComponent {
          doSomething(): void {}
        }

        export interface TestOptions {
          verbose: boolean;
        }
        """,
    )
    write(
        tmp_path,
        "libs/kros-module1/src/lib/another-component.ts",
        """
        export class AnotherComponent {}
        """,
    )
    write(
        tmp_path,
        "libs/kros-module1/src/lib/using-component.ts",
        """
        import { TestComponent } from '@kros-sk/module1';

        export class UsingComponent {
          private testComponent = new TestComponent();
        }
        """,
    )
    write(
        tmp_path,
        "libs/kros-module3/src/lib/mixed.ts",
        """
        import { SomeOtherComponent } from '@kros-sk/module2';
        import { TestComponent, AnotherComponent, TestOptions } from '@kros-sk/module1';
        import * as helpers from '@kros-sk/helpers';

        export const mixed = [SomeOtherComponent, TestComponent, AnotherComponent, helpers];
        """,
    )
    write(
        tmp_path,
        "libs/kros-module3/src/lib/untouched.ts",
        """
        import { AnotherComponent } from '@kros-sk/module1';
        import '@kros-sk/module1/styles.css';

        export const untouched = AnotherComponent;
        """,
    )
    (tmp_path / "libs/kros-module2/src/lib").mkdir(parents=True)
    return tmp_path
