"""Shared fixtures: write throwaway TypeScript projects into tmp_path."""

import json
import textwrap
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"

DEFAULT_TSCONFIG = {
    "compilerOptions": {
        "target": "ES2020",
        "module": "commonjs",
        "experimentalDecorators": True,
        "emitDecoratorMetadata": True,
    },
    "include": ["**/*.ts"],
}


@pytest.fixture
def write_project(tmp_path):
    """Return a factory that writes ``{relative_path: source}`` plus a tsconfig."""
    counter = {"n": 0}

    def _write(files: dict[str, str], tsconfig=DEFAULT_TSCONFIG) -> Path:
        counter["n"] += 1
        root = tmp_path / f"project{counter['n']}"
        root.mkdir()
        if tsconfig is not None:
            text = tsconfig if isinstance(tsconfig, str) else json.dumps(tsconfig)
            (root / "tsconfig.json").write_text(text)
        for rel, source in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(source))
        return root

    return _write


@pytest.fixture
def fixture_project() -> Path:
    return FIXTURES / "di_project"
