"""Project configuration loading: locate tsconfig.json and resolve the source file set."""

from __future__ import annotations

import fnmatch
import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from di_graph.models import AnalysisConfig
from di_graph.scanner.language_map import SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)

_DEFAULT_INCLUDE = ["**/*"]
_DEFAULT_EXCLUDE = ["node_modules", "bower_components", "jspm_packages"]
_WILDCARDS = "*?["

# Strings are matched first so comment markers inside them survive.
_COMMENT_RE = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r'"(?:\\.|[^"\\])*"|,(?=\s*[}\]])')


class DiGraphError(Exception):
    """Base error for the dependency graph analysis."""


class ConfigurationError(DiGraphError):
    """The project configuration could not be located or parsed."""


@dataclass
class ProjectConfig:
    """The parts of a tsconfig.json that decide which files are analyzed.

    Each of ``files``, ``include`` and ``exclude`` is relative to the directory
    of the config that declared it, which differs from ``base_dir`` when the
    list is inherited through ``extends``.
    """
    path: Path
    files: list[str] | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    files_dir: Path | None = None
    include_dir: Path | None = None
    exclude_dir: Path | None = None
    out_dir: Path | None = None
    compiler_options: dict[str, Any] = field(default_factory=dict)

    @property
    def base_dir(self) -> Path:
        return self.path.parent


def parse_jsonc(text: str) -> Any:
    """Parse JSON that may contain comments and trailing commas."""
    def _keep_strings(m: re.Match) -> str:
        token = m.group(0)
        return token if token.startswith('"') else ""

    text = _COMMENT_RE.sub(_keep_strings, text)
    return json.loads(_TRAILING_COMMA_RE.sub(_keep_strings, text))


def load_project_config(config: AnalysisConfig) -> ProjectConfig:
    """Load the project's tsconfig, following ``extends`` chains."""
    root = config.root
    if not root.is_dir():
        raise ConfigurationError(f"Project root not found: {root}")
    return _load_tsconfig(config.tsconfig_path, root, seen=set())


def _load_tsconfig(path: Path, root: Path, seen: set[Path]) -> ProjectConfig:
    resolved = path.resolve()
    if resolved in seen:
        raise ConfigurationError(f"Circular 'extends' chain at {path}")
    seen.add(resolved)

    if not path.is_file():
        raise ConfigurationError(f"Project configuration not found: {path}")
    try:
        raw = parse_jsonc(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Expected an object at the top of {path}")

    project = ProjectConfig(path=path)

    extends = raw.get("extends")
    if extends:
        bases = [extends] if isinstance(extends, str) else list(extends)
        for base_ref in bases:
            base = _load_tsconfig(_resolve_extends(path, base_ref, root), root, seen)
            for key in ("files", "include", "exclude"):
                if getattr(base, key) is not None:
                    setattr(project, key, getattr(base, key))
                    setattr(project, f"{key}_dir", getattr(base, f"{key}_dir"))
            if base.out_dir is not None:
                project.out_dir = base.out_dir
            project.compiler_options.update(base.compiler_options)

    for key in ("files", "include", "exclude"):
        if key in raw:
            value = raw[key]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"'{key}' in {path} must be a list of strings")
            setattr(project, key, value)
            setattr(project, f"{key}_dir", path.parent)

    options = raw.get("compilerOptions", {})
    if not isinstance(options, dict):
        raise ConfigurationError(f"'compilerOptions' in {path} must be an object")
    project.compiler_options.update(options)
    if isinstance(options.get("outDir"), str):
        project.out_dir = path.parent / options["outDir"]

    logger.debug("Loaded project configuration %s", path)
    return project


def _resolve_extends(config_path: Path, ref: str, root: Path) -> Path:
    if ref.startswith((".", "/")):
        candidate = (config_path.parent / ref)
    else:
        candidate = root / "node_modules" / ref
    if candidate.is_dir():
        return candidate / "tsconfig.json"
    if candidate.suffix != ".json" and not candidate.exists():
        return candidate.with_name(candidate.name + ".json")
    return candidate


def collect_source_files(project: ProjectConfig, skip_dirs: list[str] | None = None) -> list[Path]:
    """Resolve the ordered list of source files a project configuration names.

    ``skip_dirs`` only applies below the point where an include pattern starts
    matching, never to the directories the pattern names literally.
    """
    found: dict[Path, None] = {}

    files_dir = project.files_dir or project.base_dir
    for entry in project.files or []:
        path = Path(_join(files_dir, entry))
        if path.is_file():
            found[path] = None
        else:
            logger.warning("File listed in %s does not exist: %s", project.path, entry)

    include = project.include
    if include is None:
        include = [] if project.files is not None else _DEFAULT_INCLUDE
    include_dir = project.include_dir or project.base_dir

    if project.exclude is not None:
        exclude_dir = project.exclude_dir or project.base_dir
        exclude = [_join(exclude_dir, p) for p in project.exclude]
    else:
        exclude = [_join(project.base_dir, p) for p in _DEFAULT_EXCLUDE]
        if project.out_dir is not None:
            exclude.append(_join(project.out_dir, "."))

    globbed: set[Path] = set()
    for pattern in include:
        anchor, rest = _split_glob(include_dir, pattern)
        if rest is None:
            if anchor.is_file() and anchor.suffix in SOURCE_EXTENSIONS:
                globbed.add(anchor)
            continue
        for path in anchor.glob(rest):
            if not path.is_file() or path.suffix not in SOURCE_EXTENSIONS:
                continue
            if _is_excluded(os.path.normpath(str(path)), exclude):
                continue
            if _in_skipped_dir(path.relative_to(anchor), skip_dirs or []):
                continue
            globbed.add(path)

    for path in sorted(globbed):
        found.setdefault(path, None)
    return list(found)


def _join(base: Path, pattern: str) -> str:
    """Anchor a tsconfig path pattern at ``base`` and collapse ``.``/``..`` segments."""
    pattern = pattern.replace("\\", "/").rstrip("/") or "."
    return os.path.normpath(os.path.join(str(base), pattern)).replace(os.sep, "/")


def _split_glob(base: Path, pattern: str) -> tuple[Path, str | None]:
    """Split an include pattern into its literal directory and the glob below it.

    Returns ``(path, None)`` for a pattern naming a single file.
    """
    parts = pattern.replace("\\", "/").split("/")
    for i, part in enumerate(parts):
        if any(ch in part for ch in _WILDCARDS):
            anchor = _join(base, "/".join(parts[:i]))
            return Path(anchor), "/".join(parts[i:])
    literal = Path(_join(base, pattern))
    if literal.is_dir():
        return literal, "**/*"
    return literal, None


def _is_excluded(path: str, patterns: list[str]) -> bool:
    path = path.replace(os.sep, "/")
    for pattern in patterns:
        candidates = [pattern, f"{pattern}/*"]
        if "/**/" in pattern:
            collapsed = pattern.replace("/**/", "/")
            candidates += [collapsed, f"{collapsed}/*"]
        if any(fnmatch.fnmatch(path, c) for c in candidates):
            return True
    return False


def _in_skipped_dir(rel: Path, skip_dirs: list[str]) -> bool:
    for part in rel.parts[:-1]:
        for pattern in skip_dirs:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False
