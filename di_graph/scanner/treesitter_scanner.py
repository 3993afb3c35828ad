"""Tree-sitter scanner producing the class/interface source model for TypeScript files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from di_graph.models import (
    ClassDeclaration,
    Constructor,
    InterfaceDeclaration,
    Language,
    Marker,
    MarkerArgument,
    Parameter,
    Property,
    SourceUnit,
    TypeRef,
)
from di_graph.scanner.language_map import EXT_TO_LANGUAGE

try:
    from tree_sitter_language_pack import get_parser
except ImportError as _err:
    raise ImportError(
        "tree-sitter-language-pack is required. Install with: "
        "pip install tree-sitter-language-pack"
    ) from _err

logger = logging.getLogger(__name__)

_CLASS_TYPES = {"class_declaration", "abstract_class_declaration"}
_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}
# Wrappers whose inner declaration is still a top-level statement
_WRAPPER_TYPES = {"export_statement", "ambient_declaration"}


def _text(node) -> str:
    return node.text.decode("utf-8", errors="replace") if node is not None and node.text else ""


def _named(node) -> list:
    return [c for c in node.named_children if c.type != "comment"]


class TypeScriptScanner:
    """Parses TypeScript sources with tree-sitter and reads class-level DI structure."""

    def __init__(self):
        self._parser_cache: dict[str, object] = {}

    def scan_files(self, paths: Iterable[Path]) -> list[SourceUnit]:
        units: list[SourceUnit] = []
        for path in paths:
            try:
                units.append(self.scan_file(path))
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", path, e)
        return units

    def scan_file(self, file_path: Path) -> SourceUnit:
        return self.scan_source(file_path.read_bytes(), file_path)

    def scan_source(self, source: bytes | str, file_path: Path) -> SourceUnit:
        if isinstance(source, str):
            source = source.encode("utf-8")
        language, grammar_name = EXT_TO_LANGUAGE.get(
            file_path.suffix, (Language.TYPESCRIPT, "typescript"),
        )
        tree = self._get_parser(grammar_name).parse(source)
        root = tree.root_node

        unit = SourceUnit(file_path=file_path, language=language, has_errors=root.has_error)
        if unit.has_errors:
            logger.warning("Parse errors in %s; keeping the declarations that parsed", file_path)

        aliases = self._collect_import_aliases(root)
        for decl in self._top_level_declarations(root):
            if decl.type in _CLASS_TYPES:
                unit.classes.append(self._read_class(decl, aliases, file_path))
            elif decl.type == "interface_declaration":
                name = _text(decl.child_by_field_name("name"))
                if name:
                    unit.interfaces.append(InterfaceDeclaration(
                        name=name,
                        file_path=file_path,
                        line_number=decl.start_point[0] + 1,
                    ))

        logger.debug(
            "Scanned %s: %d classes, %d interfaces",
            file_path, len(unit.classes), len(unit.interfaces),
        )
        return unit

    # ── Declarations ─────────────────────────────────────────

    def _top_level_declarations(self, root) -> Iterator:
        for child in _named(root):
            yield from self._unwrap(child)

    def _unwrap(self, node) -> Iterator:
        if node.type in _WRAPPER_TYPES:
            for child in _named(node):
                yield from self._unwrap(child)
        elif node.type in _CLASS_TYPES or node.type == "interface_declaration":
            yield node

    def _read_class(self, node, aliases: dict[str, str], file_path: Path) -> ClassDeclaration:
        cls = ClassDeclaration(
            name=_text(node.child_by_field_name("name")) or None,
            file_path=file_path,
            line_number=node.start_point[0] + 1,
            is_abstract=node.type == "abstract_class_declaration",
        )

        for child in node.children:
            if child.type != "class_heritage":
                continue
            for clause in child.children:
                if clause.type != "implements_clause":
                    continue
                for type_node in _named(clause):
                    name = self._symbol_name(type_node, aliases) or _text(type_node)
                    cls.implements.append(name)

        body = node.child_by_field_name("body")
        if body is not None:
            self._read_members(body, cls, aliases)
        return cls

    def _read_members(self, body, cls: ClassDeclaration, aliases: dict[str, str]) -> None:
        # Method decorators are siblings in the class body; field decorators are children.
        pending: list = []
        # Bodiless constructors: overloads, or the only form in ambient declarations.
        signatures: list[Constructor] = []
        for member in body.named_children:
            if member.type == "comment":
                continue
            if member.type == "decorator":
                pending.append(member)
                continue

            decorators = pending + [c for c in member.children if c.type == "decorator"]
            pending = []

            if member.type == "method_definition":
                if _text(member.child_by_field_name("name")) == "constructor":
                    cls.constructors.append(self._read_constructor(member, aliases))
            elif member.type == "method_signature":
                if _text(member.child_by_field_name("name")) == "constructor":
                    signatures.append(self._read_constructor(member, aliases))
            elif member.type == "public_field_definition":
                cls.properties.append(Property(
                    name=_text(member.child_by_field_name("name")),
                    type=self._type_ref(member.child_by_field_name("type"), aliases),
                    markers=self._read_markers(decorators),
                ))

        if not cls.constructors:
            cls.constructors = signatures

    def _read_constructor(self, node, aliases: dict[str, str]) -> Constructor:
        ctor = Constructor(line_number=node.start_point[0] + 1)
        params = node.child_by_field_name("parameters")
        if params is None:
            return ctor
        for param in _named(params):
            if param.type not in _PARAMETER_TYPES:
                continue
            ctor.parameters.append(Parameter(
                name=_text(param.child_by_field_name("pattern")),
                type=self._type_ref(param.child_by_field_name("type"), aliases),
                markers=self._read_markers(
                    [c for c in param.children if c.type == "decorator"]
                ),
            ))
        return ctor

    # ── Types ────────────────────────────────────────────────

    def _type_ref(self, annotation, aliases: dict[str, str]) -> TypeRef:
        if annotation is None:
            return TypeRef()
        inner = _named(annotation)
        if not inner:
            return TypeRef()
        type_node = inner[0]
        return TypeRef(name=self._symbol_name(type_node, aliases), text=_text(type_node))

    def _symbol_name(self, node, aliases: dict[str, str]) -> str | None:
        """Name of the declaration a type node refers to, or None for anonymous types."""
        if node.type == "type_identifier":
            name = _text(node)
            return aliases.get(name, name)
        if node.type == "generic_type":
            target = node.child_by_field_name("name")
            return self._symbol_name(target, aliases) if target is not None else None
        if node.type == "nested_type_identifier":
            return _text(node.child_by_field_name("name")) or None
        if node.type == "parenthesized_type":
            inner = _named(node)
            return self._symbol_name(inner[0], aliases) if inner else None
        return None

    def _collect_import_aliases(self, root) -> dict[str, str]:
        """Map local names of ``import { A as B }`` back to the imported symbol."""
        aliases: dict[str, str] = {}
        stack = [c for c in root.named_children if c.type == "import_statement"]
        while stack:
            node = stack.pop()
            if node.type == "import_specifier":
                name = node.child_by_field_name("name")
                alias = node.child_by_field_name("alias")
                if name is not None and alias is not None:
                    aliases[_text(alias)] = _text(name)
                continue
            stack.extend(node.named_children)
        return aliases

    # ── Markers ──────────────────────────────────────────────

    def _read_markers(self, decorators: list) -> list[Marker]:
        markers: list[Marker] = []
        for decorator in decorators:
            marker = self._read_marker(decorator)
            if marker is not None:
                markers.append(marker)
        return markers

    def _read_marker(self, decorator) -> Marker | None:
        inner = _named(decorator)
        if not inner:
            return None
        expr = inner[0]
        arguments: list[MarkerArgument] = []
        if expr.type == "call_expression":
            args_node = expr.child_by_field_name("arguments")
            if args_node is not None:
                arguments = [
                    MarkerArgument(text=_text(a), is_string_literal=self._is_string_literal(a))
                    for a in _named(args_node)
                ]
            expr = expr.child_by_field_name("function")

        if expr is None:
            return None
        if expr.type == "identifier":
            name = _text(expr)
        elif expr.type == "member_expression":
            name = _text(expr.child_by_field_name("property"))
        else:
            return None
        return Marker(name=name, arguments=arguments) if name else None

    @staticmethod
    def _is_string_literal(node) -> bool:
        if node.type == "string":
            return True
        if node.type == "template_string":
            return not any(c.type == "template_substitution" for c in node.children)
        return False

    def _get_parser(self, grammar_name: str):
        if grammar_name not in self._parser_cache:
            self._parser_cache[grammar_name] = get_parser(grammar_name)
        return self._parser_cache[grammar_name]
