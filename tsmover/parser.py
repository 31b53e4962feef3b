"""
Parse TypeScript files into :class:`~tsmover.model.SourceUnit` objects.

Parsing uses tree-sitter with the grammars shipped by
``tree-sitter-typescript`` (``.tsx`` files get the TSX grammar).  Only the
top-level import statements are turned into model objects; the syntax tree
itself stays attached to the unit for the export extractor.

tree-sitter parsers are not safe to share between threads, so every thread
keeps its own parser per grammar.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from .errors import ParseFailure
from .model import DEFAULT_EXPORT, Binding, BindingLayout, ImportStatement, SourceUnit, StatementLayout

__all__ = [
    "parse_source",
    "parse_file",
    "get_parser",
]

logger = logging.getLogger(__name__)

_GRAMMARS: Dict[str, Callable[[], object]] = {
    "typescript": tstypescript.language_typescript,
    "tsx": tstypescript.language_tsx,
}
_languages: Dict[str, Language] = {}
_languages_lock = threading.Lock()
_local = threading.local()


def _language(name: str) -> Language:
    with _languages_lock:
        if name not in _languages:
            _languages[name] = Language(_GRAMMARS[name]())
            logger.debug("Loaded %s grammar", name)
        return _languages[name]


def get_parser(path: Optional[Path] = None) -> Parser:
    """Return this thread's parser for the grammar matching ``path``."""
    name = "tsx" if path is not None and path.suffix.lower() == ".tsx" else "typescript"
    parsers = getattr(_local, "parsers", None)
    if parsers is None:
        parsers = _local.parsers = {}
    if name not in parsers:
        parsers[name] = Parser(_language(name))
    return parsers[name]


def parse_file(path: Path) -> SourceUnit:
    """Read and parse ``path``.

    Raises
    ------
    ParseFailure
        If the file cannot be read, is not UTF-8 or has syntax errors.
    """
    try:
        source = path.read_bytes()
    except OSError as exc:
        raise ParseFailure(path, str(exc)) from exc
    return parse_source(source, path)


def parse_source(source: Union[bytes, str], path: Optional[Path] = None) -> SourceUnit:
    """Parse TypeScript source text into a :class:`SourceUnit`.

    Parameters
    ----------
    source: bytes or str
        The file contents.  ``str`` input is encoded as UTF-8.
    path: Path, optional
        Identity of the unit; also selects the TSX grammar for ``.tsx``.

    Raises
    ------
    ParseFailure
        If the text is not valid UTF-8 or tree-sitter reports syntax errors.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseFailure(path, f"not valid UTF-8 ({exc.reason})") from exc
    tree = get_parser(path).parse(source)
    root = tree.root_node
    if root.has_error:
        line = _first_error_line(root)
        raise ParseFailure(path, f"syntax error near line {line}")
    newline = "\r\n" if b"\r\n" in source else "\n"
    statements: List[ImportStatement] = []
    for child in root.children:
        if child.type != "import_statement":
            continue
        statement = _import_statement(child, source, newline)
        if statement is not None:
            statements.append(statement)
    return SourceUnit(path=path or Path("<source>"), source=source, tree=tree, import_statements=statements)


def _first_error_line(node: Node) -> int:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current.start_point[0] + 1
        stack.extend(reversed([c for c in current.children if c.has_error or c.is_missing]))
    return node.start_point[0] + 1


def _text(source: bytes, start: int, end: int) -> str:
    return source[start:end].decode("utf-8")


def _unquote(source: bytes, node: Node) -> str:
    raw = _text(source, node.start_byte, node.end_byte)
    if node.type == "string" and len(raw) >= 2:
        return raw[1:-1]
    return raw


def _line_bounds(source: bytes, start: int, end: int) -> Tuple[str, int]:
    """Return the statement's indentation and the offset new statements go to."""
    line_start = source.rfind(b"\n", 0, start) + 1
    prefix = source[line_start:start]
    indent = prefix.decode("utf-8") if not prefix.strip() else ""
    eol = source.find(b"\n", end)
    if eol == -1:
        eol = len(source)
    elif eol > end and source[eol - 1:eol] == b"\r":
        eol -= 1
    rest = source[end:eol].strip()
    if not rest or rest.startswith(b"//") or (rest.startswith(b"/*") and rest.endswith(b"*/")):
        return indent, eol
    return indent, end


def _split_trailing(source: bytes, start: int, limit: int) -> Tuple[str, int]:
    """Return a same-line comment starting at ``start`` and the offset after it."""
    pos = start
    while pos < limit and source[pos:pos + 1] in (b" ", b"\t"):
        pos += 1
    if source.startswith(b"//", pos):
        eol = source.find(b"\n", pos, limit)
        if eol == -1:
            eol = limit
        if source[eol - 1:eol] == b"\r":
            eol -= 1
        return _text(source, start, eol), eol
    if source.startswith(b"/*", pos):
        close = source.find(b"*/", pos, limit)
        if close != -1 and b"\n" not in source[pos:close]:
            return _text(source, start, close + 2), close + 2
    return "", start


def _named_bindings(node: Node, source: bytes) -> Tuple[List[Binding], str, bool]:
    specifiers = [c for c in node.named_children if c.type == "import_specifier"]
    commas = [c for c in node.children if c.type == ","]
    close_brace = node.end_byte - 1
    bindings: List[Binding] = []
    cursor = node.start_byte + 1
    trailing_comma = False
    for index, spec in enumerate(specifiers):
        limit = specifiers[index + 1].start_byte if index + 1 < len(specifiers) else close_brace
        comma = next((c for c in commas if spec.end_byte <= c.start_byte < limit), None)
        leading = _text(source, cursor, spec.start_byte)
        before_comma = ""
        if comma is not None:
            before_comma = _text(source, spec.end_byte, comma.start_byte)
            trailing, cursor = _split_trailing(source, comma.end_byte, limit)
            if index + 1 == len(specifiers):
                trailing_comma = True
        else:
            trailing, cursor = _split_trailing(source, spec.end_byte, limit)
        name_node = spec.child_by_field_name("name")
        alias_node = spec.child_by_field_name("alias")
        imported = _unquote(source, name_node) if name_node is not None else _text(source, spec.start_byte, spec.end_byte)
        local = _text(source, alias_node.start_byte, alias_node.end_byte) if alias_node is not None else imported
        bindings.append(
            Binding(
                imported_name=imported,
                local_alias=local,
                layout=BindingLayout(
                    leading=leading,
                    text=_text(source, spec.start_byte, spec.end_byte),
                    trailing=trailing,
                    before_comma=before_comma,
                ),
            )
        )
    named_close = _text(source, cursor, close_brace)
    return bindings, named_close, trailing_comma


def _import_statement(node: Node, source: bytes, newline: str) -> Optional[ImportStatement]:
    source_node = node.child_by_field_name("source")
    if source_node is None:
        # import x = require("...")
        return None
    start, end = node.start_byte, node.end_byte
    indent, insert_at = _line_bounds(source, start, end)
    is_type_only = any(c.type in ("type", "typeof") for c in node.children if not c.is_named)
    clause = next((c for c in node.named_children if c.type == "import_clause"), None)
    spec_start, spec_end = source_node.start_byte, source_node.end_byte
    common = dict(
        start=start,
        end=end,
        insert_at=insert_at,
        indent=indent,
        newline=newline,
        text=_text(source, start, end),
        quote=_text(source, spec_start, spec_start + 1),
        end_text=_text(source, spec_end, end),
        specifier_span=(spec_start + 1 - start, spec_end - 1 - start),
        module_specifier=_unquote(source, source_node),
    )
    if clause is None:
        layout = StatementLayout(head=_text(source, start, spec_start), between="", **common)
        return ImportStatement(
            module_specifier=layout.module_specifier,
            is_side_effect_only=True,
            is_type_only=is_type_only,
            layout=layout,
        )

    bindings: List[Binding] = []
    default_separator = ", "
    named_close = " "
    trailing_comma = False
    parts = [c for c in clause.named_children if c.type in ("identifier", "namespace_import", "named_imports")]
    for index, part in enumerate(parts):
        if part.type == "identifier":
            local = _text(source, part.start_byte, part.end_byte)
            bindings.append(
                Binding(
                    imported_name=DEFAULT_EXPORT,
                    local_alias=local,
                    is_default=True,
                    layout=BindingLayout(leading="", text=local),
                )
            )
            if index + 1 < len(parts):
                default_separator = _text(source, part.end_byte, parts[index + 1].start_byte)
        elif part.type == "namespace_import":
            alias = next((c for c in part.named_children if c.type == "identifier"), None)
            local = _text(source, alias.start_byte, alias.end_byte) if alias is not None else ""
            bindings.append(
                Binding(
                    imported_name="*",
                    local_alias=local,
                    is_namespace=True,
                    layout=BindingLayout(leading="", text=_text(source, part.start_byte, part.end_byte)),
                )
            )
        else:
            named, named_close, trailing_comma = _named_bindings(part, source)
            bindings.extend(named)

    layout = StatementLayout(
        head=_text(source, start, clause.start_byte),
        between=_text(source, clause.end_byte, spec_start),
        default_separator=default_separator,
        named_close=named_close,
        trailing_comma=trailing_comma,
        bindings=tuple(bindings),
        **common,
    )
    return ImportStatement(
        module_specifier=layout.module_specifier,
        bindings=bindings,
        is_type_only=is_type_only,
        layout=layout,
    )
