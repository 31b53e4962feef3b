"""
Determine which names a TypeScript source unit exports.

Only top-level statements are inspected.  Exported declarations contribute
their names (every variable of a multi-variable statement, every
identifier bound by a destructuring pattern), ``export { ... }`` clauses
contribute the exported name, and any form of default export contributes
the sentinel ``"default"`` once.  ``export * from`` contributes nothing
because its names are not visible from the unit alone.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set

from tree_sitter import Node

from .model import DEFAULT_EXPORT, SourceUnit, Symbol, SymbolKind

__all__ = ["exported_symbols", "extract_exports"]

_DECLARATION_KINDS: Dict[str, SymbolKind] = {
    "class_declaration": SymbolKind.CLASS,
    "abstract_class_declaration": SymbolKind.CLASS,
    "interface_declaration": SymbolKind.INTERFACE,
    "enum_declaration": SymbolKind.ENUM,
    "type_alias_declaration": SymbolKind.TYPE_ALIAS,
    "function_declaration": SymbolKind.FUNCTION,
    "generator_function_declaration": SymbolKind.FUNCTION,
    "function_signature": SymbolKind.FUNCTION,
}
_EXPRESSION_KINDS: Dict[str, SymbolKind] = {
    "class": SymbolKind.CLASS,
    "function_expression": SymbolKind.FUNCTION,
    "function": SymbolKind.FUNCTION,
    "generator_function": SymbolKind.FUNCTION,
    "arrow_function": SymbolKind.FUNCTION,
}
_VARIABLE_STATEMENTS = ("lexical_declaration", "variable_declaration")


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _pattern_names(node: Node) -> Iterator[str]:
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        yield _text(node)
    elif node.type in ("assignment_pattern", "object_assignment_pattern"):
        left = node.child_by_field_name("left")
        if left is not None:
            yield from _pattern_names(left)
    elif node.type == "pair_pattern":
        value = node.child_by_field_name("value")
        if value is not None:
            yield from _pattern_names(value)
    else:
        for child in node.named_children:
            yield from _pattern_names(child)


def _declared_symbols(node: Node) -> Iterator[Symbol]:
    """Yield the symbols a single declaration node declares."""
    if node.type == "ambient_declaration":
        for child in node.named_children:
            yield from _declared_symbols(child)
    elif node.type in _DECLARATION_KINDS:
        name = node.child_by_field_name("name")
        if name is not None:
            yield Symbol(_text(name), _DECLARATION_KINDS[node.type])
    elif node.type in _VARIABLE_STATEMENTS:
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None:
                for bound in _pattern_names(name):
                    yield Symbol(bound, SymbolKind.VARIABLE)


def _default_kind(statement: Node) -> SymbolKind:
    declaration = statement.child_by_field_name("declaration")
    if declaration is not None:
        if declaration.type == "ambient_declaration" and declaration.named_children:
            declaration = declaration.named_children[0]
        return _DECLARATION_KINDS.get(declaration.type, SymbolKind.VARIABLE)
    value = statement.child_by_field_name("value")
    if value is not None:
        return _EXPRESSION_KINDS.get(value.type, SymbolKind.VARIABLE)
    return SymbolKind.VARIABLE


def _local_kinds(root: Node) -> Dict[str, SymbolKind]:
    kinds: Dict[str, SymbolKind] = {}
    for child in root.named_children:
        declaration: Optional[Node] = child
        if child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
        if declaration is None:
            continue
        for symbol in _declared_symbols(declaration):
            kinds.setdefault(symbol.name, symbol.kind)
    return kinds


def _is_default_export(statement: Node) -> bool:
    return any(child.type == "default" and not child.is_named for child in statement.children)


def exported_symbols(unit: SourceUnit) -> List[Symbol]:
    """Return the symbols ``unit`` exports, in source order, one per name.

    Parameters
    ----------
    unit: SourceUnit
        A parsed unit.  It is not modified.

    Returns
    -------
    list of Symbol
        Default exports appear under the name ``"default"``.
    """
    root = unit.tree.root_node
    local_kinds: Optional[Dict[str, SymbolKind]] = None
    found: Dict[str, Symbol] = {}

    def add(symbol: Symbol) -> None:
        found.setdefault(symbol.name, symbol)

    for statement in root.named_children:
        if statement.type != "export_statement":
            continue
        if _is_default_export(statement):
            add(Symbol(DEFAULT_EXPORT, _default_kind(statement)))
            continue
        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            for symbol in _declared_symbols(declaration):
                add(symbol)
            continue
        clause = next((c for c in statement.named_children if c.type == "export_clause"), None)
        if clause is None:
            continue
        if local_kinds is None:
            local_kinds = _local_kinds(root)
        for specifier in clause.named_children:
            if specifier.type != "export_specifier":
                continue
            name = specifier.child_by_field_name("name")
            alias = specifier.child_by_field_name("alias")
            if name is None:
                continue
            exported = _text(alias if alias is not None else name).strip("'\"")
            add(Symbol(exported, local_kinds.get(_text(name), SymbolKind.VARIABLE)))
    return list(found.values())


def extract_exports(unit: SourceUnit) -> Set[str]:
    """Return the set of names ``unit`` exports."""
    return {symbol.name for symbol in exported_symbols(unit)}
