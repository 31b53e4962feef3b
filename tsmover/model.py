"""
In-memory model of a parsed TypeScript source unit and its imports.

The model is deliberately small.  An :class:`ImportStatement` carries the
semantic parts the rewriter reasons about (specifier, bindings,
side-effect flag) and an opaque :class:`StatementLayout` that remembers
where the statement came from in the original text.  Each
:class:`Binding` likewise carries a :class:`BindingLayout` with its own
leading whitespace/comments and trailing same-line comment, so a binding
keeps its formatting wherever the rewriter puts it.

Statements split off from an original statement share its layout object;
:mod:`tsmover.printer` uses that to splice the rewritten text back into
the original bytes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, List, Optional, Set, Tuple

__all__ = [
    "DEFAULT_EXPORT",
    "SymbolKind",
    "Symbol",
    "BindingLayout",
    "Binding",
    "StatementLayout",
    "ImportStatement",
    "SourceUnit",
    "ModuleMoveOperation",
    "RewriteResult",
    "MoveReport",
]

DEFAULT_EXPORT = "default"


class SymbolKind(str, enum.Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    TYPE_ALIAS = "type-alias"
    FUNCTION = "function"
    VARIABLE = "variable"


@dataclass(frozen=True)
class Symbol:
    name: str
    kind: SymbolKind


@dataclass(frozen=True)
class BindingLayout:
    """Original text of one binding.

    ``leading`` is everything between the previous separator (``{`` or
    ``,``) and the binding, ``text`` the binding itself (``A``,
    ``A as B``, ``type A``), ``before_comma`` whatever sits between the
    binding and its comma, and ``trailing`` a comment on the same line right
    after the comma (or after the binding, when no comma follows it).
    """

    leading: str = " "
    text: str = ""
    trailing: str = ""
    before_comma: str = ""


@dataclass(frozen=True)
class Binding:
    """One name bound by an import statement."""

    imported_name: str
    local_alias: str
    is_default: bool = False
    is_namespace: bool = False
    layout: BindingLayout = field(default_factory=BindingLayout, compare=False, repr=False)

    def is_moved(self, moved_symbol_names: Set[str]) -> bool:
        """Return ``True`` if this binding refers to one of the moved symbols."""
        if self.is_namespace:
            return False
        if self.is_default:
            return DEFAULT_EXPORT in moved_symbol_names
        return self.imported_name in moved_symbol_names

    @property
    def source_text(self) -> str:
        if self.layout.text:
            return self.layout.text
        if self.is_namespace:
            return f"* as {self.local_alias}"
        if self.is_default or self.local_alias == self.imported_name:
            return self.local_alias
        return f"{self.imported_name} as {self.local_alias}"


@dataclass
class StatementLayout:
    """Where an import statement sits in its file and how it was written.

    Byte offsets refer to the UTF-8 encoded source.  The string slices are
    the pieces of the statement that are not bindings: ``head`` runs from
    ``import`` up to the import clause, ``between`` from the clause to the
    opening quote, ``end`` from the closing quote to the end of the
    statement.  ``named_close`` is the text before ``}``.
    """

    start: int
    end: int
    insert_at: int
    indent: str
    newline: str
    text: str
    head: str
    between: str
    quote: str
    end_text: str
    specifier_span: Tuple[int, int]
    default_separator: str = ", "
    named_close: str = " "
    trailing_comma: bool = False
    bindings: Tuple[Binding, ...] = ()
    module_specifier: str = ""


@dataclass
class ImportStatement:
    module_specifier: str
    bindings: List[Binding] = field(default_factory=list)
    is_side_effect_only: bool = False
    is_type_only: bool = False
    layout: Optional[StatementLayout] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.is_side_effect_only and self.bindings:
            raise ValueError("a side-effect-only import cannot have bindings")

    def matches(self, old_specifier: str) -> bool:
        """Return ``True`` if this statement imports ``old_specifier`` or one of its subpaths."""
        return self.module_specifier == old_specifier or self.module_specifier.startswith(old_specifier + "/")

    def target_specifier(self, old_specifier: str, new_specifier: str) -> str:
        """Return the specifier this statement has after ``old_specifier`` moves to ``new_specifier``."""
        if self.module_specifier == old_specifier:
            return new_specifier
        return new_specifier + self.module_specifier[len(old_specifier):]

    def derive(self, module_specifier: str, bindings: List[Binding]) -> "ImportStatement":
        """Return a statement sharing this statement's layout with other bindings."""
        return replace(self, module_specifier=module_specifier, bindings=list(bindings))

    @property
    def is_original(self) -> bool:
        layout = self.layout
        return (
            layout is not None
            and self.module_specifier == layout.module_specifier
            and tuple(self.bindings) == layout.bindings
        )


@dataclass
class SourceUnit:
    """A parsed TypeScript file.

    ``source`` keeps the original bytes; ``import_statements`` is the only
    part the rewriter changes.  The syntax tree is retained for the export
    extractor.
    """

    path: Path
    source: bytes
    tree: Any = field(repr=False, default=None)
    import_statements: List[ImportStatement] = field(default_factory=list)

    def exported_symbol_names(self) -> Set[str]:
        from .exports import extract_exports

        return extract_exports(self)

    @property
    def is_modified(self) -> bool:
        return any(not stmt.is_original for stmt in self.import_statements)

    def text(self) -> str:
        from .printer import print_unit

        return print_unit(self)


@dataclass
class ModuleMoveOperation:
    old_module_specifier: str
    new_module_specifier: str
    moved_symbol_names: Set[str]
    files: List[Path] = field(default_factory=list)


@dataclass
class RewriteResult:
    files_changed: int = 0
    bindings_changed: int = 0
    changed_units: List[SourceUnit] = field(default_factory=list)


@dataclass
class MoveReport:
    """Aggregate outcome of a move.

    ``skipped`` lists files that could not be read or parsed and
    ``write_failures`` files whose rewritten text could not be saved; both
    map a path to the reason.
    """

    source_path: Optional[Path]
    target_path: Optional[Path]
    old_specifier: str
    new_specifier: str
    moved_symbols: List[str] = field(default_factory=list)
    files_scanned: int = 0
    files_changed: int = 0
    bindings_changed: int = 0
    changed_paths: List[Path] = field(default_factory=list)
    skipped: List[Tuple[Path, str]] = field(default_factory=list)
    write_failures: List[Tuple[Path, str]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def files_skipped(self) -> int:
        return len(self.skipped) + len(self.write_failures)

    @property
    def ok(self) -> bool:
        return self.files_skipped == 0

    def as_dict(self) -> dict:
        return {
            "source": str(self.source_path) if self.source_path else None,
            "target": str(self.target_path) if self.target_path else None,
            "old_module": self.old_specifier,
            "new_module": self.new_specifier,
            "moved_symbols": list(self.moved_symbols),
            "files_scanned": self.files_scanned,
            "files_changed": self.files_changed,
            "bindings_changed": self.bindings_changed,
            "files_skipped": self.files_skipped,
            "changed_paths": [str(p) for p in self.changed_paths],
            "skipped": [{"path": str(p), "reason": r} for p, r in self.skipped],
            "write_failures": [{"path": str(p), "reason": r} for p, r in self.write_failures],
            "dry_run": self.dry_run,
        }
