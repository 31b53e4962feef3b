import textwrap

from tsmover.exports import exported_symbols, extract_exports
from tsmover.model import SymbolKind
from tsmover.parser import parse_source


def unit_for(source: str):
    return parse_source(textwrap.dedent(source))


class TestDeclarations:
    def test_every_declaration_kind(self):
        unit = unit_for(
            """
            export class A {}
            export abstract class B {}
            export interface C {}
            export enum D { X }
            export type E = string;
            export function f() {}
            export const g = 1;
            """
        )
        kinds = {s.name: s.kind for s in exported_symbols(unit)}
        assert kinds == {
            "A": SymbolKind.CLASS,
            "B": SymbolKind.CLASS,
            "C": SymbolKind.INTERFACE,
            "D": SymbolKind.ENUM,
            "E": SymbolKind.TYPE_ALIAS,
            "f": SymbolKind.FUNCTION,
            "g": SymbolKind.VARIABLE,
        }

    def test_multi_variable_statement_exports_each_name(self):
        unit = unit_for("export const a = 1, b = 2;\nexport let c: number;\n")
        assert extract_exports(unit) == {"a", "b", "c"}

    def test_destructuring_exports_bound_identifiers(self):
        unit = unit_for("export const { i, j: k, l = 3 } = source;\nexport const [m, ...n] = list;\n")
        assert extract_exports(unit) == {"i", "k", "l", "m", "n"}

    def test_unexported_and_nested_declarations_are_ignored(self):
        unit = unit_for(
            """
            class Hidden {}
            function helper() {
              class Inner {}
            }
            const local = 1;
            """
        )
        assert extract_exports(unit) == set()

    def test_declare_forms(self):
        unit = unit_for("export declare const x: number;\nexport declare function y(): void;\n")
        assert extract_exports(unit) == {"x", "y"}

    def test_overloads_collapse_to_one_name(self):
        unit = unit_for(
            """
            export function parse(value: string): number;
            export function parse(value: number): number;
            export function parse(value: any): number {
              return Number(value);
            }
            """
        )
        assert [s.name for s in exported_symbols(unit)] == ["parse"]

    def test_source_order(self):
        unit = unit_for("export const z = 1;\nexport class Y {}\nexport type X = Y;\n")
        assert [s.name for s in exported_symbols(unit)] == ["z", "Y", "X"]


class TestDefaultExports:
    def test_named_default_class_exports_only_the_sentinel(self):
        unit = unit_for("export default class Main {}\n")
        symbols = exported_symbols(unit)
        assert [(s.name, s.kind) for s in symbols] == [("default", SymbolKind.CLASS)]

    def test_default_expression(self):
        unit = unit_for("export default 42;\n")
        assert extract_exports(unit) == {"default"}

    def test_anonymous_default_function(self):
        unit = unit_for("export default function () {}\n")
        assert extract_exports(unit) == {"default"}

    def test_default_appears_once(self):
        unit = unit_for("const a = 1;\nexport default a;\nexport { a as default };\n")
        assert [s.name for s in exported_symbols(unit)] == ["default"]


class TestExportClauses:
    def test_local_clause_uses_exported_name(self):
        unit = unit_for("const a = 1;\nfunction b() {}\nexport { a, b as c };\n")
        kinds = {s.name: s.kind for s in exported_symbols(unit)}
        assert kinds == {"a": SymbolKind.VARIABLE, "c": SymbolKind.FUNCTION}

    def test_reexport_clause(self):
        unit = unit_for("export { Thing } from './thing';\n")
        assert extract_exports(unit) == {"Thing"}

    def test_star_reexport_contributes_nothing(self):
        unit = unit_for("export * from './thing';\n")
        assert extract_exports(unit) == set()


def test_source_unit_exposes_exported_names():
    unit = unit_for("export class A {}\n")
    assert unit.exported_symbol_names() == {"A"}
