"""
Unit tests for the Jolt static checker.
"""

from jolt import (
    parse, check, Memory, ErrorSeverity, Diagnostic, SourceLocation, SourceSpan,
)
from jolt.runtime import JoltNum


def codes(text, **kwargs):
    """Check text and return the diagnostic codes in order."""
    result = check(parse(text), **kwargs)
    return [d.code for d in result.diagnostics]


class TestChecker:
    """Test static checks."""

    def test_clean_program(self):
        text = """
        let limit = 3;
        var total = 0;
        for @outer (i : limit) {
            for (j : [1, 2]) {
                if (j == 2) continue outer;
                total = total + i * j;
            }
        }
        "{total}";
        """
        result = check(parse(text))
        assert not result.has_errors
        assert not result.has_warnings
        assert result.diagnostics == []

    def test_undeclared(self):
        assert codes("x + 1;") == ["E401"]
        assert codes("x = 1;") == ["E401"]

    def test_constant_reassignment(self):
        assert codes("let x = 1; x = 2;") == ["E402"]

    def test_for_pointer_is_constant(self):
        assert codes("for (i : 3) i = 0;") == ["E402"]

    def test_generator_pointer_scope(self):
        assert codes("[i for i : 3]; i;") == ["E401"]

    def test_duplicate_declaration(self):
        assert codes("var a; var a;") == ["E301"]
        assert codes("var a; { var a; }") == []

    def test_block_scope_ends(self):
        assert codes("{ var a = 1; } a;") == ["E401"]

    def test_redirect_outside_loop(self):
        assert codes("break;") == ["E501"]
        assert codes("if (true) continue;") == ["E501"]

    def test_unknown_label(self):
        assert codes("loop @a { loop @b { break c; } }") == ["E502"]
        assert codes("loop @a { loop @b { break a; } }") == []

    def test_literal_condition(self):
        assert codes("if (1) ;") == ["E203"]
        assert codes('while (("yes")) ;') == ["E203"]
        assert codes("do ; while (true);") == []

    def test_literal_iterable(self):
        assert codes("for (i : false) ;") == ["E204"]
        assert codes("[i for i : true];") == ["E204"]

    def test_unreachable_warning(self):
        result = check(parse("loop { break; 1; 2; }"))
        assert not result.has_errors
        assert result.has_warnings
        assert [d.code for d in result.diagnostics] == ["W001"]
        assert result.diagnostics[0].severity == ErrorSeverity.WARNING

    def test_reports_every_error(self):
        assert codes("a; b; let c = 1; c = 2;") == ["E401", "E401", "E402"]

    def test_max_errors(self):
        assert codes("a; b; c; d;", max_errors=2) == ["E401", "E401"]

    def test_memory_names_are_declared(self):
        memory = Memory()
        memory.bind("_", JoltNum(1))
        memory.declare("x", False, JoltNum(2))
        assert codes("_ + x; x = 3;", memory=memory) == []
        assert codes("_ = 3;", memory=memory) == ["E402"]

    def test_source_line_in_diagnostics(self):
        text = "var a = 1;\nb = a;"
        result = check(parse(text), source=text)
        formatted = result.diagnostics[0].format()
        assert "  2 | b = a;" in formatted
        assert "    | ^^^^^" in formatted

    def test_to_json(self):
        result = check(parse("loop { break; x; }"))
        data = result.to_json()
        assert data["error_count"] == 1
        assert data["warning_count"] == 1
        first = data["diagnostics"][0]
        assert first["code"] == "W001"
        assert first["severity"] == "warning"
        assert first["range"]["start"] == {"line": 1, "column": 15, "offset": 14}


class TestDiagnosticFormat:
    """Test rendering of diagnostics."""

    def _diagnostic(self, start, end, line, hints=None):
        return Diagnostic(
            code="E401",
            message="undeclared variable 'total'",
            severity=ErrorSeverity.ERROR,
            span=SourceSpan(start, end),
            source_line=line,
            hints=hints or [],
        )

    def test_caret_under_span(self):
        diag = self._diagnostic(
            SourceLocation(3, 5, 20, "calc.jolt"),
            SourceLocation(3, 10, 25, "calc.jolt"),
            "x = total;",
            ["declare it first"],
        )
        assert diag.format().splitlines() == [
            "calc.jolt:3:5: error[E401]: undeclared variable 'total'",
            "    |",
            "  3 | x = total;",
            "    |     ^^^^^",
            "    = hint: declare it first",
        ]

    def test_multiline_span_underlines_to_line_end(self):
        diag = self._diagnostic(
            SourceLocation(1, 3, 2, None),
            SourceLocation(2, 2, 9, None),
            "a {b",
        )
        assert diag.format().splitlines()[-1] == "    |   ^^"

    def test_without_source(self):
        diag = self._diagnostic(
            SourceLocation(1, 1, 0, None),
            SourceLocation(1, 2, 1, None),
            "x;",
        )
        assert diag.format(show_source=False) == "1:1: error[E401]: undeclared variable 'total'"
