"""
Unit tests for the Jolt interpreter.
"""

import math

import pytest
from jolt import (
    run_source, execute, parse, Interpreter, Memory, JoltError,
    JoltTypeError, DeclarationError, JoltNameError, ControlFlowError,
)
from jolt.runtime import JoltBool, JoltNum, JoltString, JoltList


def run(text, **kwargs):
    return run_source(text, **kwargs)


def error_code(text):
    """Run text that must fail and return the error code."""
    with pytest.raises(JoltError) as exc_info:
        run(text)
    return exc_info.value.code


class TestArithmetic:
    """Test numeric and string operators."""

    def test_basic_program(self):
        assert run("var x = 2; x * 7;") == JoltNum(14)

    def test_precedence(self):
        assert run("2 + 3 * 4 - 1;") == JoltNum(13)

    def test_division_is_float(self):
        assert run("7 / 2;") == JoltNum(3.5)

    def test_division_by_zero(self):
        assert run("1 / 0;").value == math.inf
        assert run("-1 / 0;").value == -math.inf
        assert math.isnan(run("0 / 0;").value)

    def test_remainder_sign_follows_dividend(self):
        assert run("7 % -3;") == JoltNum(1)
        assert run("-7 % 3;") == JoltNum(-1)
        assert math.isnan(run("1 % 0;").value)

    def test_string_concat(self):
        assert run('"a" + 1;') == JoltString("a1")
        assert run('1 + "a";') == JoltString("1a")
        assert run('true + "!";') == JoltString("true!")
        assert run('"x" + [1, 2];') == JoltString("x[ 1, 2 ]")

    def test_string_repeat(self):
        assert run('"ab" * 3;') == JoltString("ababab")
        assert run('"ab" * 2.7;') == JoltString("abab")
        assert run('"ab" * -1;') == JoltString("")

    def test_list_concat_and_repeat(self):
        assert run("[1] + [2];") == JoltList([JoltNum(1), JoltNum(2)])
        assert run("[0] * 2;") == JoltList([JoltNum(0), JoltNum(0)])

    def test_repeat_by_infinity(self):
        assert error_code('"a" * (1 / 0);') == "E202"

    def test_repeat_too_large(self):
        """A repetition whose result cannot be indexed is an operand error."""
        with pytest.raises(JoltTypeError) as exc_info:
            run('"ab" * 1e20;')
        assert exc_info.value.code == "E202"
        assert "right operand of type 'num'" in exc_info.value.message
        assert error_code("[1] * 1e20;") == "E202"

    def test_repeat_too_large_is_reported(self):
        result = execute('"ab" * 1e20;')
        assert not result.success
        assert result.error.code == "E202"

    def test_repeat_empty_by_large_count(self):
        assert run('"" * 1e20;') == JoltString("")
        assert run("[] * 1e20;") == JoltList([])

    def test_negate(self):
        assert run("-(2 + 3);") == JoltNum(-5)
        assert run('-"abc";') == JoltString("cba")

    def test_size(self):
        assert run('#"hey";') == JoltNum(3)
        assert run("#[1, 2];") == JoltNum(2)
        assert run("#5;") == JoltNum(1)
        assert run("#true;") == JoltNum(1)

    def test_string_comparison(self):
        assert run('"a" < "b";') == JoltBool(True)
        assert run('"b" <= "a";') == JoltBool(False)


class TestLogic:
    """Test boolean operators and equality."""

    def test_xor(self):
        assert run("true ^ true;") == JoltBool(False)
        assert run("true ^ false;") == JoltBool(True)

    def test_and_or(self):
        assert run("true & false;") == JoltBool(False)
        assert run("true && true;") == JoltBool(True)
        assert run("false | true;") == JoltBool(True)

    def test_short_circuit(self):
        """The right side is not evaluated once the result is known."""
        assert run("false & missing;") == JoltBool(False)
        assert run("true | missing;") == JoltBool(True)

    def test_cross_type_equality(self):
        assert run('1 == "1";') == JoltBool(False)
        assert run('1 != "1";') == JoltBool(True)

    def test_structural_list_equality(self):
        assert run("[1, [2]] == [1, [2]];") == JoltBool(True)
        assert run("[1] != [2];") == JoltBool(True)
        assert run("[1] == [1, 1];") == JoltBool(False)

    def test_nan_is_not_equal_to_itself(self):
        assert run("var n; n == n;") == JoltBool(False)


class TestOperandErrors:
    """Test operator type errors and which side they blame."""

    def test_not_on_number(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run("!1;")
        assert exc_info.value.code == "E201"
        assert exc_info.value.message == "invalid operand of type 'num' for '!'"

    def test_negate_bool(self):
        assert error_code("-true;") == "E201"

    def test_right_operand_blamed(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run('1 - "a";')
        assert exc_info.value.code == "E202"
        assert "right operand of type 'string'" in exc_info.value.message
        assert exc_info.value.span.start.column == 5

    def test_left_operand_blamed(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run('"a" - 1;')
        assert "left operand of type 'string'" in exc_info.value.message
        assert exc_info.value.span.start.column == 1

    def test_logical_operands(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run("1 & true;")
        assert "left" in exc_info.value.message
        with pytest.raises(JoltTypeError) as exc_info:
            run("true & 1;")
        assert "right" in exc_info.value.message

    def test_mixed_comparison(self):
        assert error_code('1 < "a";') == "E202"

    def test_list_plus_number(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run("[1] + 1;")
        assert "right operand of type 'num'" in exc_info.value.message


class TestVariables:
    """Test declarations, scoping and assignment."""

    def test_shadowing(self):
        assert run("var x = 1; { var x = 2; } x;") == JoltNum(1)

    def test_block_sees_outer(self):
        assert run("var x = 1; { x = x + 1; } x;") == JoltNum(2)

    def test_block_locals_are_dropped(self):
        assert error_code("{ var y = 1; } y;") == "E401"

    def test_constant_reassignment(self):
        with pytest.raises(JoltNameError) as exc_info:
            run("let x = 1; x = 2;")
        assert exc_info.value.code == "E402"

    def test_constant_checked_before_value(self):
        assert error_code("let c = 1; c = missing;") == "E402"

    def test_duplicate_declaration(self):
        with pytest.raises(DeclarationError) as exc_info:
            run("var a; var a;")
        assert exc_info.value.code == "E301"

    def test_duplicate_checked_before_value(self):
        assert error_code("var a = 1; var a = missing;") == "E301"

    def test_undeclared(self):
        assert error_code("y;") == "E401"
        assert error_code("y = 1;") == "E401"

    def test_uninitialized_is_nan(self):
        assert math.isnan(run("var x; x;").value)

    def test_assignment_is_an_expression(self):
        assert run("var a; var b; a = b = 3; a + b;") == JoltNum(6)


class TestIndexing:
    """Test indexing strings and lists."""

    def test_list_index(self):
        assert run("var a = [1, 2, 3]; a[1];") == JoltNum(2)

    def test_string_index(self):
        assert run('"abc"[1];') == JoltString("b")

    def test_index_truncates(self):
        assert run("[10, 20][1.9];") == JoltNum(20)

    def test_out_of_bounds(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run("var a = [1, 2, 3]; a[3];")
        assert exc_info.value.code == "E207"
        assert exc_info.value.message == "index '3' out of bounds for 'list' of length '3'"

    def test_list_bounds(self):
        text = "var a = [1, 2, 3]; a[0] + a[1] + a[2];"
        assert run(text) == JoltNum(6)
        assert error_code("var a = [1, 2, 3]; a[-1];") == "E207"

    def test_negative_index(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run('"ab"[-1];')
        assert exc_info.value.message == "index '-1' out of bounds for 'string' of length '2'"

    def test_not_indexable(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run("var b = true; b[0];")
        assert exc_info.value.code == "E205"
        assert exc_info.value.message == "value 'true' cannot be indexed"

    def test_index_not_number(self):
        assert error_code('[1]["0"];') == "E206"

    def test_set_index(self):
        assert run("var a = [1, 2]; a[0] = 5; a;") == JoltList([JoltNum(5), JoltNum(2)])

    def test_set_index_is_shared(self):
        """Lists are shared between names, not copied."""
        assert run("var a = [1]; var b = a; b[0] = 9; a[0];") == JoltNum(9)

    def test_set_index_on_string(self):
        assert error_code('var s = "ab"; s[0] = "x";') == "E205"

    def test_nested_set_index(self):
        assert run("var g = [[0, 0], [0, 0]]; g[1][0] = 7; g[1];") == \
            JoltList([JoltNum(7), JoltNum(0)])


class TestControlFlow:
    """Test conditionals, loops and redirects."""

    def test_if_else(self):
        assert run("var r; if (1 < 2) r = \"yes\"; else r = \"no\"; r;") == JoltString("yes")

    def test_condition_must_be_bool(self):
        with pytest.raises(JoltTypeError) as exc_info:
            run("if (1) 2;")
        assert exc_info.value.code == "E203"
        assert exc_info.value.message == "if condition must result in a boolean, found 'num'"

    def test_while(self):
        assert run("var i = 0; while (i < 5) i = i + 1; i;") == JoltNum(5)

    def test_while_condition_error(self):
        assert error_code('while ("x") ;') == "E203"

    def test_do_runs_once(self):
        assert run("var n = 10; do n = n + 1; while (n < 5); n;") == JoltNum(11)

    def test_loop_break(self):
        assert run("var i = 0; loop { i = i + 1; if (i == 4) break; } i;") == JoltNum(4)

    def test_for_over_number(self):
        assert run("var s = 0; for (i : 4) s = s + i; s;") == JoltNum(6)

    def test_for_over_string(self):
        assert run('var r = ""; for (c : "abc") r = c + r; r;') == JoltString("cba")

    def test_for_over_list(self):
        assert run("var s = 0; for (v : [5, 6]) s = s + v; s;") == JoltNum(11)

    def test_for_pointer_is_constant(self):
        assert error_code("for (i : 3) i = 1;") == "E402"

    def test_for_pointer_is_scoped(self):
        assert error_code("for (i : 2) ; i;") == "E401"

    def test_not_iterable(self):
        assert error_code("for (i : true) ;") == "E204"

    def test_continue(self):
        text = """
        var s = 0;
        for (i : 5) {
            if (i % 2 == 0) continue;
            s = s + i;
        }
        s;
        """
        assert run(text) == JoltNum(4)

    def test_labeled_continue(self):
        text = """
        var count = 0;
        for @outer (i : 3) {
            for (j : 3) {
                if (j == 1) continue outer;
                count = count + 1;
            }
        }
        count;
        """
        assert run(text) == JoltNum(3)

    def test_labeled_break(self):
        text = """
        var count = 0;
        for @outer (i : 3) {
            for (j : 3) {
                if (j == 1) break outer;
                count = count + 1;
            }
        }
        count;
        """
        assert run(text) == JoltNum(1)

    def test_break_outer_from_inner_loop(self):
        assert run("loop @outer { loop { break outer; } } 1;") == JoltNum(1)

    def test_continue_outer_from_inner_loop(self):
        text = "var n = 0; loop @outer { n = n + 1; if (n > 3) break; loop { continue outer; } } n;"
        assert run(text) == JoltNum(4)

    def test_break_outside_loop(self):
        with pytest.raises(ControlFlowError) as exc_info:
            run("break;")
        assert exc_info.value.code == "E501"
        assert exc_info.value.message == "break statement was unhandled"

    def test_continue_outside_loop(self):
        assert error_code("if (true) continue;") == "E501"

    def test_unknown_label(self):
        with pytest.raises(ControlFlowError) as exc_info:
            run("loop { break nowhere; }")
        assert exc_info.value.code == "E502"
        assert "'nowhere'" in exc_info.value.message

    def test_scopes_unwound_after_break(self):
        memory = Memory()
        run("loop { { { break; } } }", memory=memory)
        assert memory.depth == 0

    def test_scopes_unwound_after_error(self):
        memory = Memory()
        with pytest.raises(JoltNameError):
            run("{ for (i : 2) { missing; } }", memory=memory)
        assert memory.depth == 0


class TestExpressions:
    """Test list generators, interpolation and program results."""

    def test_generator(self):
        assert run("[i * 2 for i : 3];") == JoltList([JoltNum(0), JoltNum(2), JoltNum(4)])

    def test_generator_pointer_is_scoped(self):
        assert error_code("[i for i : 2]; i;") == "E401"

    def test_interpolation(self):
        text = 'var n = 3; "n={n}, half={n / 2}, {[1, true]}";'
        assert run(text) == JoltString("n=3, half=1.5, [ 1, true ]")

    def test_interpolation_of_special_numbers(self):
        assert run('"{1 / 0} {-1 / 0} {0 / 0}";') == JoltString("Infinity -Infinity NaN")

    def test_empty_program(self):
        assert run("") == JoltNum(0)

    def test_declarations_only(self):
        assert run("var a = 5;") == JoltNum(0)

    def test_last_top_level_expression(self):
        assert run("1; 2; { 3; }") == JoltNum(2)


class TestInterpreter:
    """Test the interpreter API."""

    def test_echo(self):
        seen = []
        run("1; var x = 2; x + 1; for (i : 2) i;", echo=seen.append)
        assert seen == [JoltNum(1), JoltNum(3), JoltNum(0), JoltNum(1)]

    def test_memory_persists_between_runs(self):
        memory = Memory()
        run("var x = 5;", memory=memory)
        assert run("x * 2;", memory=memory) == JoltNum(10)

    def test_interpreter_directly(self):
        text = "let greeting = \"hi\"; greeting + \"!\";"
        interpreter = Interpreter(text)
        assert interpreter.run(parse(text)) == JoltString("hi!")
        assert interpreter.memory.get("greeting").constant is True

    def test_execute_success(self):
        result = execute("var x = 2; x * 21;")
        assert result.success
        assert result.value == JoltNum(42)
        assert result.error is None
        assert result.error_message is None
        assert result.elapsed >= 0

    def test_execute_failure(self):
        result = execute("y;")
        assert not result.success
        assert result.error.code == "E401"
        assert "E401" in result.error_message

    def test_execute_parse_failure(self):
        result = execute("var = 1;")
        assert not result.success
        assert result.error.code == "E101"

    def test_execute_with_check(self):
        """Checking reports every problem before anything runs."""
        seen = []
        result = execute("1; y; z = 2;", echo=seen.append, check=True)
        assert not result.success
        assert result.error is None
        assert [d.code for d in result.diagnostics] == ["E401", "E401"]
        assert seen == []

    def test_execute_check_uses_memory(self):
        memory = Memory()
        memory.bind("x", JoltNum(4))
        result = execute("x + 1;", memory=memory, check=True)
        assert result.success
        assert result.value == JoltNum(5)

    def test_error_formatting(self):
        with pytest.raises(JoltError) as exc_info:
            run_source("var a = 1;\na + missing;", filename="demo.jt")
        text = str(exc_info.value)
        assert text.startswith("demo.jt:2:5: error[E401]")
        assert "  2 | a + missing;" in text
        assert "    |     ^^^^^^^" in text
