from __future__ import annotations

import io
import unittest

from lox.errors import StaticErrors
from lox.main import Session, check_source, run_source


def run(source: str, **kwargs):
    out = io.StringIO()
    result = run_source(source, stdout=out, **kwargs)
    return out.getvalue(), result


class ExpressionTests(unittest.TestCase):
    def assert_prints(self, source: str, expected: str) -> None:
        output, result = run(source)
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(output, expected)

    def test_grouped_arithmetic_equality(self) -> None:
        self.assert_prints('print (1 + 2) == 3;', 'true\n')

    def test_arithmetic_and_display(self) -> None:
        self.assert_prints('print 1 + 2 * 3; print 7 / 2; print -3; print 10 - 0.5;', '7\n3.5\n-3\n9.5\n')

    def test_string_concatenation(self) -> None:
        self.assert_prints('print "foo" + "bar";', 'foobar\n')

    def test_comparisons(self) -> None:
        self.assert_prints('print 1 < 2; print 2 <= 2; print 3 > 4; print 3 >= 4;', 'true\ntrue\nfalse\nfalse\n')

    def test_nan_equals_itself(self) -> None:
        self.assert_prints('var n = 0 / 0; print n == n; print n != n; print n == 1;', 'true\nfalse\nfalse\n')

    def test_equality_never_coerces(self) -> None:
        self.assert_prints(
            'print nil == nil; print 1 == "1"; print true == 1; print nil == false; print "a" != "a";',
            'true\nfalse\nfalse\nfalse\nfalse\n',
        )

    def test_truthiness(self) -> None:
        self.assert_prints('print !0; print !""; print !nil; print !false;', 'false\nfalse\ntrue\ntrue\n')

    def test_logical_operators_return_operands(self) -> None:
        self.assert_prints(
            'print nil or "x"; print 0 and "y"; print nil and 1; print "a" or 2;',
            'x\ny\nnil\na\n',
        )

    def test_logical_short_circuit(self) -> None:
        source = 'var hit = false; fun touch() { hit = true; return true; } false and touch(); true or touch(); print hit;'
        self.assert_prints(source, 'false\n')

    def test_division_by_zero_follows_ieee(self) -> None:
        self.assert_prints('print 1 / 0; print -1 / 0; print 0 / 0;', 'Infinity\n-Infinity\nNaN\n')

    def test_value_display_forms(self) -> None:
        source = 'fun f() {} class A {} print f; print A; print A(); print clock; print nil; print 2.50;'
        self.assert_prints(source, '<fn f>\nA\nA instance\n<native fn>\nnil\n2.5\n')

    def test_clock_native(self) -> None:
        self.assert_prints('print clock() > 0;', 'true\n')


class StatementTests(unittest.TestCase):
    def assert_prints(self, source: str, expected: str) -> None:
        output, result = run(source)
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(output, expected)

    def test_block_scoping_shadows_and_restores(self) -> None:
        self.assert_prints('var x = 1; { var x = 2; print x; } print x;', '2\n1\n')

    def test_uninitialized_var_is_nil(self) -> None:
        self.assert_prints('var a; print a;', 'nil\n')

    def test_if_else(self) -> None:
        self.assert_prints('if (0) print "yes"; else print "no"; if (nil) print "yes"; else print "no";', 'yes\nno\n')

    def test_while_loop(self) -> None:
        self.assert_prints('var i = 0; while (i < 3) { print i; i = i + 1; }', '0\n1\n2\n')

    def test_for_loop(self) -> None:
        self.assert_prints('for (var i = 0; i < 3; i = i + 1) print i;', '0\n1\n2\n')

    def test_for_loop_variable_is_scoped(self) -> None:
        output, result = run('for (var i = 0; i < 1; i = i + 1) {} print i;')
        self.assertEqual(output, '')
        self.assertEqual(result.runtime_error.message, "Undefined variable 'i'.")


class FunctionTests(unittest.TestCase):
    def assert_prints(self, source: str, expected: str) -> None:
        output, result = run(source)
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(output, expected)

    def test_deep_recursion_is_limited_only_by_host_stack(self) -> None:
        source = 'fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); } print count(5000);'
        self.assert_prints(source, '5000\n')

    def test_recursion(self) -> None:
        source = 'fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); } print fib(15);'
        self.assert_prints(source, '610\n')

    def test_closure_counter_shares_state(self) -> None:
        source = (
            'fun make() { var i = 0; fun inc() { i = i + 1; return i; } return inc; } '
            'var a = make(); print a(); print a();'
        )
        self.assert_prints(source, '1\n2\n')

    def test_closures_from_same_scope_alias_each_other(self) -> None:
        source = (
            'var inc; var get; '
            'fun make() { var n = 0; fun i() { n = n + 1; } fun g() { return n; } inc = i; get = g; } '
            'make(); inc(); inc(); print get();'
        )
        self.assert_prints(source, '2\n')

    def test_closure_binds_to_declaration_scope(self) -> None:
        source = (
            'var a = "global"; '
            '{ fun showA() { print a; } showA(); var a = "block"; showA(); print a; }'
        )
        self.assert_prints(source, 'global\nglobal\nblock\n')

    def test_return_unwinds_nested_blocks_and_loops(self) -> None:
        source = (
            'fun f() { var i = 0; while (true) { { if (i == 3) return i; } i = i + 1; } } '
            'print f();'
        )
        self.assert_prints(source, '3\n')

    def test_function_without_return_yields_nil(self) -> None:
        self.assert_prints('fun f() { 1; } print f(); fun g() { return; } print g();', 'nil\nnil\n')

    def test_arguments_evaluated_left_to_right(self) -> None:
        source = 'fun show(x) { print x; return x; } fun two(a, b) {} two(show(1), show(2));'
        self.assert_prints(source, '1\n2\n')


class ClassTests(unittest.TestCase):
    def assert_prints(self, source: str, expected: str) -> None:
        output, result = run(source)
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(output, expected)

    def test_fields_and_methods(self) -> None:
        source = (
            'class Counter { init(start) { this.count = start; } '
            'bump() { this.count = this.count + 1; return this; } } '
            'var c = Counter(5); c.bump().bump(); print c.count;'
        )
        self.assert_prints(source, '7\n')

    def test_inherited_method(self) -> None:
        source = 'class A { greet() { return "A"; } } class B < A {} print B().greet();'
        self.assert_prints(source, 'A\n')

    def test_override_and_super(self) -> None:
        source = (
            'class A { greet() { return "A"; } } '
            'class B < A { greet() { return "B/" + super.greet(); } } '
            'print B().greet();'
        )
        self.assert_prints(source, 'B/A\n')

    def test_super_skips_to_defining_class_parent(self) -> None:
        source = (
            'class A { m() { return "A"; } } '
            'class B < A { m() { return "B"; } test() { return super.m(); } } '
            'class C < B {} '
            'print C().test();'
        )
        self.assert_prints(source, 'A\n')

    def test_bound_method_keeps_this(self) -> None:
        source = (
            'class P { init(n) { this.n = n; } name() { return this.n; } } '
            'var m = P("bob").name; print m();'
        )
        self.assert_prints(source, 'bob\n')

    def test_fields_shadow_methods(self) -> None:
        source = 'class A { f() { return 1; } } var a = A(); fun two() { return 2; } a.f = two; print a.f();'
        self.assert_prints(source, '2\n')

    def test_constructor_always_returns_instance(self) -> None:
        source = (
            'class A { init() { this.x = 1; return; } } '
            'var a = A(); print a.x; print a.init() == a;'
        )
        self.assert_prints(source, '1\ntrue\n')

    def test_class_arity_follows_init(self) -> None:
        output, result = run('class A { init(a, b) {} } A(1);')
        self.assertEqual(result.runtime_error.message, 'Expected 2 arguments but got 1.')

    def test_inherited_initializer(self) -> None:
        source = 'class A { init(v) { this.v = v; } } class B < A {} print B(4).v;'
        self.assert_prints(source, '4\n')


class RuntimeErrorTests(unittest.TestCase):
    def assert_runtime_error(self, source: str, message: str, line: int = 1, output: str = '') -> None:
        printed, result = run(source)
        self.assertEqual(result.static_errors, [])
        self.assertIsNotNone(result.runtime_error)
        self.assertEqual(result.runtime_error.message, message)
        self.assertEqual(result.runtime_error.line, line)
        self.assertEqual(result.exit_code, 70)
        self.assertEqual(printed, output)

    def test_arity_mismatch_halts_after_prior_output(self) -> None:
        self.assert_runtime_error(
            'print "before";\nfun f() {}\nf(1);\nprint "after";',
            'Expected 0 arguments but got 1.',
            line=3,
            output='before\n',
        )

    def test_string_plus_number(self) -> None:
        self.assert_runtime_error('print "1" + 1;', "Operands of '+' must be two numbers or two strings.")

    def test_comparison_requires_numbers(self) -> None:
        self.assert_runtime_error('print "a" < 1;', "Operands of '<' must be numbers.")

    def test_negation_requires_number(self) -> None:
        self.assert_runtime_error('print -"a";', "Operand of '-' must be a number.")

    def test_undefined_variable(self) -> None:
        self.assert_runtime_error('print missing;', "Undefined variable 'missing'.")

    def test_assign_undefined_global(self) -> None:
        self.assert_runtime_error('missing = 1;', "Undefined variable 'missing'.")

    def test_call_non_callable(self) -> None:
        self.assert_runtime_error('"text"();', 'Can only call functions and classes.')

    def test_property_on_non_instance(self) -> None:
        self.assert_runtime_error('var x = 1; print x.y;', 'Only instances have properties.')
        self.assert_runtime_error('var x = 1; x.y = 2;', 'Only instances have fields.')

    def test_undefined_property(self) -> None:
        self.assert_runtime_error('class A {} print A().nope;', "Undefined property 'nope'.")

    def test_superclass_must_be_class(self) -> None:
        self.assert_runtime_error('var A = 1; class B < A {}', 'Superclass must be a class.')

    def test_error_line_points_at_operator(self) -> None:
        self.assert_runtime_error('var a = 1;\nvar b = "x";\nprint a\n*\nb;', "Operands of '*' must be numbers.", line=4)

    def test_call_depth_limit_is_stack_overflow(self) -> None:
        printed, result = run('fun f() { f(); } f();', max_call_depth=50)
        self.assertEqual(result.runtime_error.code, 'RUN010')
        self.assertEqual(result.runtime_error.message, 'Stack overflow.')
        self.assertEqual(printed, '')

    def test_host_recursion_limit_is_stack_overflow(self) -> None:
        printed, result = run('fun f(n) { return f(n + 1); } print f(0);')
        self.assertEqual(result.runtime_error.code, 'RUN010')
        self.assertEqual(result.exit_code, 70)


class StaticErrorTests(unittest.TestCase):
    def test_deeply_nested_expression_runs(self) -> None:
        printed, result = run('print ' + '(' * 3000 + '1' + ')' * 3000 + ';')
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(printed, '1\n')

    def test_nesting_beyond_host_stack_is_static_error(self) -> None:
        printed, result = run('print ' + '(' * 20000 + '1' + ')' * 20000 + ';', recursion_limit=20000)
        self.assertEqual(printed, '')
        self.assertEqual(result.exit_code, 65)
        self.assertEqual(result.static_errors[0].code, 'PAR005')
        self.assertEqual(result.static_errors[0].message, 'Too much nesting.')

    def test_redeclared_global_reads_previous_value(self) -> None:
        printed, result = run('var a = 1; var a = a + 1; print a;')
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(printed, '2\n')

    def test_self_initializer_is_static_error(self) -> None:
        printed, result = run('print "never"; var a = a;')
        self.assertEqual(printed, '')
        self.assertEqual(result.exit_code, 65)
        self.assertEqual(result.static_errors[0].code, 'RES002')
        self.assertIsNone(result.runtime_error)

    def test_parse_error_skips_execution(self) -> None:
        printed, result = run('print 1; print ;')
        self.assertEqual(printed, '')
        self.assertEqual(result.exit_code, 65)

    def test_scan_error_skips_execution(self) -> None:
        printed, result = run('print 1; @')
        self.assertEqual(printed, '')
        self.assertEqual(result.static_errors[0].code, 'LEX001')

    def test_strict_check_raises_aggregate(self) -> None:
        with self.assertRaises(StaticErrors) as ctx:
            check_source('return 1; print this;', strict=True)
        self.assertEqual([d.code for d in ctx.exception.diagnostics], ['RES003', 'RES005'])
        self.assertIn('plus 1 additional', ctx.exception.message)


class SessionTests(unittest.TestCase):
    def test_later_run_may_redeclare_from_existing_global(self) -> None:
        out = io.StringIO()
        session = Session(stdout=out)
        session.run('var a = 1;')
        result = session.run('var a = a + 1; print a;')
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(out.getvalue(), '2\n')

    def test_run_result_carries_frontend_artifacts(self) -> None:
        result = Session(stdout=io.StringIO()).run('var a = 1; { var b = a; }')
        self.assertEqual(len(result.frontend.statements), 2)
        self.assertEqual(len(result.frontend.resolutions), 0)

    def test_globals_persist_across_runs(self) -> None:
        out = io.StringIO()
        session = Session(stdout=out)
        session.run('var a = 1; fun twice(x) { return x * 2; }')
        session.run('{ var b = twice(a); print b; }')
        self.assertEqual(out.getvalue(), '2\n')

    def test_static_error_does_not_poison_later_runs(self) -> None:
        out = io.StringIO()
        session = Session(stdout=out)
        first = session.run('print ;')
        second = session.run('print 2;')
        self.assertEqual(first.exit_code, 65)
        self.assertEqual(second.exit_code, 0)
        self.assertEqual(out.getvalue(), '2\n')

    def test_runtime_error_keeps_session_usable(self) -> None:
        out = io.StringIO()
        session = Session(stdout=out)
        session.run('var a = 1;')
        failed = session.run('{ var a = 2; print nope; }')
        session.run('print a;')
        self.assertEqual(failed.exit_code, 70)
        self.assertEqual(out.getvalue(), '1\n')


if __name__ == '__main__':
    unittest.main()
