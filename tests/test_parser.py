from __future__ import annotations

import unittest

from lox.ast import (
    BlockStmt,
    ClassStmt,
    ExpressionStmt,
    FunctionStmt,
    LiteralExpr,
    PrintStmt,
    SetExpr,
    SuperExpr,
    VarStmt,
    WhileStmt,
)
from lox.parser import Parser
from lox.printer import AstPrinter
from lox.scanner import Scanner


def parse(source: str):
    parser = Parser(Scanner(source).scan_tokens())
    return parser.parse(), parser.errors


class ParserTests(unittest.TestCase):
    def test_precedence_ladder(self) -> None:
        statements, errors = parse('1 + 2 * 3 - -4 / (5);')
        self.assertEqual(errors, [])
        self.assertEqual(
            AstPrinter().print(statements[0]),
            '(; (- (+ 1 (* 2 3)) (/ (- 4) (group 5))))',
        )

    def test_logical_binds_looser_than_equality(self) -> None:
        statements, _ = parse('a == b or c and d;')
        self.assertEqual(AstPrinter().print(statements[0]), '(; (or (== a b) (and c d)))')

    def test_assignment_is_right_associative(self) -> None:
        statements, _ = parse('a = b = 1;')
        self.assertEqual(AstPrinter().print(statements[0]), '(; (= a (= b 1)))')

    def test_property_assignment_becomes_set(self) -> None:
        statements, errors = parse('obj.field.x = 3;')
        self.assertEqual(errors, [])
        self.assertIsInstance(statements[0].expression, SetExpr)
        self.assertEqual(statements[0].expression.name.lexeme, 'x')

    def test_for_loop_desugars_into_block_and_while(self) -> None:
        statements, errors = parse('for (var i = 0; i < 3; i = i + 1) print i;')
        self.assertEqual(errors, [])
        outer = statements[0]
        self.assertIsInstance(outer, BlockStmt)
        self.assertIsInstance(outer.statements[0], VarStmt)
        loop = outer.statements[1]
        self.assertIsInstance(loop, WhileStmt)
        self.assertIsInstance(loop.body, BlockStmt)
        self.assertIsInstance(loop.body.statements[0], PrintStmt)
        self.assertIsInstance(loop.body.statements[1], ExpressionStmt)

    def test_for_loop_without_clauses_loops_on_true(self) -> None:
        statements, _ = parse('for (;;) print 1;')
        loop = statements[0]
        self.assertIsInstance(loop, WhileStmt)
        self.assertIsInstance(loop.condition, LiteralExpr)
        self.assertIs(loop.condition.value, True)
        self.assertIsInstance(loop.body, PrintStmt)

    def test_class_with_superclass_and_methods(self) -> None:
        source = 'class B < A { init(x) { this.x = x; } greet() { return super.greet(); } }'
        statements, errors = parse(source)
        self.assertEqual(errors, [])
        klass = statements[0]
        self.assertIsInstance(klass, ClassStmt)
        self.assertEqual(klass.superclass.name.lexeme, 'A')
        self.assertEqual([m.name.lexeme for m in klass.methods], ['init', 'greet'])
        self.assertIsInstance(klass.methods[0], FunctionStmt)
        call = klass.methods[1].body[0].value
        self.assertIsInstance(call.callee, SuperExpr)
        self.assertEqual(call.callee.method.lexeme, 'greet')

    def test_invalid_assignment_target_is_not_fatal(self) -> None:
        statements, errors = parse('1 = 2; print 3;')
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].code, 'PAR003')
        self.assertEqual(errors[0].message, 'Invalid assignment target.')
        self.assertEqual(errors[0].where, " at '='")
        self.assertEqual(len(statements), 2)
        self.assertIsInstance(statements[1], PrintStmt)

    def test_recovers_at_statement_boundary(self) -> None:
        statements, errors = parse('var = 1;\nprint 2;\nfun (a) {}\nprint 3;')
        self.assertEqual([err.message for err in errors], ['Expect variable name.', 'Expect function name.'])
        self.assertEqual([err.line for err in errors], [1, 3])
        printed = [s for s in statements if isinstance(s, PrintStmt)]
        self.assertEqual(len(printed), 2)

    def test_error_at_end_of_input(self) -> None:
        _, errors = parse('print 1')
        self.assertEqual(errors[0].where, ' at end')
        self.assertEqual(errors[0].message, "Expect ';' after value.")

    def test_missing_expression(self) -> None:
        _, errors = parse('print ;')
        self.assertEqual(errors[0].code, 'PAR001')
        self.assertEqual(errors[0].where, " at ';'")

    def test_too_many_arguments_reported_but_parsed(self) -> None:
        args = ', '.join('1' for _ in range(256))
        statements, errors = parse(f'f({args});')
        self.assertEqual([err.message for err in errors], ["Can't have more than 255 arguments."])
        self.assertEqual(len(statements), 1)
        self.assertEqual(len(statements[0].expression.arguments), 256)

    def test_too_many_parameters_reported(self) -> None:
        params = ', '.join(f'p{i}' for i in range(256))
        statements, errors = parse(f'fun f({params}) {{}}')
        self.assertEqual([err.message for err in errors], ["Can't have more than 255 parameters."])
        self.assertIsInstance(statements[0], FunctionStmt)

    def test_nodes_compare_by_identity(self) -> None:
        statements, _ = parse('print a; print a;')
        first, second = statements[0].expression, statements[1].expression
        self.assertNotEqual(first, second)
        self.assertEqual(len({first, second}), 2)


if __name__ == '__main__':
    unittest.main()
