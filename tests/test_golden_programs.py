from __future__ import annotations

import io
import unittest

from lox.main import run_source


GOLDEN_PROGRAMS: list[tuple[str, str, str]] = [
    (
        'fibonacci_loop',
        'var a = 0; var b = 1; for (var i = 0; i < 10; i = i + 1) { print a; var t = a; a = b; b = t + b; }',
        '0\n1\n1\n2\n3\n5\n8\n13\n21\n34\n',
    ),
    (
        'counter_closure',
        'fun makeCounter() { var i = 0; fun count() { i = i + 1; print i; } return count; } '
        'var counter = makeCounter(); counter(); counter();',
        '1\n2\n',
    ),
    (
        'linked_list',
        'class Node { init(value, next) { this.value = value; this.next = next; } } '
        'fun sum(node) { if (node == nil) return 0; return node.value + sum(node.next); } '
        'print sum(Node(1, Node(2, Node(3, nil))));',
        '6\n',
    ),
    (
        'inheritance_chain',
        'class Doughnut { cook() { print "Fry until golden brown."; } } '
        'class BostonCream < Doughnut { cook() { super.cook(); print "Pipe full of custard and coat with chocolate."; } } '
        'BostonCream().cook();',
        'Fry until golden brown.\nPipe full of custard and coat with chocolate.\n',
    ),
    (
        'method_as_callback',
        'class Greeter { init(name) { this.name = name; } greet() { print "hi " + this.name; } } '
        'fun call(f) { f(); } call(Greeter("ada").greet);',
        'hi ada\n',
    ),
    (
        'nested_functions',
        'fun outer() { var x = "outer"; fun middle() { fun inner() { print x; } return inner; } return middle(); } '
        'outer()();',
        'outer\n',
    ),
    (
        'shadowed_locals',
        'var a = "global a"; var b = "global b"; var c = "global c"; '
        '{ var a = "outer a"; var b = "outer b"; { var a = "inner a"; print a; print b; print c; } '
        'print a; print b; print c; } print a; print b; print c;',
        'inner a\nouter b\nglobal c\nouter a\nouter b\nglobal c\nglobal a\nglobal b\nglobal c\n',
    ),
]


class GoldenProgramTests(unittest.TestCase):
    def test_golden_programs(self) -> None:
        for name, source, expected in GOLDEN_PROGRAMS:
            with self.subTest(program=name):
                out = io.StringIO()
                result = run_source(source, stdout=out)
                self.assertEqual(result.diagnostics, [], msg=name)
                self.assertEqual(out.getvalue(), expected)


if __name__ == '__main__':
    unittest.main()
