import unittest
from decimal import Decimal

from plume import syntax
from plume.front_end import parse, PlumeParseError
from plume.tokens import Token, Kind
from plume.values import Character
from lexicon import scan

def _parse(text) -> syntax.Source:
	return parse(scan(text))

def _expr(text) -> syntax.Expression:
	""" Parse an expression by wrapping it as the return value of main. """
	source = _parse("fun main() do return %s; end" % text)
	return source.functions[0].body[0].value

def _statements(text) -> list[syntax.Statement]:
	return _parse("fun main() do %s end" % text).functions[0].body

class ParserTests(unittest.TestCase):

	def test_minimal_program(self):
		source = _parse("fun main(): Integer do return 0; end")
		self.assertEqual([], source.globals)
		self.assertEqual(1, len(source.functions))
		main = source.functions[0]
		self.assertEqual(("main", 0), main.key())
		self.assertEqual("Integer", main.return_type_name)
		self.assertIsInstance(main.body[0], syntax.Return)

	def test_keywords_ignore_case(self):
		for text in ["VAR x = 1; FUN main() DO RETURN x; END", "var x = 1; fun main() do return x; end", "Var x = 1; Fun main() Do Return x; End"]:
			with self.subTest(text):
				source = _parse(text)
				self.assertEqual("x", source.globals[0].name)
				self.assertTrue(source.globals[0].mutable)
				self.assertIsNone(source.functions[0].return_type_name)

	def test_globals(self):
		source = _parse("""
			list xs : Integer = [1, 2, 3];
			var v : Decimal;
			val greeting = "hi";
			fun main() do return 0; end
		""")
		xs, v, greeting = source.globals
		self.assertTrue(xs.is_list())
		self.assertEqual("Integer", xs.type_name)
		self.assertEqual(3, len(xs.value.values))
		self.assertTrue(v.mutable)
		self.assertIsNone(v.value)
		self.assertFalse(greeting.mutable)
		self.assertEqual("hi", greeting.value.value)

	def test_parameters(self):
		fn = _parse("fun f(a: Integer, b: String): Nil do end fun main() do return 0; end").functions[0]
		self.assertEqual([("a", "Integer"), ("b", "String")], fn.parameters)
		self.assertEqual([], fn.body)

	def test_nil_as_a_type_name(self):
		source = _parse("var v : Nil; fun f(a: Nil): Nil do let x : Nil = nil; end fun main() do return 0; end")
		self.assertEqual("Nil", source.globals[0].type_name)
		f = source.functions[0]
		self.assertEqual([("a", "Nil")], f.parameters)
		self.assertEqual("Nil", f.return_type_name)
		self.assertEqual("Nil", f.body[0].type_name)

	def test_precedence_and_associativity(self):
		e = _expr("1 + 2 * 3 < 10 && x")
		self.assertEqual("&&", e.operator)
		self.assertEqual("<", e.left.operator)
		self.assertEqual("+", e.left.left.operator)
		self.assertEqual("*", e.left.left.right.operator)
		e = _expr("8 - 4 - 2")
		self.assertEqual("-", e.operator)
		self.assertIsInstance(e.left, syntax.Binary)
		self.assertEqual(2, e.right.value)
		e = _expr("2 ^ 3 ^ 2")
		self.assertIsInstance(e.left, syntax.Binary)

	def test_group(self):
		e = _expr("(1 + 2) * 3")
		self.assertIsInstance(e.left, syntax.Group)
		self.assertEqual("+", e.left.expression.operator)

	def test_literals(self):
		for text, value in [
			("true", True), ("FALSE", False), ("42", 42), ("3.25", Decimal("3.25")),
			("'q'", Character("q")), ('"hello"', "hello"),
		]:
			with self.subTest(text):
				e = _expr(text)
				self.assertIsInstance(e, syntax.Literal)
				self.assertEqual(value, e.value)
				self.assertIs(type(value), type(e.value))
		self.assertIsNone(_expr("nil").value)

	def test_escapes(self):
		self.assertEqual("a\n", _expr(r'"a\n"').value)
		self.assertEqual('say "hi"\t\\', _expr(r'"say \"hi\"\t\\"').value)
		self.assertEqual(Character("'"), _expr(r"'\''").value)
		self.assertEqual("\\n", _expr(r'"\\n"').value)

	def test_access_and_call(self):
		e = _expr("f(a, b[1], g())")
		self.assertIsInstance(e, syntax.Call)
		self.assertEqual("f", e.name)
		a, b, g = e.arguments
		self.assertIsNone(a.index)
		self.assertEqual(1, b.index.value)
		self.assertEqual([], g.arguments)

	def test_statements(self):
		body = _statements("""
			let x : Integer = 1;
			let y;
			x = x + 1;
			xs[0] = 2;
			print(x);
			if x > 1 do print(1); else print(2); end
			while x < 10 do x = x + 1; end
			switch x case 1: print("one"); case 2: default print("many"); end
			return x;
		""")
		kinds = [type(s) for s in body]
		self.assertEqual([
			syntax.Declaration, syntax.Declaration, syntax.Assignment, syntax.Assignment,
			syntax.ExpressionStatement, syntax.If, syntax.While, syntax.Switch, syntax.Return,
		], kinds)
		self.assertIsNone(body[1].value)
		self.assertEqual(0, body[3].receiver.index.value)
		switch = body[7]
		self.assertEqual(3, len(switch.cases))
		self.assertEqual([], switch.cases[1].body)
		self.assertTrue(switch.cases[-1].is_default())

	def test_if_without_else(self):
		stmt = _statements("if true do print(1); end")[0]
		self.assertEqual([], stmt.else_body)

class SyntaxErrorTests(unittest.TestCase):

	def test_rejects(self):
		for text in [
			"",
			"var x = 1;",
			"var x = 1 fun main() do end",
			"val x; fun main() do end",
			"list xs = []; fun main() do end",
			"list xs; fun main() do end",
			"fun main() do return 1 end",
			"fun main( do end",
			"fun f(a) do end",
			"fun f(a: Integer,) do end",
			"fun main() do print(1,); end",
			"list xs = [1, 2,]; fun main() do end",
			"fun main() do if true do else print(1); end end",
			"fun main() do switch 1 default end end",
			"fun main() do switch 1 case 1: print(1); end end",
			"fun main() do switch 1 case 1: print(1); default: print(2); end end",
			"fun main() do let end = 1; end",
			"fun main() do return 'ab'; end",
			r'fun main() do return "\q"; end',
			"fun main() do return (1; end",
			"fun main() do end garbage",
			"fun main() do print(1) end",
		]:
			with self.subTest(text):
				with self.assertRaises(PlumeParseError):
					_parse(text)

	def test_location(self):
		text = "fun main() do return 1 end"
		tokens = scan(text)
		with self.assertRaises(PlumeParseError) as cm:
			parse(tokens)
		self.assertEqual(7, cm.exception.position)
		self.assertEqual(text.index("end"), cm.exception.offset)

	def test_location_at_end_of_input(self):
		text = "fun main() do return 1;"
		tokens = scan(text)
		with self.assertRaises(PlumeParseError) as cm:
			parse(tokens)
		self.assertEqual(len(tokens), cm.exception.position)
		self.assertEqual(len(text), cm.exception.offset)

	def test_operator_must_be_an_operator(self):
		# A string token that happens to spell a semicolon is not a semicolon.
		tokens = scan("fun main() do return 1") + [Token(Kind.STRING, ";", 22)]
		with self.assertRaises(PlumeParseError):
			parse(tokens)

if __name__ == '__main__':
	unittest.main()
