import unittest

from plume.scope import Scope, Layer, AlreadyDefined, Undefined

class LayerTests(unittest.TestCase):

	def test_mount_once(self):
		layer = Layer()
		self.assertEqual("one", layer.mount("x", "one"))
		self.assertIn("x", layer)
		self.assertEqual("one", layer.symbol("x"))
		self.assertIsNone(layer.symbol("y"))
		with self.assertRaises(AlreadyDefined):
			layer.mount("x", "two")
		self.assertEqual(["one"], list(layer.each_symbol()))

class ScopeTests(unittest.TestCase):

	def test_lookup_chases_parents(self):
		outer = Scope()
		outer.define_variable("x", "outer x")
		inner = outer.child()
		inner.define_variable("y", "inner y")
		self.assertEqual("outer x", inner.lookup_variable("x"))
		self.assertEqual("inner y", inner.lookup_variable("y"))
		with self.assertRaises(Undefined):
			outer.lookup_variable("y")

	def test_inner_shadows_outer(self):
		outer = Scope()
		outer.define_variable("x", 1)
		inner = outer.child()
		inner.define_variable("x", 2)
		self.assertEqual(2, inner.lookup_variable("x"))
		self.assertEqual(1, outer.lookup_variable("x"))

	def test_duplicate_in_one_scope(self):
		scope = Scope()
		scope.define_variable("x", 1)
		with self.assertRaises(AlreadyDefined):
			scope.define_variable("x", 2)

	def test_functions_key_on_arity(self):
		scope = Scope()
		scope.define_function("f", 0, "nullary")
		scope.define_function("f", 2, "binary")
		inner = scope.child()
		self.assertEqual("nullary", inner.lookup_function("f", 0))
		self.assertEqual("binary", inner.lookup_function("f", 2))
		with self.assertRaises(Undefined):
			inner.lookup_function("f", 1)
		with self.assertRaises(AlreadyDefined):
			scope.define_function("f", 2, "again")

	def test_variables_and_functions_are_separate(self):
		scope = Scope()
		scope.define_variable("f", "variable")
		scope.define_function("f", 0, "function")
		self.assertEqual("variable", scope.lookup_variable("f"))
		self.assertEqual("function", scope.lookup_function("f", 0))

if __name__ == '__main__':
	unittest.main()
