"""
Plume's notion of a name-space with support for nested scopes.

The analyzer and the interpreter each build their own chain of these:
the former binds names to symbols, the latter binds them to value cells.
Either way, a variable is keyed by its name, and a function is keyed by
its name and arity, so functions may overload on arity (but nothing else).
A child scope knows its parent, never the other way around, so a scope
lives exactly as long as whoever holds it: normally one block.
"""
from typing import Hashable, Iterable, Optional

class AlreadyDefined(KeyError): pass
class Undefined(KeyError): pass

class Layer[T]:
	""" Lightly enhanced dictionary: It does not like duplicate keys. """
	_symbol: dict[Hashable, T]

	def __init__(self):
		self._symbol = {}

	def __contains__(self, key: Hashable) -> bool:
		return key in self._symbol

	def symbol(self, key: Hashable) -> Optional[T]:
		return self._symbol.get(key)

	def mount(self, key: Hashable, symbol: T) -> T:
		if key in self._symbol:
			raise AlreadyDefined(key)
		else:
			self._symbol[key] = symbol
			return symbol

	def each_symbol(self) -> Iterable[T]:
		return self._symbol.values()


class Scope[T]:
	variables: Layer[T]
	functions: Layer[T]
	parent: Optional["Scope[T]"]

	def __init__(self, parent: Optional["Scope[T]"] = None):
		self.variables, self.functions = Layer(), Layer()
		self.parent = parent

	def child(self) -> "Scope[T]":
		return Scope(self)

	def define_variable(self, name: str, symbol: T) -> T:
		return self.variables.mount(name, symbol)

	def define_function(self, name: str, arity: int, symbol: T) -> T:
		return self.functions.mount((name, arity), symbol)

	def lookup_variable(self, name: str) -> T:
		return self._chase("variables", name)

	def lookup_function(self, name: str, arity: int) -> T:
		return self._chase("functions", (name, arity))

	def _chase(self, table: str, key: Hashable) -> T:
		scope = self
		while scope is not None:
			layer = getattr(scope, table)
			if key in layer: return layer.symbol(key)
			scope = scope.parent
		raise Undefined(key)
