"""
The static type domain.

Types are nominal, save for two supertypes: `Any` accepts everything,
and `Comparable` accepts exactly the four kinds of data with a natural order.
A LIST global gets a ListType, which carries the type of its elements.
"""
from typing import Optional
from boozetools.parsing.interface import SemanticError

class PlumeTypeError(SemanticError):
	"""
	The analyzer's one and only complaint. `need` and `got` are the
	types involved, when the problem is a disagreement over types.
	"""
	def __init__(self, message: str, need: Optional["Type"] = None, got: Optional["Type"] = None):
		super().__init__(message, need, got)
		self.message, self.need, self.got = message, need, got
	def __str__(self): return self.message

class Type:
	def __init__(self, name: str):
		self.name = name
	def __repr__(self): return self.name
	def __str__(self): return self.name

class ListType(Type):
	def __init__(self, element: Type):
		super().__init__("List<%s>" % element)
		self.element = element
	def __eq__(self, other):
		return isinstance(other, ListType) and self.element == other.element
	def __hash__(self): return hash(("List", self.element))

NIL = Type("Nil")
BOOLEAN = Type("Boolean")
INTEGER = Type("Integer")
DECIMAL = Type("Decimal")
CHARACTER = Type("Character")
STRING = Type("String")
ANY = Type("Any")
COMPARABLE = Type("Comparable")

COMPARABLE_TYPES = frozenset([INTEGER, DECIMAL, CHARACTER, STRING])

class TypeRegistry:
	""" Maps the names that appear in source text onto types. Each analyzer owns one. """
	def __init__(self):
		self._types = {}
		for typ in (NIL, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING, ANY, COMPARABLE):
			self.register(typ.name, typ)

	def register(self, name: str, typ: Type):
		self._types[name] = typ

	def __contains__(self, name: str) -> bool:
		return name in self._types

	def lookup(self, name: str) -> Type:
		try: return self._types[name]
		except KeyError: raise PlumeTypeError("There is no type called %r." % name) from None

def is_assignable(target: Type, source: Type) -> bool:
	if target == source: return True
	if target == ANY: return True
	if target == COMPARABLE: return source in COMPARABLE_TYPES
	return False

def require_assignable(target: Type, source: Type):
	if not is_assignable(target, source):
		raise PlumeTypeError("Expected %s, but got %s." % (target, source), target, source)
