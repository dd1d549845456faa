"""
The set of parse-nodes in simple form.
The parser calls these constructors directly; nothing here does any checking.
Class-level type annotations make peace with pycharm wherever later passes add fields:
the analyzer fills in `typ` on every expression and `binding` wherever a name is
defined or used, and both the interpreter and any back-end may read those.
"""
from typing import Optional, Sequence, Any

class Node:
	def __repr__(self):
		fields = ", ".join("%s=%r" % (k, v) for k, v in vars(self).items() if k not in ("typ", "binding"))
		return "%s(%s)" % (type(self).__name__, fields)

###############################################################################

class Expression(Node):
	typ = None  # Analyzer fills this in with a types.Type

class Literal(Expression):
	# None, bool, int, Decimal, Character, or str.
	def __init__(self, value: Any):
		self.value = value

class Group(Expression):
	def __init__(self, expression: Expression):
		self.expression = expression

class Binary(Expression):
	def __init__(self, operator: str, left: Expression, right: Expression):
		self.operator, self.left, self.right = operator, left, right

class Access(Expression):
	binding = None  # The analyzer's VariableSymbol
	def __init__(self, name: str, index: Optional[Expression] = None):
		self.name = name
		self.index = index

class Call(Expression):
	binding = None  # The analyzer's FunctionSymbol
	def __init__(self, name: str, arguments: Sequence[Expression] = ()):
		self.name = name
		self.arguments = list(arguments)

class ListLiteral(Expression):
	def __init__(self, values: Sequence[Expression]):
		self.values = list(values)

###############################################################################

class Statement(Node): pass

class ExpressionStatement(Statement):
	def __init__(self, expression: Expression):
		self.expression = expression

class Declaration(Statement):
	binding = None
	def __init__(self, name: str, type_name: Optional[str] = None, value: Optional[Expression] = None):
		self.name, self.type_name, self.value = name, type_name, value

class Assignment(Statement):
	def __init__(self, receiver: Expression, value: Expression):
		self.receiver = receiver
		self.value = value

class If(Statement):
	def __init__(self, condition: Expression, then_body: Sequence[Statement], else_body: Sequence[Statement] = ()):
		self.condition = condition
		self.then_body = list(then_body)
		self.else_body = list(else_body)

class Case(Node):
	""" A case with no value is the default; it must come last in its switch. """
	def __init__(self, value: Optional[Expression], body: Sequence[Statement]):
		self.value = value
		self.body = list(body)
	def is_default(self): return self.value is None

class Switch(Statement):
	def __init__(self, condition: Expression, cases: Sequence[Case]):
		self.condition = condition
		self.cases = list(cases)

class While(Statement):
	def __init__(self, condition: Expression, body: Sequence[Statement]):
		self.condition = condition
		self.body = list(body)

class Return(Statement):
	def __init__(self, value: Expression):
		self.value = value

###############################################################################

class Global(Node):
	binding = None
	def __init__(self, name: str, type_name: Optional[str], mutable: bool, value: Optional[Expression] = None):
		self.name = name
		self.type_name = type_name
		self.mutable = mutable
		self.value = value

	def is_list(self) -> bool:
		return isinstance(self.value, ListLiteral)

class Function(Node):
	binding = None
	def __init__(self, name: str, parameters: Sequence[tuple[str, str]], return_type_name: Optional[str], body: Sequence[Statement]):
		self.name = name
		self.parameters = list(parameters)
		self.return_type_name = return_type_name
		self.body = list(body)

	def arity(self) -> int: return len(self.parameters)
	def key(self) -> tuple[str, int]: return self.name, self.arity()

class Source(Node):
	def __init__(self, globals: Sequence[Global], functions: Sequence[Function]):
		self.globals = list(globals)
		self.functions = list(functions)
