"""
The tree-walking run-time.

Expressions evaluate to values. Statements evaluate to a Completion, which says
whether the statement simply finished or executed a RETURN. Every block checks
that after each statement and stops early on a Returned, passing it outward.
The function-call boundary is the only place that turns a Returned back into a
plain value. Python exceptions are for errors only: PlumeRuntimeError ends
the whole run.

The active scope is an explicit argument to every visit. Each block, each call,
and each trip around a WHILE loop gets a fresh child scope, which is simply
dropped when that block is done.

This does not trust the analyzer: it resolves names against its own scopes
and checks the kinds of values as it goes.
"""
from decimal import Decimal, Context, MAX_PREC, ROUND_HALF_EVEN
from typing import Callable, Sequence
from boozetools.support.foundation import Visitor
from . import syntax
from .scope import Scope, AlreadyDefined, Undefined
from .values import Character, Nil, render

class PlumeRuntimeError(Exception):
	def __init__(self, message: str):
		super().__init__(message)
		self.message = message

###############################################################################

class Completion:
	""" What became of a statement. """
	returned = False

class Completed(Completion):
	def __repr__(self): return "COMPLETED"

COMPLETED = Completed()

class Returned(Completion):
	returned = True
	def __init__(self, value):
		self.value = value
	def __repr__(self): return "Returned(%r)" % (self.value,)

###############################################################################

class Variable:
	""" A value cell, as bound in a run-time scope. """
	def __init__(self, name: str, mutable: bool, value):
		self.name, self.mutable, self.value = name, mutable, value

class Function:
	""" A run-time object that can be applied with arguments. """
	def __init__(self, name: str, arity: int):
		self.name, self.arity = name, arity
	def invoke(self, args: Sequence): raise NotImplementedError(type(self))

class Closure(Function):
	""" A user-defined function, tied to the scope where it was defined. """
	def __init__(self, interpreter: "Interpreter", function: syntax.Function, natal: Scope):
		super().__init__(function.name, function.arity())
		self._interpreter = interpreter
		self._function = function
		self._natal = natal

	def invoke(self, args: Sequence):
		inner = self._natal.child()
		for (name, _), value in zip(self._function.parameters, args):
			self._interpreter.define(inner, Variable(name, True, value))
		outcome = self._interpreter.execute(self._function.body, inner)
		return outcome.value if outcome.returned else self._interpreter.nil

class Primitive(Function):
	def __init__(self, name: str, arity: int, fn: Callable):
		super().__init__(name, arity)
		self._fn = fn
	def invoke(self, args: Sequence):
		return self._fn(*args)

###############################################################################
# Operator semantics. Each table is keyed on the operator and the Python types
# of both operands; a missing entry means the operands are not suitable.

EXACT = Context(prec=MAX_PREC, rounding=ROUND_HALF_EVEN)
KINDS = (bool, int, Decimal, Character, str, list, Nil)
KIND_NAMES = {bool: "Boolean", int: "Integer", Decimal: "Decimal", Character: "Character", str: "String", list: "List", Nil: "Nil"}
COMPARABLE_KINDS = (int, Decimal, Character, str)

def _int_divide(a: int, b: int) -> int:
	if b == 0: raise PlumeRuntimeError("Division by zero.")
	quotient = abs(a) // abs(b)
	return -quotient if (a < 0) != (b < 0) else quotient

def _decimal_divide(a: Decimal, b: Decimal) -> Decimal:
	""" The quotient, at the scale of the dividend, rounding half to even. """
	if b.is_zero(): raise PlumeRuntimeError("Division by zero.")
	# Find integers n/d equal to a / b / 10**exponent, then round that to an integer.
	sign_a, digits_a, exponent = a.as_tuple()
	sign_b, digits_b, exponent_b = b.as_tuple()
	n = int("".join(map(str, digits_a)))
	d = int("".join(map(str, digits_b)))
	if exponent_b >= 0: d *= 10 ** exponent_b
	else: n *= 10 ** -exponent_b
	quotient, remainder = divmod(n, d)
	if 2 * remainder > d or (2 * remainder == d and quotient % 2 == 1): quotient += 1
	negative = sign_a != sign_b and quotient != 0
	return Decimal((1 if negative else 0, tuple(map(int, str(quotient))), exponent))

def _int_power(base: int, exponent: int) -> int:
	if exponent < 0: raise PlumeRuntimeError("Negative exponent %d." % exponent)
	result = 1
	for _ in range(exponent): result *= base
	return result

def _decimal_power(base: Decimal, exponent: int) -> Decimal:
	if exponent < 0: raise PlumeRuntimeError("Negative exponent %d." % exponent)
	result = Decimal(1)
	for _ in range(exponent): result = EXACT.multiply(result, base)
	return result

def _concatenate(a, b) -> str:
	return render(a) + render(b)

ARITHMETIC = {
	("+", int, int): lambda a, b: a + b,
	("-", int, int): lambda a, b: a - b,
	("*", int, int): lambda a, b: a * b,
	("/", int, int): _int_divide,
	("^", int, int): _int_power,
	("+", Decimal, Decimal): EXACT.add,
	("-", Decimal, Decimal): EXACT.subtract,
	("*", Decimal, Decimal): EXACT.multiply,
	("/", Decimal, Decimal): _decimal_divide,
	("^", Decimal, int): _decimal_power,
}
for _kind in KINDS:
	ARITHMETIC["+", str, _kind] = _concatenate
	ARITHMETIC["+", _kind, str] = _concatenate

RELATIONS = {
	"<": lambda a, b: a < b,
	">": lambda a, b: a > b,
	"==": lambda a, b: a == b,
	"!=": lambda a, b: a != b,
}
COMPARISON = {
	(op, kind, kind): relation
	for op, relation in RELATIONS.items()
	for kind in COMPARABLE_KINDS
}

SHORTCUT = {
	"&&": False,
	"||": True,
}

def kind_of(value) -> type:
	kind = type(value)
	if kind not in KIND_NAMES: raise PlumeRuntimeError("Not a value of this language: %r" % (value,))
	return kind

def same_value(a, b) -> bool:
	""" Switch-case equality: values of different kinds never match. """
	return type(a) is type(b) and a == b

###############################################################################

def run(source: syntax.Source, output: Callable[[str], None] = print) -> int:
	return Interpreter(output).run(source)

class Interpreter(Visitor):
	"""
	`output` receives the text of each call to `print`.
	Each interpreter has its own `nil` and its own `print`, so several may run
	side by side without interfering. Every run starts from fresh globals.
	"""
	def __init__(self, output: Callable[[str], None] = print):
		self.nil = Nil()
		self._output = output
		self.globals = None

	def _reset(self):
		self.globals = Scope()
		self.define_function(self.globals, Primitive("print", 1, self._print))

	def _print(self, value):
		self._output(render(value))
		return self.nil

	def run(self, source: syntax.Source) -> int:
		self._reset()
		self.visit(source)
		main = self.lookup_function(self.globals, "main", 0)
		result = main.invoke(())
		if type(result) is not int:
			raise PlumeRuntimeError("main() produced %s instead of an integer." % render(result))
		return result

	def visit_Source(self, source: syntax.Source):
		for g in source.globals: self.visit(g, self.globals)
		for fn in source.functions: self.visit(fn, self.globals)

	def visit_Global(self, g: syntax.Global, scope: Scope):
		if g.value is None:
			if not g.mutable: raise PlumeRuntimeError("Immutable '%s' needs a value." % g.name)
			value = self.nil
		else:
			value = self.evaluate(g.value, scope)
		self.define(scope, Variable(g.name, g.mutable, value))

	def visit_Function(self, fn: syntax.Function, scope: Scope):
		self.define_function(scope, Closure(self, fn, scope))

	###############################################################################

	def execute(self, statements: Sequence[syntax.Statement], scope: Scope) -> Completion:
		""" Run statements in order, stopping early on a RETURN. """
		for statement in statements:
			outcome = self.visit(statement, scope)
			if outcome.returned: return outcome
		return COMPLETED

	def visit_ExpressionStatement(self, stmt: syntax.ExpressionStatement, scope: Scope) -> Completion:
		self.evaluate(stmt.expression, scope)
		return COMPLETED

	def visit_Declaration(self, decl: syntax.Declaration, scope: Scope) -> Completion:
		value = self.nil if decl.value is None else self.evaluate(decl.value, scope)
		self.define(scope, Variable(decl.name, True, value))
		return COMPLETED

	def visit_Assignment(self, stmt: syntax.Assignment, scope: Scope) -> Completion:
		receiver = stmt.receiver
		if not isinstance(receiver, syntax.Access):
			raise PlumeRuntimeError("Cannot assign to a %s." % type(receiver).__name__)
		variable = self.lookup_variable(scope, receiver.name)
		if not variable.mutable:
			raise PlumeRuntimeError("'%s' is immutable." % receiver.name)
		if receiver.index is None:
			variable.value = self.evaluate(stmt.value, scope)
		else:
			items = self._list_of(variable)
			index = self._index(receiver, items, scope)
			items[index] = self.evaluate(stmt.value, scope)
		return COMPLETED

	def visit_If(self, stmt: syntax.If, scope: Scope) -> Completion:
		branch = stmt.then_body if self._condition(stmt.condition, scope) else stmt.else_body
		return self.execute(branch, scope.child())

	def visit_Switch(self, stmt: syntax.Switch, scope: Scope) -> Completion:
		subject = self.evaluate(stmt.condition, scope)
		for case in stmt.cases:
			if case.is_default() or same_value(subject, self.evaluate(case.value, scope)):
				return self.execute(case.body, scope.child())
		return COMPLETED

	def visit_While(self, stmt: syntax.While, scope: Scope) -> Completion:
		while self._condition(stmt.condition, scope):
			outcome = self.execute(stmt.body, scope.child())
			if outcome.returned: return outcome
		return COMPLETED

	def visit_Return(self, stmt: syntax.Return, scope: Scope) -> Completion:
		return Returned(self.evaluate(stmt.value, scope))

	###############################################################################

	def evaluate(self, expr: syntax.Expression, scope: Scope):
		return self.visit(expr, scope)

	def visit_Literal(self, expr: syntax.Literal, scope: Scope):
		return self.nil if expr.value is None else expr.value

	def visit_Group(self, expr: syntax.Group, scope: Scope):
		return self.evaluate(expr.expression, scope)

	def visit_Binary(self, expr: syntax.Binary, scope: Scope):
		op = expr.operator
		if op in SHORTCUT:
			left = self._require_flag(self.evaluate(expr.left, scope), op)
			if left == SHORTCUT[op]: return left
			return self._require_flag(self.evaluate(expr.right, scope), op)
		left = self.evaluate(expr.left, scope)
		right = self.evaluate(expr.right, scope)
		signature = op, kind_of(left), kind_of(right)
		if signature in COMPARISON: return COMPARISON[signature](left, right)
		if signature in ARITHMETIC: return ARITHMETIC[signature](left, right)
		raise PlumeRuntimeError("Operator %s does not apply to %s and %s." % (op, KIND_NAMES[signature[1]], KIND_NAMES[signature[2]]))

	def visit_Access(self, expr: syntax.Access, scope: Scope):
		variable = self.lookup_variable(scope, expr.name)
		if expr.index is None: return variable.value
		items = self._list_of(variable)
		return items[self._index(expr, items, scope)]

	def visit_Call(self, expr: syntax.Call, scope: Scope):
		args = [self.evaluate(a, scope) for a in expr.arguments]
		function = self.lookup_function(scope, expr.name, len(args))
		return function.invoke(args)

	def visit_ListLiteral(self, expr: syntax.ListLiteral, scope: Scope):
		return [self.evaluate(v, scope) for v in expr.values]

	###############################################################################

	def _condition(self, expr: syntax.Expression, scope: Scope) -> bool:
		value = self.evaluate(expr, scope)
		if type(value) is not bool:
			raise PlumeRuntimeError("A condition must be true or false, not %s." % render(value))
		return value

	@staticmethod
	def _require_flag(value, op: str) -> bool:
		if type(value) is not bool:
			raise PlumeRuntimeError("Operator %s needs true or false, not %s." % (op, render(value)))
		return value

	@staticmethod
	def _list_of(variable: Variable) -> list:
		if type(variable.value) is not list:
			raise PlumeRuntimeError("'%s' is not a list." % variable.name)
		return variable.value

	def _index(self, expr: syntax.Access, items: list, scope: Scope) -> int:
		index = self.evaluate(expr.index, scope)
		if type(index) is not int:
			raise PlumeRuntimeError("A list index must be an integer, not %s." % render(index))
		if not 0 <= index < len(items):
			raise PlumeRuntimeError("Index %d is out of range for '%s', which has %d elements." % (index, expr.name, len(items)))
		return index

	@staticmethod
	def define(scope: Scope, variable: Variable):
		try: scope.define_variable(variable.name, variable)
		except AlreadyDefined: raise PlumeRuntimeError("'%s' is already defined in this scope." % variable.name) from None

	@staticmethod
	def define_function(scope: Scope, function: Function):
		try: scope.define_function(function.name, function.arity, function)
		except AlreadyDefined: raise PlumeRuntimeError("%s/%d is already defined." % (function.name, function.arity)) from None

	@staticmethod
	def lookup_variable(scope: Scope, name: str) -> Variable:
		try: return scope.lookup_variable(name)
		except Undefined: raise PlumeRuntimeError("'%s' is not defined." % name) from None

	@staticmethod
	def lookup_function(scope: Scope, name: str, arity: int) -> Function:
		try: return scope.lookup_function(name, arity)
		except Undefined: raise PlumeRuntimeError("There is no function %s/%d." % (name, arity)) from None
