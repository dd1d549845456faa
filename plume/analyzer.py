"""
Static analysis: resolve every name, work out the type of every expression,
and make sure the types agree with each other. The tree is annotated in place:
every expression gets a `typ`, and every place that defines or uses a name
gets a `binding` to the corresponding symbol.

The analysis is one depth-first walk. A fresh scope gets pushed for each
function body, each branch of an IF, each case of a SWITCH, and each WHILE body.
It gets popped again on the way out, so nothing leaks between sibling blocks.

All function signatures are known before any function body is checked, so calls
may go forward or around in circles. A function written without a return type
takes its return type from its first RETURN. If a call needs that type before
the callee's body has come up, the callee gets analyzed right then.

The first problem raises PlumeTypeError; there is no attempt to continue.
"""
import math
from decimal import Decimal
from typing import Optional, Sequence
from boozetools.support.foundation import Visitor
from . import syntax
from .scope import Scope, AlreadyDefined, Undefined
from .types import (
	Type, ListType, TypeRegistry, PlumeTypeError, is_assignable, require_assignable,
	NIL, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING, ANY, COMPARABLE,
)
from .values import Character

INTEGER_MIN = -2**31
INTEGER_MAX = 2**31 - 1

LITERAL_TYPES = {
	type(None): NIL,
	bool: BOOLEAN,
	int: INTEGER,
	Decimal: DECIMAL,
	Character: CHARACTER,
	str: STRING,
}

# The first row whose operand types fit decides the type of the result.
# None in the result column means "the same as the left operand".
BINARY_RULES: dict[str, Sequence[tuple[Type, Type, Optional[Type]]]] = {
	"&&": [(BOOLEAN, BOOLEAN, BOOLEAN)],
	"||": [(BOOLEAN, BOOLEAN, BOOLEAN)],
	"<": [(COMPARABLE, COMPARABLE, BOOLEAN)],
	">": [(COMPARABLE, COMPARABLE, BOOLEAN)],
	"==": [(COMPARABLE, COMPARABLE, BOOLEAN)],
	"!=": [(COMPARABLE, COMPARABLE, BOOLEAN)],
	"+": [(STRING, ANY, STRING), (ANY, STRING, STRING), (INTEGER, INTEGER, INTEGER), (DECIMAL, DECIMAL, DECIMAL)],
	"-": [(INTEGER, INTEGER, INTEGER), (DECIMAL, DECIMAL, DECIMAL)],
	"*": [(INTEGER, INTEGER, INTEGER), (DECIMAL, DECIMAL, DECIMAL)],
	"/": [(INTEGER, INTEGER, INTEGER), (DECIMAL, DECIMAL, DECIMAL)],
	"^": [(INTEGER, INTEGER, None), (DECIMAL, INTEGER, None)],
}

class VariableSymbol:
	""" typ stays None while an untyped global waits for its initializer to be checked. """
	def __init__(self, name: str, typ: Optional[Type], mutable: bool):
		self.name, self.typ, self.mutable = name, typ, mutable
	def __repr__(self): return "{%s:%s}" % (self.name, self.typ)

class FunctionSymbol:
	is_on_stack = False
	def __init__(self, name: str, parameter_types: Sequence[Type], return_type: Optional[Type], function: Optional[syntax.Function] = None):
		self.name = name
		self.parameter_types = list(parameter_types)
		self.return_type = return_type
		self.function = function
		self.is_solved = function is None  # Built-ins have nothing to check.
	def arity(self): return len(self.parameter_types)
	def __repr__(self): return "{%s/%d}" % (self.name, self.arity())

def analyze(source: syntax.Source, registry: Optional[TypeRegistry] = None) -> syntax.Source:
	return Analyzer(registry).analyze(source)

class Analyzer(Visitor):
	_global: Scope[VariableSymbol | FunctionSymbol]
	_tos: Scope[VariableSymbol | FunctionSymbol]
	_function: Optional[FunctionSymbol]

	def __init__(self, registry: Optional[TypeRegistry] = None):
		self._registry = registry or TypeRegistry()

	def _reset(self):
		self._global = self._tos = Scope()
		self._global.define_function("print", 1, FunctionSymbol("print", [ANY], NIL))
		self._function = None

	def push(self):
		self._tos = self._tos.child()

	def pop(self):
		self._tos = self._tos.parent

	def check(self, expr: syntax.Expression) -> Type:
		expr.typ = self.visit(expr)
		return expr.typ

	def tour(self, items, *args):
		for i in items: self.visit(i, *args)

	def block(self, statements: Sequence[syntax.Statement]):
		self.push()
		self.tour(statements)
		self.pop()

	def analyze(self, source: syntax.Source) -> syntax.Source:
		self._reset()
		self.visit(source)
		return source

	def visit_Source(self, source: syntax.Source):
		for g in source.globals: self._declare_global(g)
		for fn in source.functions: self._declare_function(fn)
		self.tour(source.globals)
		for fn in source.functions: self._settle(fn.binding)
		main = self._lookup_function("main", 0)
		if not is_assignable(INTEGER, main.return_type):
			raise PlumeTypeError("The main/0 function must return Integer, not %s." % main.return_type, INTEGER, main.return_type)

	def _declare_global(self, g: syntax.Global):
		if g.is_list():
			typ = ListType(ANY if g.type_name is None else self._type(g.type_name))
		else:
			typ = None if g.type_name is None else self._type(g.type_name)
		g.binding = self._define_variable(VariableSymbol(g.name, typ, g.mutable))

	def _declare_function(self, fn: syntax.Function):
		parameter_types = [self._type(type_name) for _, type_name in fn.parameters]
		return_type = None if fn.return_type_name is None else self._type(fn.return_type_name)
		symbol = FunctionSymbol(fn.name, parameter_types, return_type, fn)
		try: self._global.define_function(fn.name, fn.arity(), symbol)
		except AlreadyDefined: raise PlumeTypeError("%s/%d is defined more than once." % fn.key()) from None
		fn.binding = symbol

	def visit_Global(self, g: syntax.Global):
		symbol = g.binding
		if g.value is None:
			if not g.mutable: raise PlumeTypeError("The value '%s' must be given its value." % g.name)
			if symbol.typ is None: raise PlumeTypeError("Global '%s' needs a type, an initial value, or both." % g.name)
			return
		if g.is_list(): g.value.typ = symbol.typ
		got = self.check(g.value)
		if symbol.typ is None: symbol.typ = got
		else: require_assignable(symbol.typ, got)

	def _settle(self, symbol: FunctionSymbol):
		"""
		Analyze a function body, unless that's already done or in progress.
		The body gets its own scope just inside the globals, regardless of
		where the analysis happened to be when the need arose.
		"""
		if symbol.is_solved or symbol.is_on_stack: return
		fn = symbol.function
		outer = self._tos, self._function
		self._tos, self._function = self._global.child(), symbol
		symbol.is_on_stack = True
		for (name, _), typ in zip(fn.parameters, symbol.parameter_types):
			self._define_variable(VariableSymbol(name, typ, True))
		self.tour(fn.body)
		if symbol.return_type is None: symbol.return_type = NIL
		symbol.is_on_stack = False
		symbol.is_solved = True
		self._tos, self._function = outer

	###############################################################################

	def visit_ExpressionStatement(self, stmt: syntax.ExpressionStatement):
		if not isinstance(stmt.expression, syntax.Call):
			raise PlumeTypeError("Only a function call can stand alone as a statement.")
		self.check(stmt.expression)

	def visit_Declaration(self, decl: syntax.Declaration):
		if decl.type_name is None and decl.value is None:
			raise PlumeTypeError("Variable '%s' needs a type, an initial value, or both." % decl.name)
		typ = None if decl.type_name is None else self._type(decl.type_name)
		if decl.value is not None:
			got = self.check(decl.value)
			if typ is None: typ = got
			else: require_assignable(typ, got)
		decl.binding = self._define_variable(VariableSymbol(decl.name, typ, True))

	def visit_Assignment(self, stmt: syntax.Assignment):
		if not isinstance(stmt.receiver, syntax.Access):
			raise PlumeTypeError("Only a variable or a list element can be assigned.")
		need = self.check(stmt.receiver)
		require_assignable(need, self.check(stmt.value))

	def visit_If(self, stmt: syntax.If):
		require_assignable(BOOLEAN, self.check(stmt.condition))
		self.block(stmt.then_body)
		self.block(stmt.else_body)

	def visit_Switch(self, stmt: syntax.Switch):
		condition = self.check(stmt.condition)
		if not stmt.cases or not stmt.cases[-1].is_default():
			raise PlumeTypeError("A switch must end with a default case.")
		for case in stmt.cases[:-1]:
			if case.is_default(): raise PlumeTypeError("Only the last case of a switch may be the default.")
		self.tour(stmt.cases, condition)

	def visit_Case(self, case: syntax.Case, condition: Type):
		if case.value is not None:
			require_assignable(condition, self.check(case.value))
		self.block(case.body)

	def visit_While(self, stmt: syntax.While):
		require_assignable(BOOLEAN, self.check(stmt.condition))
		self.block(stmt.body)

	def visit_Return(self, stmt: syntax.Return):
		got = self.check(stmt.value)
		function = self._function
		if function is None: raise PlumeTypeError("RETURN can only happen within a function.")
		if function.return_type is None: function.return_type = got
		else: require_assignable(function.return_type, got)

	###############################################################################

	@staticmethod
	def visit_Literal(expr: syntax.Literal) -> Type:
		value = expr.value
		try: typ = LITERAL_TYPES[type(value)]
		except KeyError: raise PlumeTypeError("A literal cannot be a %s." % type(value).__name__) from None
		if typ is INTEGER and not INTEGER_MIN <= value <= INTEGER_MAX:
			raise PlumeTypeError("The integer %d does not fit in 32 bits." % value)
		if typ is DECIMAL and math.isinf(float(value)):
			raise PlumeTypeError("The decimal %s is too large to represent." % value)
		return typ

	def visit_Group(self, expr: syntax.Group) -> Type:
		if not isinstance(expr.expression, syntax.Binary):
			raise PlumeTypeError("Parentheses may only group a binary expression.")
		return self.check(expr.expression)

	def visit_Binary(self, expr: syntax.Binary) -> Type:
		left, right = self.check(expr.left), self.check(expr.right)
		try: rules = BINARY_RULES[expr.operator]
		except KeyError: raise PlumeTypeError("There is no operator %r." % expr.operator) from None
		for need_left, need_right, result in rules:
			if is_assignable(need_left, left) and is_assignable(need_right, right):
				return left if result is None else result
		# Blame the right side if some rule accepts the left; otherwise blame the left.
		for need_left, need_right, _ in rules:
			if is_assignable(need_left, left):
				raise PlumeTypeError("Operator %s expected %s on the right, but got %s." % (expr.operator, need_right, right), need_right, right)
		need_left = rules[0][0]
		raise PlumeTypeError("Operator %s expected %s on the left, but got %s." % (expr.operator, need_left, left), need_left, left)

	def visit_Access(self, expr: syntax.Access) -> Type:
		symbol = expr.binding = self._lookup_variable(expr.name)
		if symbol.typ is None:
			raise PlumeTypeError("The type of '%s' is not yet known where it is used." % expr.name)
		if expr.index is None: return symbol.typ
		require_assignable(INTEGER, self.check(expr.index))
		if not isinstance(symbol.typ, ListType):
			raise PlumeTypeError("'%s' is a %s, not a list, so it cannot be indexed." % (expr.name, symbol.typ))
		return symbol.typ.element

	def visit_Call(self, expr: syntax.Call) -> Type:
		symbol = expr.binding = self._lookup_function(expr.name, len(expr.arguments))
		for argument, need in zip(expr.arguments, symbol.parameter_types):
			require_assignable(need, self.check(argument))
		if symbol.return_type is None:
			self._settle(symbol)
			if symbol.return_type is None:
				raise PlumeTypeError("Cannot tell yet what %s/%d returns. Please declare its return type." % (symbol.name, symbol.arity()))
		return symbol.return_type

	def visit_ListLiteral(self, expr: syntax.ListLiteral) -> Type:
		typ = expr.typ if isinstance(expr.typ, ListType) else ListType(ANY)
		for value in expr.values:
			got = self.check(value)
			if typ.element != ANY: require_assignable(typ.element, got)
		return typ

	###############################################################################

	def _type(self, name: str) -> Type:
		return self._registry.lookup(name)

	def _define_variable(self, symbol: VariableSymbol) -> VariableSymbol:
		try: return self._tos.define_variable(symbol.name, symbol)
		except AlreadyDefined: raise PlumeTypeError("'%s' is already defined in this scope." % symbol.name) from None

	def _lookup_variable(self, name: str) -> VariableSymbol:
		try: return self._tos.lookup_variable(name)
		except Undefined: raise PlumeTypeError("'%s' is not defined." % name) from None

	def _lookup_function(self, name: str, arity: int) -> FunctionSymbol:
		try: return self._tos.lookup_function(name, arity)
		except Undefined: raise PlumeTypeError("There is no function %s/%d." % (name, arity)) from None
