"""
Recursive-descent parser: tokens in, syntax tree out.

Each rule in the grammar has a method, and references to other rules become calls.
As with the scanner, `peek` and `match` do most of the work. A pattern is either
a token Kind, which matches on the kind of token, or a string, which matches on the
literal text. Keywords match without regard to letter-case; everything else must
match exactly.

There is no recovery: the first thing out of place ends the parse.
"""
import re
from decimal import Decimal
from typing import NoReturn, Optional, Sequence, Union
from boozetools.parsing.interface import ParseError
from . import syntax
from .tokens import Token, Kind, is_keyword, is_reserved
from .values import Character

PATTERN = Union[Kind, str]

class PlumeParseError(ParseError):
	"""
	`offset` locates the offending token in the source text; `position` is that
	token's index in the token list. Past the end of input, both point just past
	the last token.
	"""
	def __init__(self, message: str, offset: int, position: int):
		super().__init__(message, offset, position)
		self.message, self.offset, self.position = message, offset, position
	def __str__(self): return "%s (at offset %d)" % (self.message, self.offset)

_ESCAPES = {"\\": "\\", "'": "'", '"': '"', "b": "\b", "n": "\n", "r": "\r", "t": "\t"}
_BACKSLASH = re.compile(r"\\(.?)", re.DOTALL)

BLOCK_ENDS = ("CASE", "DEFAULT", "END", "ELSE")
LOGICAL = ("&&", "||")
COMPARISON = ("<", ">", "==", "!=")
ADDITIVE = ("+", "-")
MULTIPLICATIVE = ("*", "/", "^")

def parse(tokens: Sequence[Token]) -> syntax.Source:
	return Parser(tokens).parse_source()

class Parser:
	def __init__(self, tokens: Sequence[Token]):
		self._tokens = list(tokens)
		self._index = 0

	def parse_source(self) -> syntax.Source:
		globals = []
		while self.peek("LIST") or self.peek("VAR") or self.peek("VAL"):
			globals.append(self.parse_global())
		functions = [self.parse_function()]
		while self.peek("FUN"):
			functions.append(self.parse_function())
		if self._has():
			self._fail("Expected another function declaration or the end of the program.")
		return syntax.Source(globals, functions)

	def parse_global(self) -> syntax.Global:
		if self.match("LIST"): it = self._list()
		elif self.match("VAR"): it = self._mutable()
		elif self.match("VAL"): it = self._immutable()
		else: self._fail("Expected LIST, VAR, or VAL.")
		self._require(";", "Expected ';' after the declaration of '%s'." % it.name)
		return it

	def _list(self) -> syntax.Global:
		name = self._name("a name for the list")
		type_name = self._annotation()
		self._require("=", "A LIST needs '=' and then its elements.")
		self._require("[", "Expected '[' to begin the elements of the list.")
		values = self._expressions("]", allow_empty=False)
		return syntax.Global(name, type_name, True, syntax.ListLiteral(values))

	def _mutable(self) -> syntax.Global:
		name = self._name("a variable name")
		type_name = self._annotation()
		value = self.parse_expression() if self.match("=") else None
		return syntax.Global(name, type_name, True, value)

	def _immutable(self) -> syntax.Global:
		name = self._name("a value name")
		type_name = self._annotation()
		self._require("=", "A VAL must be given its value.")
		return syntax.Global(name, type_name, False, self.parse_expression())

	def parse_function(self) -> syntax.Function:
		self._require("FUN", "Expected a function declaration.")
		name = self._name("a function name")
		self._require("(", "Expected '(' to begin the parameters of '%s'." % name)
		parameters = []
		if not self.match(")"):
			parameters.append(self._parameter())
			while self.match(","):
				if self.peek(")"): self._fail("Trailing comma not allowed.")
				parameters.append(self._parameter())
			self._require(")", "Expected ',' or ')' in the parameters of '%s'." % name)
		return_type_name = self._annotation()
		self._require("DO", "Expected DO to begin the body of '%s'." % name)
		body = self.parse_block()
		self._require("END", "Expected END to finish the body of '%s'." % name)
		return syntax.Function(name, parameters, return_type_name, body)

	def _parameter(self) -> tuple[str, str]:
		name = self._name("a parameter name")
		self._require(":", "Parameter '%s' needs a type." % name)
		return name, self._type_name()

	def parse_block(self) -> list[syntax.Statement]:
		""" Statements, up to (but not including) whatever ends the block. """
		statements = []
		while self._has() and not any(self.peek(word) for word in BLOCK_ENDS):
			statements.append(self.parse_statement())
		return statements

	def parse_statement(self) -> syntax.Statement:
		if self.match("LET"): return self.parse_declaration()
		if self.match("SWITCH"): return self.parse_switch()
		if self.match("IF"): return self.parse_if()
		if self.match("WHILE"): return self.parse_while()
		if self.match("RETURN"): return self.parse_return()
		expression = self.parse_expression()
		if self.match("="):
			value = self.parse_expression()
			self._require(";", "Expected ';' after the assignment.")
			return syntax.Assignment(expression, value)
		self._require(";", "Expected ';' after the statement.")
		return syntax.ExpressionStatement(expression)

	# The statement-parsers below expect their leading keyword to be matched already.

	def parse_declaration(self) -> syntax.Declaration:
		name = self._name("a variable name")
		type_name = self._annotation()
		value = self.parse_expression() if self.match("=") else None
		self._require(";", "Expected ';' after the declaration of '%s'." % name)
		return syntax.Declaration(name, type_name, value)

	def parse_if(self) -> syntax.If:
		condition = self.parse_expression()
		self._require("DO", "Expected DO after the IF condition.")
		then_body = self.parse_block()
		if not then_body: self._fail("An IF needs at least one statement before ELSE or END.")
		else_body = self.parse_block() if self.match("ELSE") else []
		self._require("END", "Expected END to finish the IF.")
		return syntax.If(condition, then_body, else_body)

	def parse_switch(self) -> syntax.Switch:
		condition = self.parse_expression()
		if not self.peek("CASE"): self._fail("A SWITCH needs at least one CASE.")
		cases = []
		while self.match("CASE"):
			value = self.parse_expression()
			self._require(":", "Expected ':' after the CASE value.")
			cases.append(syntax.Case(value, self.parse_block()))
		self._require("DEFAULT", "A SWITCH needs a DEFAULT after its last CASE.")
		cases.append(syntax.Case(None, self.parse_block()))
		self._require("END", "Expected END to finish the SWITCH.")
		return syntax.Switch(condition, cases)

	def parse_while(self) -> syntax.While:
		condition = self.parse_expression()
		self._require("DO", "Expected DO after the WHILE condition.")
		body = self.parse_block()
		self._require("END", "Expected END to finish the WHILE.")
		return syntax.While(condition, body)

	def parse_return(self) -> syntax.Return:
		value = self.parse_expression()
		self._require(";", "Expected ';' after the RETURN value.")
		return syntax.Return(value)

	###############################################################################

	def parse_expression(self) -> syntax.Expression:
		return self.parse_logical()

	def parse_logical(self) -> syntax.Expression:
		return self._left_fold(LOGICAL, self.parse_comparison)

	def parse_comparison(self) -> syntax.Expression:
		return self._left_fold(COMPARISON, self.parse_additive)

	def parse_additive(self) -> syntax.Expression:
		return self._left_fold(ADDITIVE, self.parse_multiplicative)

	def parse_multiplicative(self) -> syntax.Expression:
		return self._left_fold(MULTIPLICATIVE, self.parse_primary)

	def _left_fold(self, operators, operand) -> syntax.Expression:
		left = operand()
		while any(self.peek(op) for op in operators):
			self._index += 1
			left = syntax.Binary(self._previous().literal, left, operand())
		return left

	def parse_primary(self) -> syntax.Expression:
		if self.match("TRUE"): return syntax.Literal(True)
		if self.match("FALSE"): return syntax.Literal(False)
		if self.match("NIL"): return syntax.Literal(None)
		if self.match(Kind.INTEGER): return syntax.Literal(self._number(int))
		if self.match(Kind.DECIMAL): return syntax.Literal(self._number(Decimal))
		if self.match(Kind.CHARACTER):
			text = self._unquote("'")
			if len(text) != 1: self._fail("A character literal holds exactly one character.", self._index - 1)
			return syntax.Literal(Character(text))
		if self.match(Kind.STRING): return syntax.Literal(self._unquote('"'))
		if self.match("("):
			inner = self.parse_expression()
			self._require(")", "Expected ')' to close the parenthesized expression.")
			return syntax.Group(inner)
		if self.peek(Kind.IDENTIFIER) and not is_reserved(self._get()):
			self._index += 1
			name = self._previous().literal
			if self.match("("):
				return syntax.Call(name, self._expressions(")", allow_empty=True))
			if self.match("["):
				index = self.parse_expression()
				self._require("]", "Expected ']' after the index into '%s'." % name)
				return syntax.Access(name, index)
			return syntax.Access(name)
		self._fail("Expected an expression.")

	def _number(self, kind):
		try: return kind(self._previous().literal)
		except (ValueError, ArithmeticError):
			self._fail("Malformed number.", self._index - 1)

	def _unquote(self, quote: str) -> str:
		literal = self._previous().literal
		if len(literal) < 2 or literal[0] != quote or literal[-1] != quote:
			self._fail("Malformed literal.", self._index - 1)
		def replace(m):
			try: return _ESCAPES[m.group(1)]
			except KeyError: self._fail("Unknown escape sequence %r." % m.group(0), self._index - 1)
		return _BACKSLASH.sub(replace, literal[1:-1])

	def _expressions(self, closer: str, allow_empty: bool) -> list[syntax.Expression]:
		values = []
		if allow_empty and self.match(closer): return values
		values.append(self.parse_expression())
		while self.match(","):
			if self.peek(closer): self._fail("Trailing comma not allowed.")
			values.append(self.parse_expression())
		self._require(closer, "Expected ',' or '%s'." % closer)
		return values

	def _annotation(self) -> Optional[str]:
		return self._type_name() if self.match(":") else None

	def _type_name(self) -> str:
		# Type names may coincide with keywords (Nil), so any identifier will do here.
		if self.match(Kind.IDENTIFIER): return self._previous().literal
		self._fail("Expected a type name.")

	def _name(self, what: str) -> str:
		if self.peek(Kind.IDENTIFIER) and not is_reserved(self._get()):
			self._index += 1
			return self._previous().literal
		self._fail("Expected %s." % what)

	###############################################################################

	def peek(self, *patterns: PATTERN) -> bool:
		for i, pattern in enumerate(patterns):
			if not self._has(i): return False
			token = self._get(i)
			if isinstance(pattern, Kind):
				if token.kind is not pattern: return False
			elif pattern.isalpha():
				if not is_keyword(token, pattern): return False
			elif token.kind is not Kind.OPERATOR or token.literal != pattern:
				return False
		return True

	def match(self, *patterns: PATTERN) -> bool:
		if self.peek(*patterns):
			self._index += len(patterns)
			return True
		return False

	def _require(self, pattern: PATTERN, message: str):
		if not self.match(pattern): self._fail(message)

	def _has(self, offset=0) -> bool:
		return self._index + offset < len(self._tokens)

	def _get(self, offset=0) -> Token:
		return self._tokens[self._index + offset]

	def _previous(self) -> Token:
		return self._tokens[self._index - 1]

	def _fail(self, message: str, position: Optional[int] = None) -> NoReturn:
		if position is None: position = self._index
		if position < len(self._tokens): offset = self._tokens[position].offset
		elif self._tokens: offset = self._tokens[-1].end()
		else: offset = 0
		raise PlumeParseError(message, offset, position)
