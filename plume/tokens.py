"""
The agreement between the scanner (which lives elsewhere) and the parser.
Keywords come through as identifiers; the parser sorts them out by spelling.
"""
from enum import Enum
from typing import NamedTuple

class Kind(Enum):
	IDENTIFIER = "identifier"
	INTEGER = "integer"
	DECIMAL = "decimal"
	CHARACTER = "character"
	STRING = "string"
	OPERATOR = "operator"

class Token(NamedTuple):
	kind: Kind
	literal: str
	offset: int   # Into the source text, counting characters from zero.

	def end(self) -> int: return self.offset + len(self.literal)

RESERVED = frozenset("""
	LIST VAR VAL FUN DO END IF ELSE SWITCH CASE DEFAULT WHILE RETURN LET TRUE FALSE NIL
""".split())

def is_keyword(token: Token, word: str) -> bool:
	return token.kind is Kind.IDENTIFIER and token.literal.upper() == word

def is_reserved(token: Token) -> bool:
	return token.kind is Kind.IDENTIFIER and token.literal.upper() in RESERVED
