"""
Just enough of a scanner to feed the parser in tests.
The real scanner lives outside this package.
"""
import re
from plume.tokens import Token, Kind

_RULES = [
	(None, r"\s+|//[^\n]*"),
	(Kind.DECIMAL, r"\d+\.\d+"),
	(Kind.INTEGER, r"\d+"),
	(Kind.CHARACTER, r"'(?:\\.|[^'\\\n])*'"),
	(Kind.STRING, r'"(?:\\.|[^"\\\n])*"'),
	(Kind.IDENTIFIER, r"[A-Za-z_]\w*"),
	(Kind.OPERATOR, r"&&|\|\||==|!=|[-+*/^<>=;:,()\[\]]"),
]
_PATTERN = re.compile("|".join("(%s)" % rx for _, rx in _RULES))

def scan(text:str) -> list[Token]:
	tokens = []
	position = 0
	while position < len(text):
		m = _PATTERN.match(text, position)
		if m is None:
			raise ValueError("Cannot scan %r at offset %d" % (text[position], position))
		kind = _RULES[m.lastindex - 1][0]
		if kind is not None:
			tokens.append(Token(kind, m.group(), position))
		position = m.end()
	return tokens
