"""
Run-time data. Basic primitive values play themselves:
integers are int, decimals are decimal.Decimal, flags are bool,
strings are str, and lists are ordinary Python lists.
Characters need a distinct type so they don't pass for strings,
and each interpreter mints its own nil.
"""

class Character(str):
	""" Exactly one character of text. """
	def __new__(cls, text: str):
		if len(text) != 1: raise ValueError("A Character holds exactly one character, not %r." % (text,))
		return super().__new__(cls, text)
	def __repr__(self): return "Character(%s)" % str.__repr__(self)

class Nil:
	def __repr__(self): return "nil"
	def __bool__(self): return False

def render(value) -> str:
	""" The text that `print` and string-concatenation produce for a value. """
	if isinstance(value, bool): return "true" if value else "false"
	if isinstance(value, Nil) or value is None: return "nil"
	if isinstance(value, list): return "[%s]" % ", ".join(map(render, value))
	return str(value)
