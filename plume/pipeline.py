"""
Glue for a host: runs parse, type-check, and execution in order under a Report.

Each phase stops at its first error. That error is filed with the report, and
then `Yuck` says which phase it was. Nothing here prints; a host that wants the
console treatment can call `report.complain_to_console()` itself.
"""
from typing import Callable, Optional, Sequence
from boozetools.support.failureprone import SourceText

from . import syntax
from .tokens import Token
from .front_end import parse, PlumeParseError
from .types import PlumeTypeError
from .analyzer import Analyzer
from .interpreter import Interpreter, PlumeRuntimeError
from .diagnostics import Report

class Yuck(Exception):
	"""
	The first argument will be the name of the phase fraught with error:
	"parse", "type_check", or "execute".
	"""
	pass

def check_program(tokens:Sequence[Token], report:Report, text:Optional[str]=None) -> syntax.Source:
	""" Parse and type-check, but do not run. """
	report.info("Parsing %d tokens." % len(tokens))
	try: source = parse(tokens)
	except PlumeParseError as pe:
		report.syntax_error(pe, None if text is None else SourceText(text))
		raise Yuck("parse")
	report.info("Checking types of %d global(s) and %d function(s)." % (len(source.globals), len(source.functions)))
	try: Analyzer().analyze(source)
	except PlumeTypeError as te:
		report.type_error(te)
		raise Yuck("type_check")
	report.assert_no_issues("A phase reported an error but failed to fail.")
	return source

def run_program(tokens:Sequence[Token], report:Report, output:Callable[[str], None]=print, text:Optional[str]=None) -> int:
	""" Parse, type-check, and run; the answer is what main() returns. """
	source = check_program(tokens, report, text)
	report.info("Running.")
	try: result = Interpreter(output).run(source)
	except PlumeRuntimeError as rte:
		report.runtime_error(rte)
		raise Yuck("execute")
	report.info("main() returned %d." % result)
	return result
