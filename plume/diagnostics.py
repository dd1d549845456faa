import sys, random
from typing import Any, Optional, Sequence
from boozetools.support.failureprone import SourceText, illustration

from .front_end import PlumeParseError
from .types import PlumeTypeError
from .interpreter import PlumeRuntimeError

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]

	minced_oaths = [
		'Ack', 'Blargh', 'Confound it', 'Crud', 'Curses', "Crikey",
		'Dag Nabbit', 'Drat', 'Fiddlesticks', 'Good Grief', "Great Scott",
		'Jeepers', 'Heavens', "Mercy", 'Nuts', 'Rats', 'Woe is me',
	]

	resignations = [
		'I cannot continue.',
		'The pen has run dry.',
		'I have no idea what the right answer is.',
		'I need to ask for help.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Report:
	"""
	Collects what went wrong, phase by phase, and says so on the console.
	Each phase fails fast, so a run files at most one issue.
	"""
	_issues : list["Pic"]

	def __init__(self, *, verbose:int=0, max_issues=3):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	@property
	def issues(self) -> Sequence["Pic"]:
		return tuple(self._issues)

	def issue(self, it:Any):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

	# The parser's complaint comes with a location, so it can be illustrated.
	def syntax_error(self, pe:PlumeParseError, source:Optional[SourceText]):
		intro = "Plume got confused by the syntax: %s" % pe.message
		if source is None:
			problem = []
			footer = ["At offset %d (token %d)." % (pe.offset, pe.position)]
		else:
			problem = [Annotation(source, pe.offset, 1, "Plume got confused here")]
			footer = []
		self.issue(Pic(intro, problem, footer))

	def type_error(self, te:PlumeTypeError):
		intro = "Type-checking found a problem: %s" % te.message
		footer = []
		if te.need is not None:
			footer.append("Needed: %s" % te.need)
		if te.got is not None:
			footer.append("   Got: %s" % te.got)
		self.issue(Pic(intro, [], footer))

	def runtime_error(self, rte:PlumeRuntimeError):
		intro = "The program went wrong while running: %s" % rte.message
		self.issue(Pic(intro, []))

class Annotation:
	source: SourceText
	slice: slice
	caption: str
	def __init__(self, source:SourceText, offset:int, width:int=1, caption:str=""):
		self.source = source
		self.slice = slice(offset, offset + width)
		self.caption = caption
	def illustrate(self):
		row, col = self.source.find_row_col(self.slice.start)
		single_line = self.source.line_of_text(row)
		width = self.slice.stop - self.slice.start
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	@property
	def intro(self): return self._intro
	def as_text(self):
		lines = [self._intro, ""]
		lines.extend(ann.illustrate() for ann in self._anns)
		lines.extend(self._footer)
		return '\n'.join(lines)

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
