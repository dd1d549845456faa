import unittest
from unittest import mock

from plume.diagnostics import Report, TooManyIssues
from plume.pipeline import run_program, check_program, Yuck
from lexicon import scan

class Silence(Report):
	def __init__(self):
		super().__init__(verbose=False, max_issues=30)
		self.complain_to_console = mock.Mock()

def _identify_problem(text:str):
	report = Silence()
	try:
		run_program(scan(text), report, output=mock.Mock(), text=text)
	except Yuck as ex:
		assert 0 == report.complain_to_console.call_count
		assert report.sick()
		return ex.args[0]
	else:
		return "failed to fail"

class PipelineTests(unittest.TestCase):

	def test_good_program(self):
		report = Silence()
		output = mock.Mock()
		text = """
			list squares : Integer = [0, 1, 4, 9];
			val label = "sum";
			fun main() do
				let i = 0;
				let total = 0;
				while i < 4 do total = total + squares[i]; i = i + 1; end
				print(label + "=" + total);
				return total;
			end
		"""
		self.assertEqual(14, run_program(scan(text), report, output=output, text=text))
		output.assert_called_once_with("sum=14")
		self.assertTrue(report.ok())

	def test_check_only(self):
		report = Silence()
		source = check_program(scan("fun main() do return 0; end"), report)
		self.assertEqual(("main", 0), source.functions[0].key())
		self.assertTrue(report.ok())

	def test_phases(self):
		for phase, text in [
			("parse", "fun main() do return 0 end"),
			("parse", "var x = 1;"),
			("type_check", "fun main() do return y; end"),
			("type_check", "fun main() do return f(1, 2); end fun f(a: Integer): Integer do return a; end"),
			("type_check", 'fun main() do return "a"; end'),
			("execute", "fun main() do return 1 / 0; end"),
			("execute", "list xs : Integer = [1]; fun main() do return xs[1]; end"),
			("execute", "fun main() do return 2 ^ (0 - 1); end"),
		]:
			with self.subTest(text):
				self.assertEqual(phase, _identify_problem(text))

	def test_issue_text(self):
		text = "fun main() do\n\treturn 0\nend"
		report = Silence()
		with self.assertRaises(Yuck):
			run_program(scan(text), report, text=text)
		issue, = report.issues
		self.assertIn("Expected ';'", issue.intro)
		self.assertIsInstance(issue.as_text(), str)

	def test_issue_without_text(self):
		report = Silence()
		with self.assertRaises(Yuck):
			run_program(scan("fun main() do return 0 end"), report)
		self.assertIn("offset", report.issues[0].as_text())

	def test_type_error_names_the_types(self):
		report = Silence()
		with self.assertRaises(Yuck):
			run_program(scan('fun main() do let x : Integer = "one"; return x; end'), report)
		text = report.issues[0].as_text()
		self.assertIn("Integer", text)
		self.assertIn("String", text)

	def test_verbose_report_talks(self):
		report = Report(verbose=1)
		with mock.patch("builtins.print") as fake_print:
			run_program(scan("fun main() do return 0; end"), report, output=mock.Mock())
		self.assertTrue(fake_print.called)

	def test_too_many_issues(self):
		report = Report(verbose=0, max_issues=1)
		with self.assertRaises(TooManyIssues):
			run_program(scan("fun main() do return 0 end"), report)

if __name__ == '__main__':
	unittest.main()
