"""
Tests for page_output

Run with: pytest tests/test_page_output.py -v
"""

import io
from types import SimpleNamespace
import pytest

from c_lexer import SUPPRESS_NEITHER_SPACE, SUPPRESS_LEADING_SPACE, SUPPRESS_TRAILING_SPACE, SUPPRESS_BOTH_SPACES
from page_output import page_output, default_layout, print_stats

def layout(**kwargs):
	config = SimpleNamespace(**vars(default_layout))
	for key, value in kwargs.items():
		setattr(config, key, value)
	return config

HEADING = '\fname' + ' ' * 66 + 'PAGE 1\n'

class TestLines:

	@pytest.fixture
	def out(self):
		return io.StringIO()

	@pytest.fixture
	def page(self, out):
		return page_output(out, 'name')

	def test_heading_before_first_line(self, page, out):
		page.append('int')
		page.append('x')
		page.end_line()
		assert out.getvalue() == HEADING + 'int x\n'

	def test_no_output_no_heading(self, page, out):
		page.end_line()
		assert out.getvalue() == ''

	def test_spacing_directives(self, page, out):
		page.append('f')
		page.append('(', SUPPRESS_BOTH_SPACES)
		page.append('x')
		page.append(')', SUPPRESS_LEADING_SPACE)
		page.append(';', SUPPRESS_LEADING_SPACE)
		page.append('-', SUPPRESS_TRAILING_SPACE)
		page.append('1', SUPPRESS_NEITHER_SPACE)
		page.end_line()
		assert out.getvalue() == HEADING + 'f(x); -1\n'

	def test_indentation(self, page, out):
		page.indent()
		page.append('a')
		page.end_line()
		page.indent()
		page.append('b')
		page.end_line()
		page.unindent()
		page.unindent()
		page.append('c')
		page.end_line()
		assert out.getvalue() == HEADING + '    a\n        b\nc\n'

	def test_negative_indentation(self, page, out):
		page.unindent()
		page.append('}')
		page.end_line()
		assert page.indentation == -4
		assert out.getvalue() == HEADING + '}\n'

	def test_skip_line(self, page, out):
		page.append('a')
		page.skip_line()
		page.append('b')
		page.end_line()
		assert out.getvalue() == HEADING + 'a\n\nb\n'

	def test_directive_at_margin(self, page, out):
		page.indent()
		page.append('a')
		page.output_directive('#define A 1')
		assert out.getvalue() == HEADING + '    a\n#define A 1\n'

	def test_error_keeps_pending_line(self, page, out):
		page.indent()
		page.append('x')
		page.output_error('MISSING SEMICOLON')
		page.end_line()
		assert out.getvalue() == HEADING + 'MISSING SEMICOLON\n    x\n'

	def test_left_margin(self, out):
		page = page_output(out, 'name', layout(left_margin=2))
		page.append('a')
		page.output_directive('#x')
		assert out.getvalue() == HEADING + '  a\n  #x\n'

class TestWidth:

	def test_wrap_at_width(self):
		out = io.StringIO()
		page = page_output(out, '', layout(line_width=10, heading_width=0))
		for lexeme in ('aaaa', 'bbbb', 'cccc'):
			page.append(lexeme)
		page.end_line()
		assert out.getvalue() == '\fPAGE 1\naaaa bbbb\ncccc\n'

	def test_wrap_counts_indentation(self):
		out = io.StringIO()
		page = page_output(out, '', layout(line_width=12, heading_width=0))
		page.indent()
		for lexeme in ('aaaa', 'bbbb', 'cccc'):
			page.append(lexeme)
		page.end_line()
		assert out.getvalue() == '\fPAGE 1\n    aaaa\n    bbbb\n    cccc\n'

	def test_long_lexeme_not_split(self):
		out = io.StringIO()
		page = page_output(out, '', layout(line_width=10, heading_width=0))
		page.append('a_very_long_identifier')
		page.end_line()
		assert out.getvalue() == '\fPAGE 1\na_very_long_identifier\n'

class TestPages:

	@pytest.fixture
	def out(self):
		return io.StringIO()

	@pytest.fixture
	def page(self, out):
		return page_output(out, 'ab', layout(lines_per_page=2, heading_width=4))

	def write_lines(self, page, *lines):
		for line in lines:
			page.append(line)
			page.end_line()
			continue
		return

	def test_page_break(self, page, out):
		self.write_lines(page, 'l1', 'l2', 'l3')
		assert out.getvalue() == '\fab  PAGE 1\nl1\nl2\n\fab  PAGE 2\nl3\n'
		assert page.pages_written() == 2
		assert page.lines_written == 3

	def test_directive_counts_toward_page(self, page, out):
		page.output_directive('#if 1')
		page.output_error('MISSING COLON')
		self.write_lines(page, 'x')
		assert out.getvalue() == '\fab  PAGE 1\n#if 1\nMISSING COLON\n\fab  PAGE 2\nx\n'

	def test_forced_page(self, page, out):
		self.write_lines(page, 'l1')
		page.append('f')
		page.end_line(True)
		assert out.getvalue() == '\fab  PAGE 1\nl1\n\fab  PAGE 2\nf\n'

	def test_forced_page_on_fresh_page(self, page, out):
		page.new_page()
		page.append('f')
		page.end_line(True)
		assert out.getvalue() == '\fab  PAGE 1\nf\n'

	def test_end_page(self, page, out):
		self.write_lines(page, 'l1')
		page.end_page()
		self.write_lines(page, 'l2')
		assert out.getvalue() == '\fab  PAGE 1\nl1\n\fab  PAGE 2\nl2\n'

	def test_stats(self, page):
		self.write_lines(page, 'l1', 'l2', 'l3')
		fd = io.StringIO()
		print_stats(fd)
		assert 'Lines written: ' in fd.getvalue()
		assert 'Pages written: ' in fd.getvalue()
