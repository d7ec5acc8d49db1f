#   Copyright 2021-2023 Alexandre Grigoriev
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

from types import SimpleNamespace
from c_lexer import SUPPRESS_LEADING_SPACE, SUPPRESS_TRAILING_SPACE

default_layout = SimpleNamespace(
	indent_size=4,
	left_margin=0,
	lines_per_page=56,
	heading_width=70,
	line_width=78,
	)

### page_output assembles lexemes into lines and writes the lines in pages.
# Each page starts with a form feed and a heading with the source name and the page number.
# The heading is written before the first line which goes to a new page,
# thus an empty output doesn't get a heading at all
class page_output:
	TOTAL_LINES_WRITTEN = 0
	TOTAL_PAGES_WRITTEN = 0

	def __init__(self, fd, source_name='', config=default_layout):
		self.fd = fd
		self.config = config
		self.heading = source_name.ljust(config.heading_width)
		self.buffer = ''
		# Indentation depth in columns. Goes negative on unbalanced closing braces
		self.indentation = 0
		self.page_number = 1
		# The first line written will start a page
		self.lines_on_page = config.lines_per_page
		self.lines_written = 0
		return

	def indent(self):
		self.indentation += self.config.indent_size
		return

	def unindent(self):
		self.indentation -= self.config.indent_size
		return

	def append(self, lexeme, directive=0):
		if directive & SUPPRESS_LEADING_SPACE and self.buffer.endswith(' '):
			self.buffer = self.buffer[:-1]

		if self.buffer and \
			self.config.left_margin + max(self.indentation, 0) + len(self.buffer) + len(lexeme) > self.config.line_width:
			self.write_line(self.buffer)
			self.buffer = ''

		self.buffer += lexeme
		if not directive & SUPPRESS_TRAILING_SPACE:
			self.buffer += ' '
		return

	def write_line(self, text, indent=True):
		if self.lines_on_page >= self.config.lines_per_page:
			self.new_page()

		prefix = ' ' * self.config.left_margin
		if indent:
			prefix += ' ' * max(self.indentation, 0)
		text = text.rstrip()
		if text:
			text = prefix + text
		print(text, file=self.fd)

		self.lines_on_page += 1
		self.lines_written += 1
		page_output.TOTAL_LINES_WRITTEN += 1
		return

	def end_line(self, force_page=False):
		if force_page and self.lines_on_page > 0:
			self.new_page()
		if self.buffer:
			self.write_line(self.buffer)
			self.buffer = ''
		return

	def skip_line(self):
		self.end_line()
		self.write_line('')
		return

	def new_page(self):
		print('\f%sPAGE %d' % (self.heading, self.page_number), file=self.fd)
		self.page_number += 1
		self.lines_on_page = 0
		page_output.TOTAL_PAGES_WRITTEN += 1
		return

	### end_page makes the next line written start a new page
	def end_page(self):
		self.lines_on_page = self.config.lines_per_page
		return

	def output_directive(self, text):
		self.end_line()
		self.write_line(text, indent=False)
		return

	### output_error writes the message on its own line at the margin.
	# The partially assembled line stays pending and goes after the message
	def output_error(self, text):
		self.write_line(text, indent=False)
		return

	def pages_written(self):
		return self.page_number - 1

def print_stats(fd):
	print("Lines written: %d" % (page_output.TOTAL_LINES_WRITTEN), file=fd)
	print("Pages written: %d" % (page_output.TOTAL_PAGES_WRITTEN), file=fd)
