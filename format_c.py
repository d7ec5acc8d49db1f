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

import sys
import io
from types import SimpleNamespace
from pathlib import Path

if sys.version_info < (3, 8):
	sys.exit("format_c: This package requires Python 3.8+")

from exceptions import Exception_cfg_parse
from c_lexer import c_lexer, print_to_stderr
from c_formatter import c_formatter, print_stats as formatter_stats
from page_output import page_output, print_stats as output_stats

def make_config(indent_size=4,
				left_margin=0,
				lines_per_page=56,
				heading_width=70,
				line_width=78,
				log_tokens=False):
	if indent_size < 1:
		raise Exception_cfg_parse("Indent size must be at least 1, got %d" % indent_size)
	if left_margin < 0:
		raise Exception_cfg_parse("Left margin can't be negative, got %d" % left_margin)
	if lines_per_page < 1:
		raise Exception_cfg_parse("Page length must be at least 1 line, got %d" % lines_per_page)
	if heading_width < 0:
		raise Exception_cfg_parse("Heading width can't be negative, got %d" % heading_width)
	if line_width < 10:
		raise Exception_cfg_parse("Line width must be at least 10 characters, got %d" % line_width)

	return SimpleNamespace(
		indent_size=indent_size,
		left_margin=left_margin,
		lines_per_page=lines_per_page,
		heading_width=heading_width,
		line_width=line_width,
		log_tokens=log_tokens,
		)

### format_c_file reads UTF-8 C source from the binary in_fd and writes the formatted pages to out_fd.
# source_name goes to the page headings
def format_c_file(in_fd, out_fd, source_name, config=None, log_handler=None):
	if config is None:
		config = make_config()
	if log_handler is None:
		log_handler = print_to_stderr

	output = page_output(out_fd, source_name, config)
	lexer = c_lexer(in_fd, output, log_handler, config.log_tokens)
	formatter = c_formatter(lexer, output, log_handler)
	formatter.format_file()

	if output.indentation != 0:
		log_handler("Unbalanced braces: indentation is %d at end of file" % output.indentation)
	return output

def format_data(text, source_name='', config=None, log_handler=None):
	out_fd = io.StringIO()
	format_c_file(io.BytesIO(text.encode('utf-8')), out_fd, source_name, config, log_handler)
	return out_fd.getvalue()

def main(argv=None):
	import argparse
	parser = argparse.ArgumentParser(description="Reformat a C source file into indented, paginated listing", allow_abbrev=False)
	parser.add_argument('--version', action='version', version='%(prog)s 0.1')
	parser.add_argument("name", nargs='?', help="Source file name without .c extension; prompted for, if omitted")
	parser.add_argument("--out", '-O', dest='out_file', help="Output file; default to <name>_.c. '-' writes to stdout")
	parser.add_argument("--log", dest='log_file', help="Logfile destination; default to stderr")
	parser.add_argument("--quiet", '-q', action='store_true', help="Don't print progress messages")
	parser.add_argument("--verbose", "-v", dest='verbose', help="Log verbosity:",
						choices=['tokens', 'stats', 'all'],
						action='append', nargs='?', const='stats', default=[])
	parser.add_argument("--indent-size", help="Indent size, from 1 to 16, default 4.",
					choices=range(1,17), type=int, default='4', metavar="1...16")
	parser.add_argument("--line-width", help="Max output line length, default 78.",
					type=int, default='78')
	parser.add_argument("--page-length", help="Lines per page, not counting the heading, default 56.",
					type=int, default='56')
	parser.add_argument("--heading-width", help="Width of the file name field in the page heading, default 70.",
					type=int, default='70')

	options = parser.parse_args(argv)

	name = options.name
	if not name:
		name = input("Enter file name without .c: ").strip()
		if not name:
			parser.print_usage(sys.stderr)
			return 1

	conf = make_config(
		indent_size = options.indent_size,
		lines_per_page = options.page_length,
		heading_width = options.heading_width,
		line_width = options.line_width,
		log_tokens = 'tokens' in options.verbose or 'all' in options.verbose)

	input_filename = Path(name + '.c')
	output_filename = options.out_file
	if not output_filename:
		output_filename = Path(name + '_.c')

	if options.log_file:
		log_file = open(options.log_file, 'wt', encoding='utf-8')
	else:
		log_file = sys.stderr

	def log_handler(s):
		print("File %s: %s" % (input_filename, s), file=log_file)
		return

	try:
		with open(input_filename, 'rb') as in_fd:
			if output_filename == '-':
				output = format_c_file(in_fd, sys.stdout, Path(name).name, conf, log_handler)
			else:
				with open(output_filename, 'wt', encoding='utf-8', newline='\n') as out_fd:
					if not options.quiet:
						print("Formatting: %s" % input_filename, file=sys.stderr)
					output = format_c_file(in_fd, out_fd, Path(name).name, conf, log_handler)

		if 'stats' in options.verbose or 'all' in options.verbose:
			log_handler("%d lines written in %d pages" % (output.lines_written, output.pages_written()))
			output_stats(log_file)
			formatter_stats(log_file)
	finally:
		if log_file is not sys.stderr:
			log_file.close()

	return 0

def run():
	try:
		sys.exit(main())
	except FileNotFoundError as fnf:
		print("ERROR: %s: %s" % (fnf.strerror, fnf.filename), file=sys.stderr)
		sys.exit(1)
	except Exception_cfg_parse as ex:
		print("ERROR: %s" % ex.strerror, file=sys.stderr)
		sys.exit(128)
	except KeyboardInterrupt:
		# silent abort
		sys.exit(130)

if __name__ == "__main__":
	run()
