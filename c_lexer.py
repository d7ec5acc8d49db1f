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

### c_lexer returns C tokens from the input stream, one per next_token() call.
# Each call also writes out the token returned by the previous call, so the
# formatter can still adjust its spacing after looking at the token which follows.
# Comments are dropped, preprocessor lines are copied to the output as is.

import enum
import re
import sys
from typing import NamedTuple
from exceptions import Exception_format_state

class token_category(enum.Enum):
	NONE = enum.auto()
	NOT_FOUND = enum.auto()
	END_OF_FILE = enum.auto()
	COMMENT = enum.auto()
	COMPILER_DIRECTIVE = enum.auto()

	IDENTIFIER = enum.auto()
	UPPER_CASE_IDENTIFIER = enum.auto()
	CONSTANT = enum.auto()
	STRING = enum.auto()
	TYPE_SPECIFIER = enum.auto()
	SC_SPECIFIER = enum.auto()

	BREAK = enum.auto()
	CASE = enum.auto()
	CONTINUE = enum.auto()
	DEFAULT = enum.auto()
	DO = enum.auto()
	ELSE = enum.auto()
	ENUM = enum.auto()
	FOR = enum.auto()
	GOTO = enum.auto()
	IF = enum.auto()
	RETURN = enum.auto()
	SIZEOF = enum.auto()
	STRUCT = enum.auto()
	SWITCH = enum.auto()
	UNION = enum.auto()
	WHILE = enum.auto()

	UNARY_OPERATOR = enum.auto()
	UNARY_OR_BINARY_OPERATOR = enum.auto()
	PRE_OR_POST_UNARY_OPERATOR = enum.auto()
	BINARY_OPERATOR = enum.auto()
	ASSIGNMENT_OPERATOR = enum.auto()
	TERNARY_OPERATOR = enum.auto()
	STRUCTURE_OPERATOR = enum.auto()
	ELLIPSIS = enum.auto()

	COLON = enum.auto()
	LEFT_PARENTHESIS = enum.auto()
	RIGHT_PARENTHESIS = enum.auto()
	LEFT_BRACKET = enum.auto()
	RIGHT_BRACKET = enum.auto()
	LEFT_BRACE = enum.auto()
	RIGHT_BRACE = enum.auto()
	SEMICOLON = enum.auto()
	COMMA = enum.auto()

# Module level names, to be matched with 'is' operator
NONE = token_category.NONE
NOT_FOUND = token_category.NOT_FOUND
END_OF_FILE = token_category.END_OF_FILE
COMMENT = token_category.COMMENT
COMPILER_DIRECTIVE = token_category.COMPILER_DIRECTIVE
IDENTIFIER = token_category.IDENTIFIER
UPPER_CASE_IDENTIFIER = token_category.UPPER_CASE_IDENTIFIER
CONSTANT = token_category.CONSTANT
STRING = token_category.STRING
TYPE_SPECIFIER = token_category.TYPE_SPECIFIER
SC_SPECIFIER = token_category.SC_SPECIFIER
BREAK = token_category.BREAK
CASE = token_category.CASE
CONTINUE = token_category.CONTINUE
DEFAULT = token_category.DEFAULT
DO = token_category.DO
ELSE = token_category.ELSE
ENUM = token_category.ENUM
FOR = token_category.FOR
GOTO = token_category.GOTO
IF = token_category.IF
RETURN = token_category.RETURN
SIZEOF = token_category.SIZEOF
STRUCT = token_category.STRUCT
SWITCH = token_category.SWITCH
UNION = token_category.UNION
WHILE = token_category.WHILE
UNARY_OPERATOR = token_category.UNARY_OPERATOR
UNARY_OR_BINARY_OPERATOR = token_category.UNARY_OR_BINARY_OPERATOR
PRE_OR_POST_UNARY_OPERATOR = token_category.PRE_OR_POST_UNARY_OPERATOR
BINARY_OPERATOR = token_category.BINARY_OPERATOR
ASSIGNMENT_OPERATOR = token_category.ASSIGNMENT_OPERATOR
TERNARY_OPERATOR = token_category.TERNARY_OPERATOR
STRUCTURE_OPERATOR = token_category.STRUCTURE_OPERATOR
ELLIPSIS = token_category.ELLIPSIS
COLON = token_category.COLON
LEFT_PARENTHESIS = token_category.LEFT_PARENTHESIS
RIGHT_PARENTHESIS = token_category.RIGHT_PARENTHESIS
LEFT_BRACKET = token_category.LEFT_BRACKET
RIGHT_BRACKET = token_category.RIGHT_BRACKET
LEFT_BRACE = token_category.LEFT_BRACE
RIGHT_BRACE = token_category.RIGHT_BRACE
SEMICOLON = token_category.SEMICOLON
COMMA = token_category.COMMA

class spacing_directive(enum.IntFlag):
	SUPPRESS_NEITHER_SPACE = 0
	SUPPRESS_LEADING_SPACE = 1
	SUPPRESS_TRAILING_SPACE = 2

SUPPRESS_NEITHER_SPACE = spacing_directive.SUPPRESS_NEITHER_SPACE
SUPPRESS_LEADING_SPACE = spacing_directive.SUPPRESS_LEADING_SPACE
SUPPRESS_TRAILING_SPACE = spacing_directive.SUPPRESS_TRAILING_SPACE
SUPPRESS_BOTH_SPACES = SUPPRESS_LEADING_SPACE | SUPPRESS_TRAILING_SPACE

class c_token(NamedTuple):
	category: token_category
	lexeme: str
	line: int = 0

keyword_tokens = {
	'auto' : SC_SPECIFIER,
	'extern' : SC_SPECIFIER,
	'register' : SC_SPECIFIER,
	'static' : SC_SPECIFIER,
	'typedef' : SC_SPECIFIER,
	'char' : TYPE_SPECIFIER,
	'const' : TYPE_SPECIFIER,
	'double' : TYPE_SPECIFIER,
	'float' : TYPE_SPECIFIER,
	'int' : TYPE_SPECIFIER,
	'long' : TYPE_SPECIFIER,
	'short' : TYPE_SPECIFIER,
	'signed' : TYPE_SPECIFIER,
	'unsigned' : TYPE_SPECIFIER,
	'void' : TYPE_SPECIFIER,
	'volatile' : TYPE_SPECIFIER,
	'break' : BREAK,
	'case' : CASE,
	'continue' : CONTINUE,
	'default' : DEFAULT,
	'do' : DO,
	'else' : ELSE,
	'enum' : ENUM,
	'for' : FOR,
	'goto' : GOTO,
	'if' : IF,
	'return' : RETURN,
	'sizeof' : SIZEOF,
	'struct' : STRUCT,
	'switch' : SWITCH,
	'union' : UNION,
	'while' : WHILE,
}

# The dictionary is walked one character at a time, for maximal munch.
# A None key gives the token when the next character doesn't extend the operator
operator_dict = {
	'+' : {
		'+' : PRE_OR_POST_UNARY_OPERATOR,
		'=' : ASSIGNMENT_OPERATOR,
		None : UNARY_OR_BINARY_OPERATOR,
		},
	'-' : {
		'-' : PRE_OR_POST_UNARY_OPERATOR,
		'=' : ASSIGNMENT_OPERATOR,
		'>' : STRUCTURE_OPERATOR,
		None : UNARY_OR_BINARY_OPERATOR,
		},
	'*' : {
		'=' : ASSIGNMENT_OPERATOR,
		None : UNARY_OR_BINARY_OPERATOR,
		},
	'&' : {
		'&' : BINARY_OPERATOR,
		'=' : ASSIGNMENT_OPERATOR,
		None : UNARY_OR_BINARY_OPERATOR,
		},
	'/' : {
		'=' : ASSIGNMENT_OPERATOR,
		None : BINARY_OPERATOR,
		},
	'%' : {
		'=' : ASSIGNMENT_OPERATOR,
		None : BINARY_OPERATOR,
		},
	'^' : {
		'=' : ASSIGNMENT_OPERATOR,
		None : BINARY_OPERATOR,
		},
	'|' : {
		'|' : BINARY_OPERATOR,
		'=' : ASSIGNMENT_OPERATOR,
		None : BINARY_OPERATOR,
		},
	'<' : {
		'=' : BINARY_OPERATOR,
		'<' : {
			'=' : ASSIGNMENT_OPERATOR,
			None : BINARY_OPERATOR,
			},
		None : BINARY_OPERATOR,
		},
	'>' : {
		'=' : BINARY_OPERATOR,
		'>' : {
			'=' : ASSIGNMENT_OPERATOR,
			None : BINARY_OPERATOR,
			},
		None : BINARY_OPERATOR,
		},
	'=' : {
		'=' : BINARY_OPERATOR,
		None : ASSIGNMENT_OPERATOR,
		},
	'!' : {
		'=' : BINARY_OPERATOR,
		None : UNARY_OPERATOR,
		},
	'~' : UNARY_OPERATOR,
	'.' : {
		'.' : {
			'.' : ELLIPSIS,
			None : STRUCTURE_OPERATOR,
			},
		None : STRUCTURE_OPERATOR,
		},
	'?' : TERNARY_OPERATOR,
	':' : COLON,
	'(' : LEFT_PARENTHESIS,
	')' : RIGHT_PARENTHESIS,
	'[' : LEFT_BRACKET,
	']' : RIGHT_BRACKET,
	'{' : LEFT_BRACE,
	'}' : RIGHT_BRACE,
	';' : SEMICOLON,
	',' : COMMA,
}

# Spacing which doesn't depend on the context
lexeme_spacing = {
	'!' : SUPPRESS_TRAILING_SPACE,
	'~' : SUPPRESS_TRAILING_SPACE,
	'.' : SUPPRESS_BOTH_SPACES,
	'->' : SUPPRESS_BOTH_SPACES,
	'(' : SUPPRESS_TRAILING_SPACE,
	')' : SUPPRESS_LEADING_SPACE,
	'[' : SUPPRESS_BOTH_SPACES,
	']' : SUPPRESS_LEADING_SPACE,
	'{' : SUPPRESS_TRAILING_SPACE,
	'}' : SUPPRESS_LEADING_SPACE,
	';' : SUPPRESS_LEADING_SPACE,
	',' : SUPPRESS_LEADING_SPACE,
}

# Tokens after which '++', '--', and '+', '-', '*', '&' are postfix or binary
operand_categories = frozenset((
	IDENTIFIER,
	UPPER_CASE_IDENTIFIER,
	CONSTANT,
	STRING,
	RIGHT_BRACKET,
	RIGHT_PARENTHESIS,
))

# Page heading line, as written by page_output: form feed, file name, 'PAGE <n>'
heading_pattern = re.compile(r'\f[^\n]*PAGE \d+\r?\n?')

def is_identifier_char(c):
	return c.isalnum() or c == '_'

def is_number_char(c):
	return c.isalnum() or c == '.'

# 1.5e-3 and 0x1p+4 keep the exponent sign in the constant. 0x1e+5 is an addition
def takes_exponent_sign(lexeme):
	if lexeme[:2] in ('0x', '0X'):
		return lexeme[-1] in 'pP'
	return lexeme[-1] in 'eE'

def print_to_stderr(s):
	print(s, file=sys.stderr)
	return

class c_lexer:
	def __init__(self, fd, output, log_handler=print_to_stderr, log_tokens=False):
		self.output = output
		self.log_handler = log_handler
		self.log_tokens = log_tokens
		self.chars = self.read_chars(fd)
		self.line_num = 1
		self.char = ''
		self.next_c = next(self.chars, '')
		self.next_char()

		self.current = c_token(NONE, '')
		self.spacing = SUPPRESS_NEITHER_SPACE
		# Single token pushback slot
		self.lookahead = None
		return

	### read_chars decodes the binary input one line at a time.
	# A line which can't be read or decoded ends the input.
	# Page headings of previously formatted output are dropped, their line feed is kept
	def read_chars(self, fd):
		line_num = 1
		try:
			for line in fd:
				line = line.decode('utf-8')
				if heading_pattern.fullmatch(line):
					line = '\n' if line.endswith('\n') else ''
				yield from line
				line_num += 1
				continue
		except (OSError, UnicodeDecodeError) as ex:
			self.log_handler('Line %d: read error, the rest of the file is not formatted: %s'
							% (line_num, ex))
		return

	def next_char(self):
		if self.char == '\n':
			self.line_num += 1
		self.char = self.next_c
		if self.next_c:
			self.next_c = next(self.chars, '')
		return self.char

	def scan_while(self, predicate, lexeme=''):
		while self.char and predicate(self.char):
			lexeme += self.char
			self.next_char()
			continue
		return lexeme

	### adjust_spacing adds the spacing bits to the directive of the current token.
	# The bits are accumulated until the token is written out by the next fetch
	def adjust_spacing(self, directive):
		self.spacing |= directive
		return

	def mark_declaration_spacing(self, category):
		if category is UNARY_OR_BINARY_OPERATOR:
			# Pointer declarator
			self.spacing |= SUPPRESS_TRAILING_SPACE
		elif category is LEFT_PARENTHESIS:
			self.spacing |= SUPPRESS_LEADING_SPACE
		return

	def mark_expression_spacing(self, category, previous):
		if category is PRE_OR_POST_UNARY_OPERATOR:
			if previous in operand_categories:
				# Postfix
				self.spacing |= SUPPRESS_LEADING_SPACE
			else:
				self.spacing |= SUPPRESS_TRAILING_SPACE
		elif category is UNARY_OR_BINARY_OPERATOR:
			if previous not in operand_categories:
				# Unary
				self.spacing |= SUPPRESS_TRAILING_SPACE
		return

	def put_back(self):
		if self.lookahead is not None:
			raise Exception_format_state('Token "%s" is already put back' % self.lookahead.lexeme)
		self.lookahead = self.current
		return

	def next_token(self) -> c_token:
		if self.lookahead is not None:
			self.current = self.lookahead
			self.lookahead = None
			return self.current

		if self.current.lexeme:
			self.output.append(self.current.lexeme, self.spacing)
		self.spacing = SUPPRESS_NEITHER_SPACE

		while True:
			token = self.scan_token()
			if token.category is not COMMENT \
				and token.category is not COMPILER_DIRECTIVE:
				break
			continue

		self.current = token
		if self.log_tokens:
			self.log_handler('TOKEN: line %d %s %r' % (token.line, token.category.name, token.lexeme))
		return token

	def skip_whitespace(self):
		while self.char and self.char.isspace():
			self.next_char()
			continue
		return

	def scan_token(self):
		self.skip_whitespace()
		line = self.line_num
		c = self.char

		if not c:
			self.output.end_line()
			return c_token(END_OF_FILE, '', line)

		if c == 'L' and (self.next_c == '"' or self.next_c == "'"):
			self.next_char()
			return self.scan_literal('L', line)

		if c.isupper():
			return c_token(UPPER_CASE_IDENTIFIER, self.scan_while(is_identifier_char), line)

		if c.isalpha() or c == '_':
			lexeme = self.scan_while(is_identifier_char)
			return c_token(keyword_tokens.get(lexeme, IDENTIFIER), lexeme, line)

		if c.isdigit() or (c == '.' and self.next_c.isdigit()):
			lexeme = ''
			while True:
				lexeme = self.scan_while(is_number_char, lexeme)
				if (self.char == '+' or self.char == '-') and takes_exponent_sign(lexeme):
					lexeme += self.char
					self.next_char()
					continue
				break
			return c_token(CONSTANT, lexeme, line)

		if c == '"' or c == "'":
			return self.scan_literal('', line)

		if c == '#':
			return self.scan_directive(line)

		if c == '/' and self.next_c == '*':
			return self.scan_comment(line)

		if c == '/' and self.next_c == '/':
			return c_token(COMMENT, self.scan_while(lambda c: c != '\n'), line)

		return self.scan_operator(line)

	def scan_literal(self, lexeme, line):
		quote = self.char
		lexeme += quote
		self.next_char()
		while self.char and self.char != quote:
			if self.char == '\\':
				lexeme += self.char
				self.next_char()
				if not self.char:
					break
			lexeme += self.char
			self.next_char()
			continue

		if self.char:
			lexeme += self.char
			self.next_char()
		else:
			self.log_handler('Line %d: unterminated literal at end of file' % line)

		if quote == '"':
			return c_token(STRING, lexeme, line)
		return c_token(CONSTANT, lexeme, line)

	def scan_comment(self, line):
		# Skip '/*'
		self.next_char()
		self.next_char()
		while self.char:
			if self.char == '*' and self.next_c == '/':
				self.next_char()
				self.next_char()
				return c_token(COMMENT, '', line)
			self.next_char()
			continue

		self.log_handler('Line %d: unterminated comment at end of file' % line)
		return c_token(COMMENT, '', line)

	def scan_directive(self, line):
		# The pending line goes out first, the directive is printed on its own line
		self.output.end_line()
		lines = []
		while True:
			text = self.scan_while(lambda c: c != '\n').rstrip()
			self.output.output_directive(text)
			lines.append(text)
			if not text.endswith('\\') or not self.char:
				break
			# Continuation line
			self.next_char()
			continue

		return c_token(COMPILER_DIRECTIVE, '\n'.join(lines), line)

	def scan_operator(self, line):
		c = self.char
		token = operator_dict.get(c)
		self.next_char()
		if token is None:
			# Not a C character. Pass it through
			return c_token(NOT_FOUND, c, line)

		lexeme = c
		while type(token) is dict:
			next_token = token.get(self.char)
			if next_token is None:
				token = token[None]
				break
			lexeme += self.char
			self.next_char()
			token = next_token
			continue

		self.spacing = lexeme_spacing.get(lexeme, SUPPRESS_NEITHER_SPACE)
		return c_token(token, lexeme, line)
