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

### c_formatter walks the token stream by recursive descent and drives the layout:
# line breaks, indentation, blank lines after declarations and a new page for each function.
# Tokens are written out by the lexer; the formatter only adjusts their spacing.
# A missing token is reported in the output and the formatting goes on

from c_lexer import c_token, print_to_stderr, SUPPRESS_LEADING_SPACE
from c_lexer import NONE, NOT_FOUND, END_OF_FILE, IDENTIFIER, UPPER_CASE_IDENTIFIER
from c_lexer import TYPE_SPECIFIER, SC_SPECIFIER, STRUCT, UNION, ENUM
from c_lexer import BREAK, CASE, CONTINUE, DEFAULT, DO, ELSE, FOR, GOTO, IF, RETURN, SWITCH, WHILE
from c_lexer import ASSIGNMENT_OPERATOR, COLON, SEMICOLON, COMMA
from c_lexer import LEFT_PARENTHESIS, RIGHT_PARENTHESIS, LEFT_BRACKET, LEFT_BRACE, RIGHT_BRACE

DECLARATION_START = frozenset((
	TYPE_SPECIFIER,
	SC_SPECIFIER,
	STRUCT,
	UNION,
	ENUM,
	UPPER_CASE_IDENTIFIER,
))

# After a closing parenthesis, these tokens mean it was not a function header
NOT_A_FUNCTION_BODY = frozenset((
	SEMICOLON,
	COMMA,
	LEFT_PARENTHESIS,
	LEFT_BRACKET,
	RIGHT_PARENTHESIS,
	ASSIGNMENT_OPERATOR,
	END_OF_FILE,
))

class c_formatter:
	TOTAL_MISSING_TOKENS = 0
	TOTAL_FUNCTIONS_FORMATTED = 0

	def __init__(self, lexer, output, log_handler=print_to_stderr):
		self.lexer = lexer
		self.output = output
		self.log_handler = log_handler
		self.token = c_token(NONE, '')
		self.kind = NONE
		self.missing_tokens = 0
		return

	def advance(self):
		self.token = self.lexer.next_token()
		self.kind = self.token.category
		return self.kind

	def format_file(self):
		self.advance()
		while self.kind is not END_OF_FILE:
			if self.external_declaration():
				self.function_body()
			continue
		self.output.end_line()
		return

	def missing_token(self, required):
		self.missing_tokens += 1
		c_formatter.TOTAL_MISSING_TOKENS += 1
		self.output.output_error('MISSING ' + required.name)
		if self.token.category is END_OF_FILE:
			self.log_handler('Line %d: missing %s at end of file'
							% (self.token.line, required.name))
		else:
			self.log_handler('Line %d: missing %s before "%s"'
							% (self.token.line, required.name, self.token.lexeme))
		return

	### verify consumes the required token, or reports it missing and leaves the current token in place
	def verify(self, required, advance_first=False):
		if advance_first:
			self.advance()
		if self.kind is required:
			self.advance()
			return True
		self.missing_token(required)
		return False

	def open_brace(self):
		self.output.end_line()
		self.advance()
		self.output.end_line()
		self.output.indent()
		return

	def close_brace(self):
		self.output.end_line()
		self.output.unindent()
		self.advance()
		return

	### external_declaration reads a declaration at file level.
	# Returns True if it turns out to be a function header, with the current token
	# at the start of the function body
	def external_declaration(self):
		braces = 0
		while braces > 0 or self.kind is not SEMICOLON:
			if self.kind is END_OF_FILE:
				break
			self.lexer.mark_declaration_spacing(self.kind)

			if self.kind is LEFT_BRACE:
				self.open_brace()
				braces += 1
			elif self.kind is RIGHT_BRACE:
				# Unbalanced braces make the count negative. The next semicolon still ends the declaration
				self.close_brace()
				braces -= 1
			elif self.kind is RIGHT_PARENTHESIS:
				self.advance()
				if braces == 0 and self.kind not in NOT_A_FUNCTION_BODY:
					return True
			elif self.kind is ASSIGNMENT_OPERATOR:
				self.expression(SEMICOLON)
			elif self.kind is SEMICOLON:
				# Member declaration inside braces
				self.advance()
				self.output.end_line()
			else:
				self.advance()
			continue

		self.verify(SEMICOLON)
		self.output.end_line()
		return False

	def function_body(self):
		c_formatter.TOTAL_FUNCTIONS_FORMATTED += 1
		# Each function starts on a new page
		self.output.end_line(True)

		# Old style parameter declarations
		self.output.indent()
		while self.kind in DECLARATION_START:
			self.declaration()
			continue
		self.output.unindent()

		self.compound_statement()
		self.output.end_line()
		self.output.end_page()
		return

	def declaration(self):
		braces = 0
		while braces > 0 or self.kind is not SEMICOLON:
			if self.kind is END_OF_FILE:
				break
			self.lexer.mark_declaration_spacing(self.kind)

			if self.kind is LEFT_BRACE:
				self.open_brace()
				braces += 1
			elif self.kind is RIGHT_BRACE:
				if braces == 0:
					# The enclosing block closes, the semicolon is missing
					break
				self.close_brace()
				braces -= 1
			elif self.kind is ASSIGNMENT_OPERATOR:
				self.expression(SEMICOLON)
			elif self.kind is SEMICOLON:
				self.advance()
				self.output.end_line()
			else:
				self.advance()
			continue

		self.verify(SEMICOLON)
		self.output.end_line()
		return

	def compound_statement(self):
		self.verify(LEFT_BRACE)
		self.output.end_line()
		self.output.indent()

		declarations = 0
		while self.kind in DECLARATION_START:
			self.declaration()
			declarations += 1
			continue
		if declarations:
			self.output.skip_line()

		while self.kind is not RIGHT_BRACE and self.kind is not END_OF_FILE:
			self.statement()
			continue

		self.output.end_line()
		self.output.unindent()
		self.verify(RIGHT_BRACE)
		self.output.end_line()
		return

	def substatement(self):
		if self.kind is LEFT_BRACE:
			self.compound_statement()
			return
		self.output.indent()
		self.statement()
		self.output.unindent()
		return

	def statement(self):
		if self.kind is IDENTIFIER or self.kind is UPPER_CASE_IDENTIFIER:
			# Can be a label. Look at the next token
			token = self.token
			if self.advance() is COLON:
				self.lexer.adjust_spacing(SUPPRESS_LEADING_SPACE)
				self.advance()
				if self.kind is RIGHT_BRACE:
					self.output.end_line()
					return
			else:
				self.lexer.put_back()
				self.token = token
				self.kind = token.category

		handler = self.statement_handlers.get(self.kind, c_formatter.expression_statement)
		handler(self)
		return

	def expression_statement(self):
		self.expression(SEMICOLON)
		self.verify(SEMICOLON)
		self.output.end_line()
		return

	def jump_statement(self):
		# 'break' and 'continue'
		self.verify(SEMICOLON, advance_first=True)
		self.output.end_line()
		return

	def return_statement(self):
		self.advance()
		if self.kind is not SEMICOLON:
			self.expression(SEMICOLON)
		self.verify(SEMICOLON)
		self.output.end_line()
		return

	def goto_statement(self):
		self.advance()
		if self.kind is UPPER_CASE_IDENTIFIER:
			self.advance()
		else:
			self.verify(IDENTIFIER)
		self.verify(SEMICOLON)
		self.output.end_line()
		return

	def parenthesized(self):
		if not self.verify(LEFT_PARENTHESIS):
			return
		self.expression(RIGHT_PARENTHESIS)
		self.verify(RIGHT_PARENTHESIS)
		return

	def if_statement(self):
		self.advance()
		self.parenthesized()
		self.output.end_line()
		self.substatement()

		if self.kind is ELSE:
			self.advance()
			if self.kind is IF:
				# 'else if' stays on one line
				self.if_statement()
				return
			self.output.end_line()
			self.substatement()
		return

	def while_statement(self):
		self.advance()
		self.parenthesized()
		self.output.end_line()
		self.substatement()
		return

	def for_statement(self):
		self.advance()
		self.parenthesized()
		self.output.end_line()
		self.substatement()
		return

	def do_statement(self):
		self.advance()
		self.output.end_line()
		self.substatement()
		self.verify(WHILE)
		self.parenthesized()
		self.verify(SEMICOLON)
		self.output.end_line()
		return

	def switch_statement(self):
		self.advance()
		self.parenthesized()
		self.output.end_line()
		self.verify(LEFT_BRACE)
		self.output.end_line()
		self.output.indent()

		while self.kind is not RIGHT_BRACE and self.kind is not END_OF_FILE:
			if self.kind is CASE or self.kind is DEFAULT:
				self.case_label()

			self.output.indent()
			while self.kind is not CASE and self.kind is not DEFAULT \
					and self.kind is not RIGHT_BRACE and self.kind is not END_OF_FILE:
				self.statement()
				continue
			self.output.end_line()
			self.output.unindent()
			continue

		self.output.unindent()
		self.verify(RIGHT_BRACE)
		self.output.end_line()
		return

	def case_label(self):
		self.expression(COLON)
		self.lexer.adjust_spacing(SUPPRESS_LEADING_SPACE)
		self.verify(COLON)
		self.output.end_line()
		return

	### expression copies the tokens up to the terminator, which is left as the current token.
	# Nested parentheses are read recursively. An unmatched closing brace ends the expression.
	# Returns the category of the token the expression stopped at
	def expression(self, terminator):
		previous = NOT_FOUND
		braces = 0
		while self.kind is not terminator and self.kind is not END_OF_FILE:
			self.lexer.mark_expression_spacing(self.kind, previous)

			if self.kind is LEFT_PARENTHESIS:
				if previous is IDENTIFIER or previous is UPPER_CASE_IDENTIFIER:
					# Function call
					self.lexer.adjust_spacing(SUPPRESS_LEADING_SPACE)
				self.advance()
				if self.expression(RIGHT_PARENTHESIS) is not RIGHT_PARENTHESIS:
					self.missing_token(RIGHT_PARENTHESIS)
					break
			elif self.kind is LEFT_BRACE:
				braces += 1
			elif self.kind is RIGHT_BRACE:
				if braces == 0:
					break
				braces -= 1

			previous = self.kind
			self.advance()
			continue
		return self.kind

	statement_handlers = {
		LEFT_BRACE : compound_statement,
		SWITCH : switch_statement,
		BREAK : jump_statement,
		CONTINUE : jump_statement,
		RETURN : return_statement,
		GOTO : goto_statement,
		IF : if_statement,
		WHILE : while_statement,
		FOR : for_statement,
		DO : do_statement,
	}

def print_stats(fd):
	print("Functions formatted: %d" % (c_formatter.TOTAL_FUNCTIONS_FORMATTED), file=fd)
	print("Missing tokens reported: %d" % (c_formatter.TOTAL_MISSING_TOKENS), file=fd)
