"""
Line classification and brace-balance scanning for cube files.

Cube files are not parsed into a tree. Each validation rule works on single
lines plus a few structural questions answered here: which block a line sits
in, where a closing brace's block started, and which type a column declares.
"""

import re
from dataclasses import dataclass
from functools import cached_property

IDENTIFIER = r"[a-zA-Z_][a-zA-Z0-9_]*"

ANNOTATION_PATTERN = re.compile(r"@([A-Za-z0-9_]+)")
TYPE_ASSIGNMENT_PATTERN = re.compile(r"""type:\s*["']([A-Za-z0-9_]+)["']""")
TYPE_PROPERTY_PATTERN = re.compile(r"^\s*type\s*:")
TYPE_VALUE_PATTERN = re.compile(r"""^\s*type\s*:\s*(["'])([^"']+)\1""")
BLOCK_OPENER_PATTERN = re.compile(rf"^\s*({IDENTIFIER})\s*:\s*\{{")
PROPERTY_PATTERN = re.compile(rf"^\s*({IDENTIFIER})\s*:")
EMPTY_PROPERTY_PATTERN = re.compile(rf"^\s*{IDENTIFIER}\s*:\s*$")
CLOSING_BRACE_PATTERN = re.compile(r"^\s*\}\s*;?\s*$")
FOREIGN_OPENER_PATTERN = re.compile(r"foreign\s*:\s*\{")
OPTIONS_PATTERN = re.compile(r"^\s*options\s*:\s*\[(.*)\]\s*;?\s*$")
QUOTE_CHARACTERS = "\"'"

VARCHAR_DECLARATION = 'type: "varchar"'
LENGTH_PROPERTY = "length:"


@dataclass(frozen=True)
class OptionToken:
    """One entry of an ``options: [...]`` array."""

    value: str
    quoted: bool


def tokenize_options(body: str) -> list[OptionToken]:
    """
    Split the inside of an options array into entries.

    Quoted entries (single or double quotes) keep their inner text. Anything
    else, including an unterminated quote, becomes an unquoted token.
    """
    tokens: list[OptionToken] = []
    position = 0
    length = len(body)
    while position < length:
        char = body[position]
        if char.isspace() or char == ",":
            position += 1
            continue
        if char in QUOTE_CHARACTERS:
            end = body.find(char, position + 1)
            if end == -1:
                tokens.append(OptionToken(body[position:].strip(), quoted=False))
                break
            tokens.append(OptionToken(body[position + 1 : end], quoted=True))
            position = end + 1
            continue
        start = position
        while position < length and not (
            body[position].isspace() or body[position] == "," or body[position] in QUOTE_CHARACTERS
        ):
            position += 1
        tokens.append(OptionToken(body[start:position], quoted=False))
    return tokens


def count_quotes(line: str) -> int:
    return sum(1 for char in line if char in QUOTE_CHARACTERS)


def is_skippable(line: str) -> bool:
    """Blank lines and ``//`` comments are not validated."""
    stripped = line.strip()
    return stripped == "" or stripped.startswith("//")


class CubeSource:
    """Lines of one cube file with the brace bookkeeping the rules share."""

    def __init__(self, content: str):
        self.content = content
        self.lines = content.split("\n")
        # _balance[i] is the net brace count of lines[0:i]
        self._balance = [0]
        for line in self.lines:
            self._balance.append(self._balance[-1] + self.brace_delta(line))

    @staticmethod
    def brace_delta(line: str) -> int:
        return line.count("{") - line.count("}")

    def net_braces(self, start: int, end: int) -> int:
        """Net brace count over lines[start..end], both inclusive."""
        return self._balance[end + 1] - self._balance[start]

    def contains(self, text: str) -> bool:
        return any(text in line for line in self.lines)

    def window(self, index: int, size: int) -> list[str]:
        return self.lines[index : index + size]

    @cached_property
    def columns_block(self) -> tuple[int, int] | None:
        """Start and end line indexes of the first @columns block."""
        for start, line in enumerate(self.lines):
            if "@columns" not in line:
                continue
            depth = 0
            for index in range(start, len(self.lines)):
                depth += self.brace_delta(self.lines[index])
                if depth == 0 and index > start:
                    return start, index
            return None
        return None

    def inside_columns_block(self, index: int) -> bool:
        block = self.columns_block
        return block is not None and block[0] < index < block[1]

    def inside_foreign_object(self, index: int) -> bool:
        """True when the line sits inside a still-open ``foreign: {`` object."""
        for candidate in range(index, -1, -1):
            line = self.lines[candidate]
            if FOREIGN_OPENER_PATTERN.search(line):
                depth = 0
                for position in range(candidate, index + 1):
                    depth += self.brace_delta(self.lines[position])
                    if depth == 0 and position > candidate:
                        return False
                return depth > 0
            if line.strip() == "}" or "};" in line:
                break
        return False

    def column_type_above(self, index: int) -> str | None:
        """Type declared by the column that owns the given line, if found."""
        for candidate in range(index - 1, -1, -1):
            line = self.lines[candidate]
            match = TYPE_VALUE_PATTERN.match(line)
            if match:
                return match.group(2)
            if BLOCK_OPENER_PATTERN.match(line):
                break
        return None

    def opening_block(self, closing_index: int) -> tuple[int, str] | None:
        """
        Find the ``name: {`` line matched by the closing brace at ``closing_index``.

        Returns the opening line index and the block name.
        """
        for candidate in range(closing_index - 1, -1, -1):
            match = BLOCK_OPENER_PATTERN.match(self.lines[candidate])
            if match and self.net_braces(candidate, closing_index) == 0:
                return candidate, match.group(1)
        return None

    def block_declares_type(self, opening_index: int, closing_index: int) -> bool:
        return any(
            TYPE_PROPERTY_PATTERN.match(line)
            for line in self.lines[opening_index + 1 : closing_index]
        )
