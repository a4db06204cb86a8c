"""
Xcode project file parser.

This module reads the OpenStep-style property list used by .pbxproj files
into an XcodeProject. Comments are discarded (the formatter regenerates
them), quoted strings are unescaped, and every other value is kept as the
string, array or dictionary it was written as.
"""

import re
from typing import Dict, List

from pbxgraft.errors import ProjectParseError
from pbxgraft.xcode.model import Value, XcodeID, XcodeProject, make_node

# Characters allowed in an unquoted string
_BARE_RE = re.compile(r"[A-Za-z0-9_$+/:.\-<>]+")

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    '"': '"',
    "\\": "\\",
    "'": "'",
}

# \U followed by up to four hex digits, or up to three octal digits
_UNICODE_ESCAPE_RE = re.compile(r"U([0-9A-Fa-f]{1,4})")
_OCTAL_ESCAPE_RE = re.compile(r"[0-7]{1,3}")


class _Reader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    @property
    def line(self) -> int:
        return self.text.count("\n", 0, self.pos) + 1

    def error(self, message: str) -> ProjectParseError:
        return ProjectParseError(message, self.line)

    def skip(self) -> None:
        # Skip whitespace and both comment styles
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char in " \t\r\n":
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("unterminated comment")
                self.pos = end + 2
            else:
                break

    def peek(self) -> str:
        self.skip()
        if self.pos >= len(self.text):
            raise self.error("unexpected end of file")
        return self.text[self.pos]

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise self.error(f"expected '{char}', found '{self.text[self.pos]}'")
        self.pos += 1

    def read_value(self) -> Value:
        char = self.peek()
        if char == "{":
            return self.read_dict()
        if char == "(":
            return self.read_list()
        return self.read_string()

    def read_dict(self) -> Dict[str, Value]:
        self.expect("{")
        result: Dict[str, Value] = {}
        while self.peek() != "}":
            key = self.read_string()
            self.expect("=")
            result[key] = self.read_value()
            self.expect(";")
        self.pos += 1
        return result

    def read_list(self) -> List[Value]:
        self.expect("(")
        result: List[Value] = []
        while self.peek() != ")":
            result.append(self.read_value())
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != ")":
                raise self.error("expected ',' or ')' in array")
        self.pos += 1
        return result

    def read_string(self) -> str:
        char = self.peek()
        if char in "\"'":
            return self.read_quoted(char)
        match = _BARE_RE.match(self.text, self.pos)
        if not match:
            raise self.error(f"unexpected character '{char}'")
        self.pos = match.end()
        return match.group(0)

    def read_quoted(self, quote: str) -> str:
        self.pos += 1
        chunks = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self.error("unterminated string")
            char = text[self.pos]
            if char == quote:
                self.pos += 1
                return "".join(chunks)
            if char == "\\":
                chunks.append(self.read_escape())
            else:
                chunks.append(char)
                self.pos += 1

    def read_escape(self) -> str:
        # Called with pos on the backslash; an unknown escape stands for the character itself
        text = self.text
        start = self.pos + 1
        if start >= len(text):
            raise self.error("unterminated string")
        unicode = _UNICODE_ESCAPE_RE.match(text, start)
        if unicode:
            self.pos = unicode.end()
            return chr(int(unicode.group(1), 16))
        octal = _OCTAL_ESCAPE_RE.match(text, start)
        if octal:
            self.pos = octal.end()
            return chr(int(octal.group(0), 8))
        self.pos = start + 1
        return _ESCAPES.get(text[start], text[start])


def parse_plist(text: str) -> Value:
    reader = _Reader(text)
    value = reader.read_value()
    reader.skip()
    if reader.pos != len(text):
        raise reader.error("trailing content after root object")
    return value


def parse_xcode_project(text: str) -> XcodeProject:
    """
    Parse the contents of a project.pbxproj file.

    Args:
        text: The file contents.

    Returns:
        The project graph.

    Raises:
        ProjectParseError: If the text is not a well-formed project file.
    """
    root = parse_plist(text)
    if not isinstance(root, dict):
        raise ProjectParseError("root value is not a dictionary", 1)
    objects = root.get("objects")
    root_object = root.get("rootObject")
    if not isinstance(objects, dict) or not isinstance(root_object, str):
        raise ProjectParseError("missing 'objects' or 'rootObject'", 1)

    nodes = {}
    for node_id, attrs in objects.items():
        if not isinstance(attrs, dict):
            raise ProjectParseError(f"object {node_id} is not a dictionary", 1)
        nodes[XcodeID(node_id)] = make_node(node_id, attrs)

    classes = root.get("classes", {})
    return XcodeProject(
        objects=nodes,
        rootObject=XcodeID(root_object),
        archiveVersion=str(root.get("archiveVersion", "1")),
        objectVersion=str(root.get("objectVersion", "56")),
        classes=classes if isinstance(classes, dict) else {},
    )
