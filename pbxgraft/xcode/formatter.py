"""
Xcode project file formatter.

This module converts an XcodeProject back into the text of a .pbxproj file.
Objects are grouped into "/* Begin <isa> section */" blocks, references are
followed by the same "/* comment */" annotations Xcode writes, and build
files and file references are written on a single line.
"""

import re
from typing import Dict, List, Optional

from pbxgraft.xcode.model import (
    BuildPhase,
    Node,
    PBXBuildFile,
    PBXProject,
    Value,
    XCConfigurationList,
    XcodeProject,
    TARGET_TYPES,
)

# Strings made only of these characters are written without quotes
_BARE_RE = re.compile(r"^[A-Za-z0-9_$/:.]+$")

# Objects written on a single line, as Xcode does
_SINGLE_LINE_ISA = frozenset({"PBXBuildFile", "PBXFileReference"})

Comments = Dict[str, str]


def format_xcode_project(project: XcodeProject, project_name: str = "Project") -> str:
    """
    Convert an XcodeProject object to its string representation.

    Args:
        project: The XcodeProject object to format.
        project_name: Name used in the comments of project-level configuration lists.

    Returns:
        A string containing the formatted Xcode project file content.
    """
    comments = collect_comments(project, project_name)

    result = "// !$*UTF8*$!\n{\n"
    result += f"\tarchiveVersion = {format_string(project.archiveVersion)};\n"
    result += f"\tclasses = {format_dict(project.classes, 1, comments)};\n"
    result += f"\tobjectVersion = {format_string(project.objectVersion)};\n"
    result += "\tobjects = {\n"
    result += format_sections(project, comments)
    result += "\t};\n"
    result += f"\trootObject = {format_value(project.rootObject, 1, comments)};\n"
    result += "}\n"
    return result


def collect_comments(project: XcodeProject, project_name: str) -> Comments:
    """
    Compute the comment written after every reference to an object.

    Args:
        project: The project to annotate.
        project_name: Name used for the project's own configuration list.

    Returns:
        A dictionary of comment text keyed by object ID.
    """
    comments: Comments = {}
    for node in project.objects.values():
        comment = node.comment()
        if comment:
            comments[node.id] = comment

    # Build files are named after their file and the phase that holds them
    for phase in project.by_isa(BuildPhase):
        phase_name = comments.get(phase.id, "")
        for build_file_id in phase.files:
            build_file = project.get(build_file_id)
            if not isinstance(build_file, PBXBuildFile):
                continue
            file_name = comments.get(build_file.fileRef or build_file.productRef or "")
            if file_name:
                comments[build_file.id] = f"{file_name} in {phase_name}"

    for config_list in project.by_isa(XCConfigurationList):
        owner = project.owner_of_configuration_list(config_list.id)
        if isinstance(owner, PBXProject):
            comments[config_list.id] = (
                f'Build configuration list for PBXProject "{project_name}"'
            )
        elif isinstance(owner, TARGET_TYPES):
            comments[config_list.id] = (
                f'Build configuration list for {owner.isa} "{comments.get(owner.id, "")}"'
            )
    return comments


def format_sections(project: XcodeProject, comments: Comments) -> str:
    by_isa: Dict[str, List[Node]] = {}
    for node in project.objects.values():
        by_isa.setdefault(node.isa, []).append(node)

    result = ""
    for isa in sorted(by_isa):
        result += f"\n/* Begin {isa} section */\n"
        for node in sorted(by_isa[isa], key=lambda n: n.id):
            result += "\t\t" + format_object(node, comments) + "\n"
        result += f"/* End {isa} section */\n"
    return result


def format_object(node: Node, comments: Comments) -> str:
    """
    Format one object entry of the objects dictionary.

    Args:
        node: The object to format.
        comments: Reference comments keyed by object ID.

    Returns:
        The "ID /* comment */ = {...};" entry, without indentation or newline.
    """
    head = format_value(node.id, 2, comments)
    if node.isa in _SINGLE_LINE_ISA:
        body = format_inline_dict(node.attrs, comments)
    else:
        body = format_dict(node.attrs, 2, comments)
    return f"{head} = {body};"


def format_value(value: Value, indent_level: int, comments: Comments) -> str:
    """
    Format a value based on its type.

    Args:
        value: The value to format.
        indent_level: The current indentation level.
        comments: Reference comments keyed by object ID.

    Returns:
        A string representing the formatted value.
    """
    if isinstance(value, dict):
        return format_dict(value, indent_level, comments)

    elif isinstance(value, list):
        return format_list(value, indent_level, comments)

    elif isinstance(value, str):
        formatted = format_string(value)
        comment = comments.get(value)
        if comment:
            return f"{formatted} /* {comment} */"
        return formatted

    # Integers are accepted for values built in code
    elif isinstance(value, int):
        return str(value)

    raise TypeError(f"Unsupported type: {type(value).__name__} for value: {value}")


def format_string(value: str) -> str:
    if _BARE_RE.match(value):
        return value
    # Non-ASCII text is written as is; the file is declared UTF-8
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _ordered_keys(value_dict: Dict[str, Value]) -> List[str]:
    # isa first, then alphabetical, as Xcode writes them
    keys = sorted(k for k in value_dict if k != "isa")
    if "isa" in value_dict:
        keys.insert(0, "isa")
    return keys


def format_dict(value_dict: Dict[str, Value], indent_level: int, comments: Comments) -> str:
    """
    Format a dictionary.

    Args:
        value_dict: The dictionary to format.
        indent_level: The current indentation level.
        comments: Reference comments keyed by object ID.

    Returns:
        A string representing the formatted dictionary.
    """
    indent = "\t" * indent_level
    inner_indent = "\t" * (indent_level + 1)

    # Empty dictionaries should have braces on separate lines for Xcode compatibility
    if not value_dict:
        return "{\n" + indent + "}"

    result = "{\n"
    for key in _ordered_keys(value_dict):
        value = value_dict[key]
        formatted_key = format_string(key)
        formatted_value = format_value(value, indent_level + 1, comments)
        result += f"{inner_indent}{formatted_key} = {formatted_value};\n"
    result += f"{indent}}}"
    return result


def format_inline_dict(value_dict: Dict[str, Value], comments: Comments) -> str:
    result = "{"
    for key in _ordered_keys(value_dict):
        value = value_dict[key]
        if isinstance(value, dict):
            formatted_value = format_inline_dict(value, comments)
        elif isinstance(value, list):
            formatted_value = (
                "(" + "".join(format_value(v, 0, comments) + ", " for v in value) + ")"
            )
        else:
            formatted_value = format_value(value, 0, comments)
        result += f"{format_string(key)} = {formatted_value}; "
    return result + "}"


def format_list(value_list: List[Value], indent_level: int, comments: Comments) -> str:
    """
    Format a list.

    Args:
        value_list: The list to format.
        indent_level: The current indentation level.
        comments: Reference comments keyed by object ID.

    Returns:
        A string representing the formatted list.
    """
    indent = "\t" * indent_level
    inner_indent = "\t" * (indent_level + 1)

    if not value_list:
        return "(\n" + indent + ")"

    result = "(\n"
    for item in value_list:
        result += f"{inner_indent}{format_value(item, indent_level + 1, comments)},\n"
    result += f"{indent})"
    return result


def project_name_for(path: Optional[str]) -> str:
    # "ios/App.xcodeproj/project.pbxproj" -> "App"
    if not path:
        return "Project"
    for part in reversed(re.split(r"[\\/]", path)):
        if part.endswith(".xcodeproj"):
            return part[: -len(".xcodeproj")]
    return "Project"
