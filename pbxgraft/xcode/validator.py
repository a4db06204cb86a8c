from typing import Any, Dict, List, Set

from pbxgraft.xcode.model import (
    PBXCopyFilesBuildPhase,
    PBXBuildFile,
    PBXGroup,
    PBXNativeTarget,
    XcodeProject,
)

# Attributes holding a reference (or a list of references) to another object
# of the same project. Attributes pointing outside the project, such as
# remoteGlobalIDString, are not checked.
REFERENCE_ATTRIBUTES = frozenset(
    {
        "baseConfigurationReference",
        "buildConfigurationList",
        "buildConfigurations",
        "buildPhases",
        "children",
        "containerPortal",
        "dependencies",
        "fileRef",
        "files",
        "mainGroup",
        "productRefGroup",
        "productReference",
        "target",
        "targetProxy",
        "targets",
    }
)


def validate_references(project: XcodeProject) -> List[str]:
    errors = []
    if project.rootObject not in project:
        errors.append(f"Invalid rootObject: {project.rootObject}")

    def check_reference(value: Any, context: str):
        if isinstance(value, str):
            if value not in project:
                errors.append(f"Invalid reference in {context}: {value}")
        elif isinstance(value, list):
            for index, item in enumerate(value):
                check_reference(item, f"{context}[{index}]")

    for node in project.objects.values():
        for key, value in node.attrs.items():
            if key in REFERENCE_ATTRIBUTES:
                check_reference(value, f"{node.isa}({node.id}).{key}")

    return errors


def validate_groups(project: XcodeProject) -> List[str]:
    errors = []
    # 0 = unvisited, 1 = on the current path, 2 = done
    state: Dict[str, int] = {}

    def visit(group: PBXGroup, path: List[str]):
        state[group.id] = 1
        for child_id in group.children:
            child = project.get(child_id)
            if not isinstance(child, PBXGroup):
                continue
            if state.get(child.id) == 1:
                cycle = " -> ".join(path + [child.id])
                errors.append(f"Group containment cycle: {cycle}")
            elif child.id not in state:
                visit(child, path + [child.id])
        state[group.id] = 2

    for group in project.by_isa(PBXGroup):
        if group.id not in state:
            visit(group, [group.id])
    return errors


def validate_embedded_products(project: XcodeProject) -> List[str]:
    errors = []
    products: Dict[str, PBXNativeTarget] = {
        target.productReference: target
        for target in project.by_isa(PBXNativeTarget)
        if target.productReference
    }
    for host in project.by_isa(PBXNativeTarget):
        dependencies: Set[str] = set()
        for dependency_id in host.dependencies:
            dependency = project.get(dependency_id)
            if dependency is not None and dependency.attrs.get("target"):
                dependencies.add(str(dependency.attrs["target"]))
        for phase_id in host.buildPhases:
            phase = project.get(phase_id)
            if not isinstance(phase, PBXCopyFilesBuildPhase):
                continue
            for build_file_id in phase.files:
                build_file = project.get(build_file_id)
                if not isinstance(build_file, PBXBuildFile):
                    continue
                embedded = products.get(build_file.fileRef or "")
                if embedded is not None and embedded.id not in dependencies:
                    errors.append(
                        f"Target {host.name} embeds {embedded.name} without depending on it"
                    )
    return errors


def validate_project(project: XcodeProject) -> List[str]:
    return (
        validate_references(project)
        + validate_groups(project)
        + validate_embedded_products(project)
    )
