# Extension target assembly.
#
# Adds one fully wired app extension target to the project: a source group
# with file references, a product reference, a Debug/Release configuration
# pair in its own configuration list, the target with sources, frameworks
# and resources phases, a dependency from the host target, and the host's
# embed phase for the extension product. Either all of it is added or none.

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pbxgraft.config import Options
from pbxgraft.descriptor import Part, ProjectDescriptor
from pbxgraft.errors import AlreadyAppliedSkip, GraphIntegrityError, PreconditionSkip
from pbxgraft.transforms.base import Transform
from pbxgraft.xcode.ids import IdAllocator
from pbxgraft.xcode.model import (
    FileType,
    PBXFrameworksBuildPhase,
    PBXGroup,
    PBXNativeTarget,
    PBXResourcesBuildPhase,
    PBXSourcesBuildPhase,
    ProductType,
    SourceTree,
    Value,
    XcodeID,
    XcodeProject,
)
from pbxgraft.xcode.mutators import ProjectEditor

# Extensions that Xcode can compile (add to sources build phase)
COMPILABLE_EXTENSIONS = frozenset(
    {
        ".c",
        ".cpp",
        ".m",
        ".mm",
        ".swift",
        ".intentdefinition",
    }
)

# Extensions copied into the product bundle (add to resources build phase)
RESOURCE_EXTENSIONS = frozenset(
    {
        ".xcassets",
        ".storyboard",
        ".strings",
        ".xib",
        ".json",
    }
)

FRAMEWORK_EXTENSIONS = frozenset({".framework"})

DEBUG_SETTINGS: Dict[str, Value] = {
    "DEBUG_INFORMATION_FORMAT": "dwarf",
    "MTL_ENABLE_DEBUG_INFO": "INCLUDE_SOURCE",
    "SWIFT_OPTIMIZATION_LEVEL": "-Onone",
}

RELEASE_SETTINGS: Dict[str, Value] = {
    "DEBUG_INFORMATION_FORMAT": "dwarf-with-dsym",
    "MTL_ENABLE_DEBUG_INFO": "NO",
    "SWIFT_OPTIMIZATION_LEVEL": "-Owholemodule",
}


def _literal(info: Optional[Dict[str, Any]], key: str, default: str) -> str:
    # Build-setting references such as $(MARKETING_VERSION) are not copied
    value = (info or {}).get(key)
    if isinstance(value, str) and value and "$(" not in value:
        return value
    return default


def common_settings(
    options: Options, info: Optional[Dict[str, Any]], source_dir: Path
) -> Dict[str, Value]:
    name = options.target_name
    settings: Dict[str, Value] = {
        "ASSETCATALOG_COMPILER_GLOBAL_ACCENT_COLOR_NAME": "AccentColor",
        "ASSETCATALOG_COMPILER_WIDGET_BACKGROUND_COLOR_NAME": "WidgetBackground",
        "CODE_SIGN_STYLE": "Automatic",
        "CURRENT_PROJECT_VERSION": _literal(info, "CFBundleVersion", "1"),
        "GENERATE_INFOPLIST_FILE": "YES",
        "INFOPLIST_FILE": f"{name}/Info.plist",
        "INFOPLIST_KEY_CFBundleDisplayName": options.display_name,
        "INFOPLIST_KEY_NSHumanReadableCopyright": "",
        "IPHONEOS_DEPLOYMENT_TARGET": options.deployment_target,
        "LD_RUNPATH_SEARCH_PATHS": "$(inherited) @executable_path/Frameworks @executable_path/../../Frameworks",
        "MARKETING_VERSION": _literal(info, "CFBundleShortVersionString", "1.0"),
        "PRODUCT_BUNDLE_IDENTIFIER": options.bundle_id,
        "PRODUCT_NAME": "$(TARGET_NAME)",
        "SKIP_INSTALL": "YES",
        "SWIFT_EMIT_LOC_STRINGS": "YES",
        "SWIFT_VERSION": options.swift_version,
        "TARGETED_DEVICE_FAMILY": "1,2",
    }
    if options.team_id:
        settings["DEVELOPMENT_TEAM"] = options.team_id
    if (source_dir / f"{name}.entitlements").is_file():
        settings["CODE_SIGN_ENTITLEMENTS"] = f"{name}/{name}.entitlements"
    return settings


def find_host_target(project: XcodeProject, options: Options) -> PBXNativeTarget:
    if options.host_target:
        host = project.find_target(options.host_target)
        if host is None:
            raise GraphIntegrityError(f"host target {options.host_target} not found")
        return host
    for target in project.native_targets:
        if target.productType == ProductType.APPLICATION.value:
            return target
    raise GraphIntegrityError("project has no application target to host the extension")


class ExtensionTargetTransform(Transform):
    name = "extension-target"

    def apply(self, descriptor: ProjectDescriptor, options: Options) -> Optional[str]:
        name = options.target_name
        source_dir = descriptor.platform_root / name
        if not source_dir.is_dir():
            raise PreconditionSkip(f"extension sources not found at {source_dir}")

        project = descriptor.project
        existing = project.find_target(name)
        if existing is not None:
            raise AlreadyAppliedSkip(f"target {name} already exists ({existing.id})")

        host = find_host_target(project, options)
        editor = ProjectEditor(
            project,
            IdAllocator(project, namespace=name),
            common_settings(options, descriptor.info, source_dir),
        )
        with project.transaction():
            target = assemble_extension_target(editor, host, options)

        descriptor.mark_dirty(Part.PROJECT)
        return f"added target {name} ({target.id}) embedded in {host.name}"


def assemble_extension_target(
    editor: ProjectEditor, host: PBXNativeTarget, options: Options
) -> PBXNativeTarget:
    project = editor.project
    name = options.target_name
    root = project.project

    # Source group under the main group; frameworks come from the SDK
    sources: List[XcodeID] = []
    resources: List[XcodeID] = []
    frameworks: List[XcodeID] = []
    children: List[str] = []
    for file_name in options.source_files:
        ext = os.path.splitext(file_name)[1].lower()
        if ext in FRAMEWORK_EXTENSIONS:
            ref = editor.add_file_reference(
                f"System/Library/Frameworks/{file_name}",
                FileType.FRAMEWORK,
                source_tree=SourceTree.SDKROOT,
                name=file_name,
            )
            frameworks.append(ref.id)
        else:
            ref = editor.add_file_reference(file_name)
            if ext in COMPILABLE_EXTENSIONS:
                sources.append(ref.id)
            elif ext in RESOURCE_EXTENSIONS:
                resources.append(ref.id)
        children.append(ref.id)
    editor.add_group(name, children, path=name, parent=root.mainGroup)

    product = editor.add_file_reference(
        f"{name}.appex",
        FileType.APP_EXTENSION,
        source_tree=SourceTree.BUILT_PRODUCTS_DIR,
        explicit=True,
    )
    if root.productRefGroup:
        project.require(root.productRefGroup, PBXGroup).children.append(product.id)

    debug = editor.add_build_configuration(DEBUG_SETTINGS, "Debug")
    release = editor.add_build_configuration(RELEASE_SETTINGS, "Release")
    config_list = editor.add_configuration_list([debug.id, release.id], "Release")

    target = editor.add_target(
        name,
        ProductType.APP_EXTENSION,
        options.bundle_id,
        config_list.id,
        product_reference=product.id,
    )
    editor.add_build_phase(PBXSourcesBuildPhase, sources, target)
    editor.add_build_phase(PBXFrameworksBuildPhase, frameworks, target)
    editor.add_build_phase(PBXResourcesBuildPhase, resources, target)

    # Dependency edge and embed phase go in together
    editor.add_target_dependency(host, target)
    editor.add_embed_phase(host, product.id)
    return target
