# Xcode project file model.
#
# This module defines the in-memory graph for an existing Xcode project file
# (.pbxproj). Every node keeps its complete attribute dictionary so that
# attributes the transforms never look at survive a load/save cycle
# unchanged. Node subclasses only add typed accessors for the handful of
# attributes that are read or written here.

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Type, Union

from pbxgraft.errors import GraphIntegrityError


# Type definition for Xcode object identifiers
class XcodeID(str):
    pass


# Attribute values as they appear in a project file: strings, arrays, dictionaries
Value = Union[str, List["Value"], Dict[str, "Value"]]


# Source Tree values used in PBXFileReference and PBXGroup
class SourceTree(Enum):
    GROUP = "<group>"
    SOURCE_ROOT = "SOURCE_ROOT"
    BUILT_PRODUCTS_DIR = "BUILT_PRODUCTS_DIR"
    SDKROOT = "SDKROOT"


# Destination subfolder specifications used in PBXCopyFilesBuildPhase
class DstSubfolderSpec(Enum):
    ABSOLUTE_PATH = 0  # Absolute path
    WRAPPER = 1  # App bundle
    EXECUTABLES = 6  # Executables
    RESOURCES = 7  # Resources
    FRAMEWORKS = 10  # Frameworks
    SHARED_FRAMEWORKS = 11  # Shared Frameworks
    SHARED_SUPPORT = 12  # Shared Support
    PLUGINS = 13  # Plug-ins (app extensions)
    JAVA_RESOURCES = 15  # Java Resources
    PRODUCTS_DIRECTORY = 16  # Products Directory


# File types used in PBXFileReference
class FileType(Enum):
    C = "sourcecode.c.c"
    CPP = "sourcecode.cpp.cpp"
    C_HEADER = "sourcecode.c.h"
    SWIFT = "sourcecode.swift"
    OBJC = "sourcecode.c.objc"
    OBJCPP = "sourcecode.cpp.objcpp"
    XIB = "file.xib"
    STORYBOARD = "file.storyboard"
    PLIST = "text.plist.xml"
    ENTITLEMENTS = "text.plist.entitlements"
    STRINGS = "text.plist.strings"
    ASSET_CATALOG = "folder.assetcatalog"
    INTENT_DEFINITION = "file.intentdefinition"
    FRAMEWORK = "wrapper.framework"
    APP = "wrapper.application"
    APP_EXTENSION = "wrapper.app-extension"
    TEXT = "text"

    @staticmethod
    def from_extension(ext: str) -> "FileType":
        if ext.startswith("."):
            ext = ext[1:]

        ext_to_type = {
            "c": FileType.C,
            "cpp": FileType.CPP,
            "h": FileType.C_HEADER,
            "swift": FileType.SWIFT,
            "m": FileType.OBJC,
            "mm": FileType.OBJCPP,
            "xib": FileType.XIB,
            "storyboard": FileType.STORYBOARD,
            "plist": FileType.PLIST,
            "entitlements": FileType.ENTITLEMENTS,
            "strings": FileType.STRINGS,
            "xcassets": FileType.ASSET_CATALOG,
            "intentdefinition": FileType.INTENT_DEFINITION,
            "framework": FileType.FRAMEWORK,
            "app": FileType.APP,
            "appex": FileType.APP_EXTENSION,
        }

        return ext_to_type.get(ext.lower(), FileType.TEXT)


# Product types used in PBXNativeTarget
class ProductType(Enum):
    APPLICATION = "com.apple.product-type.application"
    FRAMEWORK = "com.apple.product-type.framework"
    STATIC_LIBRARY = "com.apple.product-type.library.static"
    BUNDLE = "com.apple.product-type.bundle"
    UNIT_TEST_BUNDLE = "com.apple.product-type.unit-test.bundle"
    APP_EXTENSION = "com.apple.product-type.app-extension"


class ProxyType(Enum):
    TARGET_DEPENDENCY = "1"  # For target dependencies
    PRODUCT_REFERENCE = "2"  # For product references


# Typed view onto one key of a node's attribute dictionary
class Attr:
    def __init__(self, key: Optional[str] = None):
        self.key = key

    def __set_name__(self, owner, name):
        if self.key is None:
            self.key = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj.attrs.get(self.key)

    def __set__(self, obj, value):
        if value is None:
            obj.attrs.pop(self.key, None)
        else:
            obj.attrs[self.key] = value


# Same as Attr, but materializes an empty list/dict so callers can mutate in place
class ListAttr(Attr):
    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj.attrs.setdefault(self.key, [])


class DictAttr(Attr):
    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj.attrs.setdefault(self.key, {})


def unquote(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


@dataclass
class Node:
    id: XcodeID
    attrs: Dict[str, Value] = field(default_factory=dict)

    ISA: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self.id = XcodeID(self.id)
        self.attrs.setdefault("isa", self.ISA)

    @property
    def isa(self) -> str:
        return str(self.attrs["isa"])

    # Text used for the /* comment */ that follows a reference to this node
    def comment(self) -> Optional[str]:
        name = self.attrs.get("name")
        return unquote(name) if isinstance(name, str) else None


@dataclass
class PBXFileReference(Node):
    ISA: ClassVar[str] = "PBXFileReference"

    name = Attr()
    path = Attr()
    sourceTree = Attr()
    lastKnownFileType = Attr()
    explicitFileType = Attr()
    includeInIndex = Attr()

    def comment(self) -> Optional[str]:
        return unquote(self.name or self.path)


@dataclass
class PBXGroup(Node):
    ISA: ClassVar[str] = "PBXGroup"

    name = Attr()
    path = Attr()
    sourceTree = Attr()
    children = ListAttr()

    def comment(self) -> Optional[str]:
        return unquote(self.name or self.path)


@dataclass
class PBXVariantGroup(PBXGroup):
    ISA: ClassVar[str] = "PBXVariantGroup"


@dataclass
class PBXBuildFile(Node):
    ISA: ClassVar[str] = "PBXBuildFile"

    fileRef = Attr()
    productRef = Attr()
    settings = Attr()


@dataclass
class BuildPhase(Node):
    DEFAULT_NAME: ClassVar[str] = ""

    name = Attr()
    files = ListAttr()
    buildActionMask = Attr()
    runOnlyForDeploymentPostprocessing = Attr()

    def comment(self) -> Optional[str]:
        return unquote(self.name) or self.DEFAULT_NAME


@dataclass
class PBXSourcesBuildPhase(BuildPhase):
    ISA: ClassVar[str] = "PBXSourcesBuildPhase"
    DEFAULT_NAME: ClassVar[str] = "Sources"


@dataclass
class PBXFrameworksBuildPhase(BuildPhase):
    ISA: ClassVar[str] = "PBXFrameworksBuildPhase"
    DEFAULT_NAME: ClassVar[str] = "Frameworks"


@dataclass
class PBXResourcesBuildPhase(BuildPhase):
    ISA: ClassVar[str] = "PBXResourcesBuildPhase"
    DEFAULT_NAME: ClassVar[str] = "Resources"


@dataclass
class PBXHeadersBuildPhase(BuildPhase):
    ISA: ClassVar[str] = "PBXHeadersBuildPhase"
    DEFAULT_NAME: ClassVar[str] = "Headers"


@dataclass
class PBXShellScriptBuildPhase(BuildPhase):
    ISA: ClassVar[str] = "PBXShellScriptBuildPhase"
    DEFAULT_NAME: ClassVar[str] = "ShellScript"


@dataclass
class PBXCopyFilesBuildPhase(BuildPhase):
    ISA: ClassVar[str] = "PBXCopyFilesBuildPhase"
    DEFAULT_NAME: ClassVar[str] = "CopyFiles"

    dstPath = Attr()
    dstSubfolderSpec = Attr()


@dataclass
class PBXContainerItemProxy(Node):
    ISA: ClassVar[str] = "PBXContainerItemProxy"

    containerPortal = Attr()
    proxyType = Attr()
    remoteGlobalIDString = Attr()
    remoteInfo = Attr()

    def comment(self) -> Optional[str]:
        return self.ISA


@dataclass
class PBXTargetDependency(Node):
    ISA: ClassVar[str] = "PBXTargetDependency"

    target = Attr()
    targetProxy = Attr()

    def comment(self) -> Optional[str]:
        return self.ISA


@dataclass
class XCBuildConfiguration(Node):
    ISA: ClassVar[str] = "XCBuildConfiguration"

    name = Attr()
    buildSettings = DictAttr()
    baseConfigurationReference = Attr()


@dataclass
class XCConfigurationList(Node):
    ISA: ClassVar[str] = "XCConfigurationList"

    buildConfigurations = ListAttr()
    defaultConfigurationIsVisible = Attr()
    defaultConfigurationName = Attr()


@dataclass
class PBXNativeTarget(Node):
    ISA: ClassVar[str] = "PBXNativeTarget"

    name = Attr()
    buildConfigurationList = Attr()
    buildPhases = ListAttr()
    buildRules = ListAttr()
    dependencies = ListAttr()
    productName = Attr()
    productReference = Attr()
    productType = Attr()


@dataclass
class PBXAggregateTarget(Node):
    ISA: ClassVar[str] = "PBXAggregateTarget"

    name = Attr()
    buildConfigurationList = Attr()
    buildPhases = ListAttr()
    dependencies = ListAttr()


@dataclass
class PBXProject(Node):
    ISA: ClassVar[str] = "PBXProject"

    attributes = DictAttr()
    buildConfigurationList = Attr()
    mainGroup = Attr()
    productRefGroup = Attr()
    targets = ListAttr()

    def comment(self) -> Optional[str]:
        return "Project object"


NODE_TYPES: Dict[str, Type[Node]] = {
    cls.ISA: cls
    for cls in (
        PBXFileReference,
        PBXGroup,
        PBXVariantGroup,
        PBXBuildFile,
        PBXSourcesBuildPhase,
        PBXFrameworksBuildPhase,
        PBXResourcesBuildPhase,
        PBXHeadersBuildPhase,
        PBXShellScriptBuildPhase,
        PBXCopyFilesBuildPhase,
        PBXContainerItemProxy,
        PBXTargetDependency,
        XCBuildConfiguration,
        XCConfigurationList,
        PBXNativeTarget,
        PBXAggregateTarget,
        PBXProject,
    )
}

TARGET_TYPES = (PBXNativeTarget, PBXAggregateTarget)


def make_node(node_id: str, attrs: Dict[str, Value]) -> Node:
    # Unknown isa kinds are kept as plain nodes and written back untouched
    node_type = NODE_TYPES.get(str(attrs.get("isa", "")), Node)
    return node_type(id=XcodeID(node_id), attrs=attrs)


# Complete project representation
@dataclass
class XcodeProject:
    objects: Dict[XcodeID, Node]
    rootObject: XcodeID
    archiveVersion: str = "1"
    objectVersion: str = "56"
    classes: Dict[str, Value] = field(default_factory=dict)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.objects

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self.objects.get(XcodeID(node_id))

    def require(self, node_id: Optional[str], expected: Type[Node] = Node) -> Any:
        node = self.get(node_id)
        if node is None:
            raise GraphIntegrityError(f"reference to unknown object {node_id}")
        if not isinstance(node, expected):
            raise GraphIntegrityError(
                f"object {node_id} is a {node.isa}, expected {expected.ISA or expected.__name__}"
            )
        return node

    def add(self, node: Node) -> Node:
        if node.id in self.objects:
            raise GraphIntegrityError(f"object {node.id} already exists")
        self.objects[node.id] = node
        return node

    def by_isa(self, node_type: Type[Node]) -> Iterator[Any]:
        for node in self.objects.values():
            if isinstance(node, node_type):
                yield node

    @property
    def project(self) -> PBXProject:
        return self.require(self.rootObject, PBXProject)

    @property
    def native_targets(self) -> List[PBXNativeTarget]:
        return [
            self.require(target_id)
            for target_id in self.project.targets
            if isinstance(self.get(target_id), PBXNativeTarget)
        ]

    def find_target(self, name: str) -> Optional[PBXNativeTarget]:
        for target in self.by_isa(PBXNativeTarget):
            if unquote(target.name) == name:
                return target
        return None

    def owner_of_configuration_list(self, list_id: str) -> Optional[Node]:
        for node in self.objects.values():
            if isinstance(node, TARGET_TYPES + (PBXProject,)):
                if node.attrs.get("buildConfigurationList") == list_id:
                    return node
        return None

    def configurations_of(self, owner: Node) -> List[XCBuildConfiguration]:
        config_list = self.get(owner.attrs.get("buildConfigurationList"))
        if not isinstance(config_list, XCConfigurationList):
            return []
        return [
            self.require(config_id, XCBuildConfiguration)
            for config_id in config_list.buildConfigurations
        ]

    # Restores every node to its state on entry if the block raises
    @contextmanager
    def transaction(self) -> Iterator["XcodeProject"]:
        snapshot = copy.deepcopy(self.objects)
        try:
            yield self
        except BaseException:
            self.objects = snapshot
            raise
