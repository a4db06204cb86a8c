# Primitive graph mutations.
#
# Each method adds nodes to an XcodeProject and wires them to existing ones.
# References to objects that are not in the project, and structural
# violations (a second configuration list, anything but a Debug/Release
# pair), raise GraphIntegrityError. Setting values are taken as given.

import os
import re
from typing import Dict, Iterable, List, Optional, Sequence, Union

from pbxgraft.errors import GraphIntegrityError
from pbxgraft.xcode.ids import IdAllocator
from pbxgraft.xcode.model import (
    BuildPhase,
    DstSubfolderSpec,
    FileType,
    PBXBuildFile,
    PBXContainerItemProxy,
    PBXCopyFilesBuildPhase,
    PBXFileReference,
    PBXGroup,
    PBXNativeTarget,
    PBXTargetDependency,
    ProductType,
    ProxyType,
    SourceTree,
    Value,
    XCBuildConfiguration,
    XCConfigurationList,
    XcodeID,
    XcodeProject,
    unquote,
)

_ID_RE = re.compile(r"^[0-9A-F]{24}$")

BUILD_ACTION_MASK = "2147483647"

EMBED_EXTENSIONS_PHASE = "Embed Foundation Extensions"

REQUIRED_CONFIGURATIONS = ("Debug", "Release")


def looks_like_id(value: str) -> bool:
    return isinstance(value, XcodeID) or bool(_ID_RE.match(value))


class ProjectEditor:
    def __init__(
        self,
        project: XcodeProject,
        allocator: IdAllocator,
        common_settings: Optional[Dict[str, Value]] = None,
    ):
        self.project = project
        self.allocator = allocator
        self.common_settings = dict(common_settings or {})

    def add_group(
        self,
        name: str,
        children: Iterable[str],
        path: Optional[str] = None,
        parent: Optional[str] = None,
    ) -> PBXGroup:
        child_ids: List[str] = []
        for child in children:
            if looks_like_id(child):
                self.project.require(child)
                child_ids.append(XcodeID(child))
            else:
                # Literal file name placeholder
                child_ids.append(self.add_file_reference(child).id)

        group = PBXGroup(id=self.allocator.allocate(f"PBXGroup:{name}"))
        group.name = name
        group.path = path
        group.sourceTree = SourceTree.GROUP.value
        group.children.extend(child_ids)
        self.project.add(group)

        if parent is not None:
            self.project.require(parent, PBXGroup).children.append(group.id)
        return group

    def add_file_reference(
        self,
        path: str,
        file_type: Optional[FileType] = None,
        source_tree: SourceTree = SourceTree.GROUP,
        name: Optional[str] = None,
        explicit: bool = False,
    ) -> PBXFileReference:
        if file_type is None:
            file_type = FileType.from_extension(os.path.splitext(path)[1])
        ref = PBXFileReference(id=self.allocator.allocate(f"PBXFileReference:{path}"))
        if explicit:
            # Products are typed explicitly and kept out of the index
            ref.explicitFileType = file_type.value
            ref.includeInIndex = "0"
        else:
            ref.lastKnownFileType = file_type.value
        ref.name = name
        ref.path = path
        ref.sourceTree = source_tree.value
        return self.project.add(ref)

    def add_build_file(
        self, file_ref: str, settings: Optional[Dict[str, Value]] = None
    ) -> PBXBuildFile:
        self.project.require(file_ref, PBXFileReference)
        build_file = PBXBuildFile(id=self.allocator.allocate(f"PBXBuildFile:{file_ref}"))
        build_file.fileRef = XcodeID(file_ref)
        build_file.settings = settings
        return self.project.add(build_file)

    def add_build_configuration(
        self, settings_override: Dict[str, Value], name: str
    ) -> XCBuildConfiguration:
        config = XCBuildConfiguration(
            id=self.allocator.allocate(f"XCBuildConfiguration:{name}")
        )
        config.name = name
        config.buildSettings.update(self.common_settings)
        config.buildSettings.update(settings_override)
        return self.project.add(config)

    def add_configuration_list(
        self, configs: Sequence[str], default_name: str = "Release"
    ) -> XCConfigurationList:
        names = sorted(
            str(self.project.require(c, XCBuildConfiguration).name) for c in configs
        )
        if names != sorted(REQUIRED_CONFIGURATIONS):
            raise GraphIntegrityError(
                f"configuration list requires exactly one Debug and one Release configuration, got {names}"
            )
        if default_name not in REQUIRED_CONFIGURATIONS:
            raise GraphIntegrityError(f"unknown default configuration {default_name}")
        for config_id in configs:
            holder = self._list_holding(config_id)
            if holder is not None:
                raise GraphIntegrityError(
                    f"configuration {config_id} already belongs to list {holder.id}"
                )

        config_list = XCConfigurationList(
            id=self.allocator.allocate("XCConfigurationList")
        )
        config_list.buildConfigurations.extend(XcodeID(c) for c in configs)
        config_list.defaultConfigurationIsVisible = "0"
        config_list.defaultConfigurationName = default_name
        return self.project.add(config_list)

    def add_target(
        self,
        name: str,
        product_type: ProductType,
        bundle_id: str,
        config_list_id: str,
        product_reference: Optional[str] = None,
    ) -> PBXNativeTarget:
        target = PBXNativeTarget(id=self.allocator.allocate(f"PBXNativeTarget:{name}"))
        target.name = name
        target.productName = name
        target.productType = product_type.value
        if product_reference is not None:
            self.project.require(product_reference, PBXFileReference)
            target.productReference = XcodeID(product_reference)
        # Empty lists are written out, as Xcode does for new targets
        target.attrs.update(buildPhases=[], buildRules=[], dependencies=[])
        self.attach_configuration_list(target, config_list_id)

        for config in self.project.configurations_of(target):
            config.buildSettings["PRODUCT_BUNDLE_IDENTIFIER"] = bundle_id

        self.project.add(target)
        self.project.project.targets.append(target.id)
        return target

    def attach_configuration_list(self, target: PBXNativeTarget, config_list_id: str) -> None:
        self.project.require(config_list_id, XCConfigurationList)
        if target.buildConfigurationList is not None:
            raise GraphIntegrityError(
                f"target {target.name} already has configuration list {target.buildConfigurationList}"
            )
        owner = self.project.owner_of_configuration_list(config_list_id)
        if owner is not None:
            raise GraphIntegrityError(
                f"configuration list {config_list_id} is already attached to {owner.id}"
            )
        target.buildConfigurationList = XcodeID(config_list_id)

    def add_target_dependency(
        self, from_target: PBXNativeTarget, to_target: PBXNativeTarget
    ) -> XcodeID:
        """
        Record that from_target depends on to_target.

        The edge is modeled as a PBXTargetDependency referencing a
        PBXContainerItemProxy; the proxy's identifier is returned.
        """
        self.project.require(from_target.id, PBXNativeTarget)
        self.project.require(to_target.id, PBXNativeTarget)

        proxy = PBXContainerItemProxy(
            id=self.allocator.allocate(f"PBXContainerItemProxy:{to_target.id}")
        )
        proxy.containerPortal = self.project.rootObject
        proxy.proxyType = ProxyType.TARGET_DEPENDENCY.value
        proxy.remoteGlobalIDString = to_target.id
        proxy.remoteInfo = unquote(to_target.name)
        self.project.add(proxy)

        dependency = PBXTargetDependency(
            id=self.allocator.allocate(f"PBXTargetDependency:{to_target.id}")
        )
        dependency.target = to_target.id
        dependency.targetProxy = proxy.id
        self.project.add(dependency)

        from_target.dependencies.append(dependency.id)
        return proxy.id

    def add_build_phase(
        self,
        kind: type,
        file_refs: Sequence[str],
        owner_target: PBXNativeTarget,
        settings: Optional[Dict[str, Value]] = None,
        **attrs: Union[str, Value],
    ) -> BuildPhase:
        if not issubclass(kind, BuildPhase):
            raise GraphIntegrityError(f"{kind.__name__} is not a build phase")
        self.project.require(owner_target.id, PBXNativeTarget)

        phase = kind(id=self.allocator.allocate(f"{kind.ISA}:{owner_target.id}"))
        phase.buildActionMask = BUILD_ACTION_MASK
        phase.files.extend(self.add_build_file(ref, settings).id for ref in file_refs)
        phase.runOnlyForDeploymentPostprocessing = "0"
        for key, value in attrs.items():
            phase.attrs[key] = value
        self.project.add(phase)

        owner_target.buildPhases.append(phase.id)
        return phase

    def add_embed_phase(
        self, host: PBXNativeTarget, product_ref: str
    ) -> PBXCopyFilesBuildPhase:
        settings = {"ATTRIBUTES": ["RemoveHeadersOnCopy"]}
        existing = self._embed_phase_of(host)
        if existing is not None:
            existing.files.append(self.add_build_file(product_ref, settings).id)
            return existing
        return self.add_build_phase(
            PBXCopyFilesBuildPhase,
            [product_ref],
            host,
            settings=settings,
            dstPath="",
            dstSubfolderSpec=str(DstSubfolderSpec.PLUGINS.value),
            name=EMBED_EXTENSIONS_PHASE,
        )

    def _embed_phase_of(self, host: PBXNativeTarget) -> Optional[PBXCopyFilesBuildPhase]:
        for phase_id in host.buildPhases:
            phase = self.project.get(phase_id)
            if (
                isinstance(phase, PBXCopyFilesBuildPhase)
                and str(phase.dstSubfolderSpec) == str(DstSubfolderSpec.PLUGINS.value)
            ):
                return phase
        return None

    def _list_holding(self, config_id: str) -> Optional[XCConfigurationList]:
        for config_list in self.project.by_isa(XCConfigurationList):
            if config_id in config_list.buildConfigurations:
                return config_list
        return None
