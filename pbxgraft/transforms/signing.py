# Signing settings broadcast.
#
# Writes the development team and automatic code signing onto every build
# configuration that belongs to the extension target. Ownership is decided
# from the configuration's own settings, with deliberately loose matching
# so that quoting and bundle id variants written by different tool versions
# are all caught, and then confirmed by walking the configuration list of
# every target with the extension's name. No node is ever created.

from typing import Dict, Iterable, List, Optional

from pbxgraft.config import Options
from pbxgraft.descriptor import Part, ProjectDescriptor
from pbxgraft.errors import AlreadyAppliedSkip, PreconditionSkip
from pbxgraft.transforms.base import Transform
from pbxgraft.xcode.model import (
    PBXNativeTarget,
    XCBuildConfiguration,
    XcodeProject,
    unquote,
)

TARGET_NAME_PLACEHOLDER = "$(TARGET_NAME)"

WIDGET_BUNDLE_FRAGMENT = ".widget"


def _variants(value: str) -> List[str]:
    return [value, f'"{value}"']


def matches_product_name(settings: Dict, target_name: str) -> bool:
    product_name = settings.get("PRODUCT_NAME")
    if not isinstance(product_name, str):
        return False
    return product_name in _variants(target_name) + _variants(TARGET_NAME_PLACEHOLDER)


def matches_bundle_id(settings: Dict, target_name: str, known_ids: Iterable[str]) -> bool:
    bundle_id = settings.get("PRODUCT_BUNDLE_IDENTIFIER")
    if not isinstance(bundle_id, str) or not bundle_id:
        return False
    if target_name in bundle_id or WIDGET_BUNDLE_FRAGMENT in bundle_id:
        return True
    return any(bundle_id in _variants(known) for known in known_ids)


def matching_configurations(
    project: XcodeProject, target_name: str, known_ids: Iterable[str]
) -> List[XCBuildConfiguration]:
    known_ids = list(known_ids)
    matched: Dict[str, XCBuildConfiguration] = {}

    for config in project.by_isa(XCBuildConfiguration):
        settings = config.buildSettings
        if matches_product_name(settings, target_name) or matches_bundle_id(
            settings, target_name, known_ids
        ):
            matched[config.id] = config

    # Targets carrying the name are visited directly as well
    for target in project.by_isa(PBXNativeTarget):
        if unquote(target.name) == target_name:
            for config in project.configurations_of(target):
                matched.setdefault(config.id, config)

    return list(matched.values())


class SigningTransform(Transform):
    name = "signing"

    def apply(self, descriptor: ProjectDescriptor, options: Options) -> Optional[str]:
        if not options.team_id:
            raise PreconditionSkip("no team id supplied, 0 configurations updated")

        desired = {
            "DEVELOPMENT_TEAM": options.team_id,
            "CODE_SIGN_STYLE": "Automatic",
        }
        configs = matching_configurations(
            descriptor.project, options.target_name, options.extension_bundle_ids
        )
        if not configs:
            raise PreconditionSkip(
                f"no configurations found for {options.target_name}, 0 configurations updated"
            )

        changed = 0
        for config in configs:
            settings = config.buildSettings
            if any(settings.get(key) != value for key, value in desired.items()):
                settings.update(desired)
                changed += 1
        if not changed:
            raise AlreadyAppliedSkip(
                f"DEVELOPMENT_TEAM={options.team_id} already set on {len(configs)} configurations"
            )

        descriptor.mark_dirty(Part.PROJECT)
        return (
            f"set DEVELOPMENT_TEAM={options.team_id} on {changed} of {len(configs)} configurations"
        )
