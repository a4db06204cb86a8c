import re
from typing import Optional, Sequence

# Minimum OS versions such as "16" or "16.4"
DEPLOYMENT_TARGET_RE = re.compile(r"^\d+(\.\d+)*$")


class Options:
    def __init__(
        self,
        platform_root: str,
        app_name: str,
        app_bundle_id: str,
        target_name: str,
        bundle_id: str,
        app_group: Optional[str],
        team_id: Optional[str],
        deployment_target: str,
        swift_version: str,
        display_name: Optional[str] = None,
        source_files: Optional[Sequence[str]] = None,
        host_target: Optional[str] = None,
        project_path: Optional[str] = None,
        entitlements_path: Optional[str] = None,
        known_bundle_ids: Sequence[str] = (),
        disable_new_arch: bool = False,
        **kwargs
    ):
        if not DEPLOYMENT_TARGET_RE.match(deployment_target or ""):
            raise ValueError(f"invalid deployment_target {deployment_target!r}")
        self.platform_root = platform_root
        self.app_name = app_name
        self.app_bundle_id = app_bundle_id
        self.target_name = target_name
        self.bundle_id = bundle_id
        self.app_group = app_group
        self.team_id = team_id
        self.deployment_target = deployment_target
        self.swift_version = swift_version
        self.display_name = display_name or target_name
        self.source_files = list(
            source_files
            or [f"{target_name}.swift", f"{target_name}Bundle.swift", "Info.plist"]
        )
        self.host_target = host_target
        self.project_path = project_path
        self.entitlements_path = entitlements_path
        self.known_bundle_ids = list(known_bundle_ids)
        self.disable_new_arch = disable_new_arch
        self.__dict__.update(kwargs)

    # Bundle ids treated as an exact match for the extension target
    @property
    def extension_bundle_ids(self) -> list:
        ids = [self.bundle_id, f"{self.app_bundle_id}.{self.target_name}"]
        ids.extend(self.known_bundle_ids)
        return list(dict.fromkeys(ids))
