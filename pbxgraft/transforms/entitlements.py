from typing import Optional

from pbxgraft.config import Options
from pbxgraft.descriptor import Part, ProjectDescriptor
from pbxgraft.errors import AlreadyAppliedSkip, PreconditionSkip
from pbxgraft.transforms.base import Transform

APP_GROUPS_KEY = "com.apple.security.application-groups"


class AppGroupsTransform(Transform):
    name = "app-groups"

    def apply(self, descriptor: ProjectDescriptor, options: Options) -> Optional[str]:
        if not options.app_group:
            raise PreconditionSkip("no app group configured")
        # Only the host app receives the entitlement; the extension has no copy
        entitlements = descriptor.entitlements or {}
        desired = [options.app_group]
        if entitlements.get(APP_GROUPS_KEY) == desired:
            raise AlreadyAppliedSkip(f"{APP_GROUPS_KEY} already set to {desired}")
        entitlements[APP_GROUPS_KEY] = desired
        descriptor.entitlements = entitlements
        descriptor.mark_dirty(Part.ENTITLEMENTS)
        return f"set {APP_GROUPS_KEY} to {desired}"
