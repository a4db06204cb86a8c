import uuid
from typing import Set

from pbxgraft.xcode.model import XcodeID, XcodeProject


def generate_id(key: str) -> XcodeID:
    return XcodeID(uuid.uuid5(uuid.NAMESPACE_X500, key).hex.upper()[:24])


class IdAllocator:
    """
    Issues object identifiers for nodes added during one run.

    Identifiers are derived from the namespace, the caller's key and a
    counter, so a run over the same project produces the same ids. A
    candidate is rejected if the project already holds it or if it was
    handed out earlier in the run.
    """

    def __init__(self, project: XcodeProject, namespace: str = ""):
        self.project = project
        self.namespace = namespace
        self.issued: Set[XcodeID] = set()
        self._counter = 0

    def allocate(self, key: str = "") -> XcodeID:
        while True:
            self._counter += 1
            candidate = generate_id(f"{self.namespace}:{key}:{self._counter}")
            if candidate in self.issued or candidate in self.project:
                continue
            self.issued.add(candidate)
            return candidate
