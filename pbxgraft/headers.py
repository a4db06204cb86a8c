# RCT-Folly Time.h patch.
#
# Folly's portability header declares its own clockid_t for old iOS SDKs,
# which collides with the SDK's definition on current ones. This raises the
# SDK version checks to the app's deployment target and fences off any
# explicit clockid_t declaration. Fenced lines are recognized on later runs,
# so patching is idempotent.

import re
from pathlib import Path
from typing import List

from pbxgraft.descriptor import write_atomic
from pbxgraft.errors import IOFailure

FENCE_OPEN = "#if 0 /* pbxgraft: avoid clockid_t redefinition */"
FENCE_CLOSE = "#endif"

IPHONE_MACRO_RE = re.compile(r"__IPHONE_\d+_\d+")

CLOCKID_DECLARATION_RES = [
    re.compile(r"^\s*typedef\s+uint8_t\s+clockid_t\s*;\s*$"),
    re.compile(r"^\s*using\s+clockid_t\s*=\s*unsigned\s+char\s*;\s*$"),
    re.compile(r"^\s*using\s+clockid_t\s*=\s*uint8_t\s*;\s*$"),
]


def iphone_macro(deployment_target: str) -> str:
    # "16.0" -> "__IPHONE_16_0", "15" -> "__IPHONE_15_0"
    parts = (deployment_target.split(".") + ["0"])[:2]
    return f"__IPHONE_{parts[0]}_{parts[1]}"


def patch_time_header(text: str, deployment_target: str) -> str:
    text = IPHONE_MACRO_RE.sub(iphone_macro(deployment_target), text)

    lines = text.split("\n")
    result = []
    for index, line in enumerate(lines):
        fenced = index > 0 and lines[index - 1] == FENCE_OPEN
        if not fenced and any(r.match(line) for r in CLOCKID_DECLARATION_RES):
            result.extend([FENCE_OPEN, line, FENCE_CLOSE])
        else:
            result.append(line)
    return "\n".join(result)


def find_time_headers(pods_dir: Path) -> List[Path]:
    return sorted(
        path for path in pods_dir.glob("**/Time.h") if "folly" in path.parts
    )


def patch_folly_headers(pods_dir: Path, deployment_target: str) -> List[Path]:
    """
    Patch every folly Time.h under a Pods directory.

    Returns the headers that were changed; headers that already carry the
    patch are left untouched.
    """
    patched = []
    for header in find_time_headers(pods_dir):
        try:
            original = header.read_text(encoding="utf-8")
            updated = patch_time_header(original, deployment_target)
            if updated != original:
                write_atomic(header, updated.encode("utf-8"))
                patched.append(header)
        except (OSError, UnicodeDecodeError) as e:
            raise IOFailure(f"failed to patch {header}: {e}") from e
    return patched
