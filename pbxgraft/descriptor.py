# The on-disk state a pipeline run works on.
#
# A ProjectDescriptor is read once at the start of a run and written once at
# the end. Only the parts a transform marked dirty are written, each through
# a temporary file in the target directory that replaces the original, so a
# failed write leaves the previous contents in place.

import os
import plistlib
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Set
from xml.parsers.expat import ExpatError

from pbxgraft.config import Options
from pbxgraft.errors import IOFailure
from pbxgraft.xcode.formatter import format_xcode_project, project_name_for
from pbxgraft.xcode.model import XcodeProject
from pbxgraft.xcode.parser import parse_xcode_project


class Part(Enum):
    PROJECT = "project"
    ENTITLEMENTS = "entitlements"
    PODFILE = "podfile"


def find_project_file(platform_root: Path, app_name: str) -> Path:
    preferred = platform_root / f"{app_name}.xcodeproj" / "project.pbxproj"
    if preferred.is_file():
        return preferred
    candidates = sorted(
        p / "project.pbxproj"
        for p in platform_root.glob("*.xcodeproj")
        if p.name != "Pods.xcodeproj" and (p / "project.pbxproj").is_file()
    )
    if not candidates:
        raise IOFailure(f"no .xcodeproj found in {platform_root}")
    return candidates[0]


def read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailure(f"failed to read {path}: {e}") from e


def read_plist(path: Path) -> Optional[Dict[str, Any]]:
    try:
        with open(path, "rb") as f:
            return plistlib.load(f)
    except FileNotFoundError:
        return None
    except (OSError, ValueError, ExpatError) as e:
        raise IOFailure(f"failed to read {path}: {e}") from e


def write_atomic(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            os.unlink(tmp_path)
            raise
    except OSError as e:
        raise IOFailure(f"failed to write {path}: {e}") from e


class ProjectDescriptor:
    def __init__(
        self,
        platform_root: Path,
        project_path: Path,
        project: XcodeProject,
        entitlements_path: Path,
        entitlements: Optional[Dict[str, Any]],
        info_path: Path,
        info: Optional[Dict[str, Any]],
        podfile_path: Path,
        podfile: Optional[str],
    ):
        self.platform_root = platform_root
        self.project_path = project_path
        self.project = project
        self.entitlements_path = entitlements_path
        self.entitlements = entitlements
        self.info_path = info_path
        self.info = info
        self.podfile_path = podfile_path
        self.podfile = podfile
        self.dirty: Set[Part] = set()

    @classmethod
    def load(cls, options: Options) -> "ProjectDescriptor":
        platform_root = Path(options.platform_root)
        if options.project_path:
            project_path = Path(options.project_path)
        else:
            project_path = find_project_file(platform_root, options.app_name)
        project_text = read_text(project_path)
        if project_text is None:
            raise IOFailure(f"project file {project_path} does not exist")

        app_dir = platform_root / options.app_name
        if options.entitlements_path:
            entitlements_path = Path(options.entitlements_path)
        else:
            entitlements_path = app_dir / f"{options.app_name}.entitlements"
        info_path = app_dir / "Info.plist"
        podfile_path = platform_root / "Podfile"

        return cls(
            platform_root=platform_root,
            project_path=project_path,
            project=parse_xcode_project(project_text),
            entitlements_path=entitlements_path,
            entitlements=read_plist(entitlements_path),
            info_path=info_path,
            info=read_plist(info_path),
            podfile_path=podfile_path,
            podfile=read_text(podfile_path),
        )

    def mark_dirty(self, part: Part) -> None:
        self.dirty.add(part)

    def serialize(self, part: Part) -> bytes:
        if part is Part.PROJECT:
            name = project_name_for(str(self.project_path))
            return format_xcode_project(self.project, name).encode("utf-8")
        if part is Part.ENTITLEMENTS:
            return plistlib.dumps(self.entitlements or {}, fmt=plistlib.FMT_XML)
        return (self.podfile or "").encode("utf-8")

    def path_of(self, part: Part) -> Path:
        return {
            Part.PROJECT: self.project_path,
            Part.ENTITLEMENTS: self.entitlements_path,
            Part.PODFILE: self.podfile_path,
        }[part]

    def save(self) -> list:
        # Serialize everything first so a formatting error writes nothing
        pending = [
            (self.path_of(part), self.serialize(part))
            for part in sorted(self.dirty, key=lambda p: p.value)
        ]
        for path, data in pending:
            write_atomic(path, data)
        self.dirty.clear()
        return [path for path, _ in pending]
