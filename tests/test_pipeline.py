import plistlib

import pytest

from pbxgraft.descriptor import Part, ProjectDescriptor
from pbxgraft.errors import IOFailure
from pbxgraft.pipeline import Pipeline, PipelineReport, default_pipeline
from pbxgraft.transforms.base import Status, Transform, TransformResult
from pbxgraft.transforms.entitlements import APP_GROUPS_KEY, AppGroupsTransform
from pbxgraft.transforms.podfile import FOLLY_FIX_MARKER
from pbxgraft.xcode.parser import parse_xcode_project

from conftest import make_options


def _snapshot(ios_root):
    return {
        path: path.read_bytes()
        for path in (
            ios_root / "Lumbus.xcodeproj" / "project.pbxproj",
            ios_root / "Lumbus" / "Lumbus.entitlements",
            ios_root / "Podfile",
        )
    }


class _DanglingTarget(Transform):
    name = "dangling"

    def apply(self, descriptor, options):
        descriptor.project.project.targets.append("DEADBEEFDEADBEEFDEADBEEF")
        descriptor.mark_dirty(Part.PROJECT)
        return "added dangling target"


def test_full_run_applies_and_writes(descriptor, options, ios_root):
    report = default_pipeline().run(descriptor, options)

    assert [(r.name, r.status) for r in report.results] == [
        ("app-groups", Status.APPLIED),
        ("extension-target", Status.APPLIED),
        ("signing", Status.ALREADY_APPLIED),
        ("podfile-new-arch", Status.SKIPPED),
        ("podfile-folly-fix", Status.APPLIED),
    ]
    assert report.status == Status.APPLIED
    assert report.ok
    assert len(report.written) == 3
    assert report.lines()[-1] == "pipeline: applied"

    project_text = (ios_root / "Lumbus.xcodeproj" / "project.pbxproj").read_text(encoding="utf-8")
    assert parse_xcode_project(project_text).find_target("LumbusWidget") is not None
    with open(ios_root / "Lumbus" / "Lumbus.entitlements", "rb") as f:
        assert plistlib.load(f)[APP_GROUPS_KEY] == ["group.com.lumbus.shared"]
    assert FOLLY_FIX_MARKER in (ios_root / "Podfile").read_text(encoding="utf-8")


def test_second_run_is_no_op_and_byte_identical(descriptor, options, ios_root):
    default_pipeline().run(descriptor, options)
    before = _snapshot(ios_root)

    report = default_pipeline().run(ProjectDescriptor.load(options), options)

    assert report.status == Status.NO_OP
    assert report.written == []
    assert {r.status for r in report.results} <= {Status.ALREADY_APPLIED, Status.SKIPPED}
    assert _snapshot(ios_root) == before


def test_dry_run_writes_nothing(descriptor, options, ios_root):
    before = _snapshot(ios_root)
    report = default_pipeline().run(descriptor, options, write=False)

    assert report.status == Status.APPLIED
    assert report.written == []
    assert _snapshot(ios_root) == before


def test_fatal_error_stops_run_and_writes_nothing(descriptor, ios_root):
    options = make_options(ios_root, host_target="Missing")
    before = _snapshot(ios_root)

    report = default_pipeline().run(descriptor, options)

    assert [(r.name, r.status) for r in report.results] == [
        ("app-groups", Status.APPLIED),
        ("extension-target", Status.FAILED),
    ]
    assert report.status == Status.FAILED
    assert not report.ok
    assert _snapshot(ios_root) == before


def test_invalid_graph_is_not_written(descriptor, options, ios_root):
    before = _snapshot(ios_root)
    report = Pipeline([AppGroupsTransform(), _DanglingTarget()]).run(descriptor, options)

    assert report.results[-1].name == "validate"
    assert report.results[-1].status == Status.FAILED
    assert "DEADBEEFDEADBEEFDEADBEEF" in report.results[-1].message
    assert _snapshot(ios_root) == before


def test_untouched_project_is_not_rewritten(descriptor, ios_root):
    options = make_options(
        ios_root, target_name="Absent", app_group=None, team_id=None
    )
    report = default_pipeline().run(descriptor, options)

    assert report.results[1].status == Status.SKIPPED
    assert report.written
    assert all("project.pbxproj" not in path for path in report.written)


def test_write_failure_is_reported(descriptor, options, monkeypatch):
    def refuse(path, data):
        raise IOFailure(f"failed to write {path}: read-only file system")

    monkeypatch.setattr("pbxgraft.descriptor.write_atomic", refuse)
    report = default_pipeline().run(descriptor, options)

    assert report.results[-1].name == "write"
    assert report.status == Status.FAILED


@pytest.mark.parametrize(
    "statuses,overall",
    [
        ([Status.SKIPPED, Status.ALREADY_APPLIED], Status.NO_OP),
        ([Status.SKIPPED, Status.APPLIED], Status.APPLIED),
        ([Status.APPLIED, Status.FAILED], Status.FAILED),
        ([], Status.NO_OP),
    ],
)
def test_overall_status(statuses, overall):
    report = PipelineReport([TransformResult(str(i), s) for i, s in enumerate(statuses)])
    assert report.status == overall


def test_undecodable_podfile_fails_to_load(ios_root, options):
    (ios_root / "Podfile").write_bytes(b"\xff\xfeplatform :ios\n")
    with pytest.raises(IOFailure):
        ProjectDescriptor.load(options)
