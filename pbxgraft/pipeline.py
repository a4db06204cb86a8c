from dataclasses import dataclass, field
from typing import List, Sequence

from pbxgraft.config import Options
from pbxgraft.descriptor import Part, ProjectDescriptor
from pbxgraft.errors import GraphIntegrityError, IOFailure
from pbxgraft.transforms.base import Status, Transform, TransformResult
from pbxgraft.transforms.entitlements import AppGroupsTransform
from pbxgraft.transforms.extension_target import ExtensionTargetTransform
from pbxgraft.transforms.podfile import FollyFixTransform, NewArchTransform
from pbxgraft.transforms.signing import SigningTransform
from pbxgraft.xcode.validator import validate_project


@dataclass
class PipelineReport:
    results: List[TransformResult] = field(default_factory=list)
    written: List[str] = field(default_factory=list)

    @property
    def status(self) -> Status:
        statuses = {r.status for r in self.results}
        if Status.FAILED in statuses:
            return Status.FAILED
        if Status.APPLIED in statuses:
            return Status.APPLIED
        return Status.NO_OP

    @property
    def ok(self) -> bool:
        return self.status != Status.FAILED

    def lines(self) -> List[str]:
        lines = [str(r) for r in self.results]
        lines.extend(f"wrote {path}" for path in self.written)
        lines.append(f"pipeline: {self.status.value}")
        return lines


class Pipeline:
    def __init__(self, transforms: Sequence[Transform]):
        self.transforms = list(transforms)

    def run(
        self, descriptor: ProjectDescriptor, options: Options, write: bool = True
    ) -> PipelineReport:
        report = PipelineReport()
        for transform in self.transforms:
            try:
                result = transform(descriptor, options)
            except (GraphIntegrityError, IOFailure) as e:
                # Fatal: stop here and leave every file as it was
                report.results.append(
                    TransformResult(transform.name, Status.FAILED, str(e))
                )
                return report
            report.results.append(result)

        # Only a graph this run changed is checked; untouched projects are not rewritten
        if Part.PROJECT in descriptor.dirty:
            if errors := validate_project(descriptor.project):
                report.results.append(
                    TransformResult("validate", Status.FAILED, "; ".join(errors))
                )
                return report

        if write:
            try:
                report.written = [str(path) for path in descriptor.save()]
            except IOFailure as e:
                report.results.append(TransformResult("write", Status.FAILED, str(e)))
        return report


def default_pipeline() -> Pipeline:
    # Signing must follow target assembly so it sees the new configurations
    return Pipeline(
        [
            AppGroupsTransform(),
            ExtensionTargetTransform(),
            SigningTransform(),
            NewArchTransform(),
            FollyFixTransform(),
        ]
    )
