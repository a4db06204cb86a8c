from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pbxgraft.config import Options
from pbxgraft.descriptor import ProjectDescriptor
from pbxgraft.errors import AlreadyAppliedSkip, PreconditionSkip


class Status(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    ALREADY_APPLIED = "already-applied"
    FAILED = "failed"
    NO_OP = "no-op"  # overall pipeline status only


@dataclass
class TransformResult:
    name: str
    status: Status
    message: str = ""

    def __str__(self) -> str:
        if self.message:
            return f"[{self.name}] {self.status.value}: {self.message}"
        return f"[{self.name}] {self.status.value}"


class Transform(ABC):
    name: str = "transform"

    def __call__(self, descriptor: ProjectDescriptor, options: Options) -> TransformResult:
        # Skips are reported, never raised past the transform
        try:
            message = self.apply(descriptor, options)
        except PreconditionSkip as e:
            return TransformResult(self.name, Status.SKIPPED, str(e))
        except AlreadyAppliedSkip as e:
            return TransformResult(self.name, Status.ALREADY_APPLIED, str(e))
        return TransformResult(self.name, Status.APPLIED, message or "")

    @abstractmethod
    def apply(self, descriptor: ProjectDescriptor, options: Options) -> Optional[str]:
        """
        Mutate the descriptor in place.

        Returns a short description of the change. Raises PreconditionSkip or
        AlreadyAppliedSkip to report that nothing was done.
        """
