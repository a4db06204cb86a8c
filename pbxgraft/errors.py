class PbxgraftError(Exception):
    pass


# Attempted reference to a missing node, or a structural precondition that
# does not hold (e.g. configuration list cardinality). Fatal for the run.
class GraphIntegrityError(PbxgraftError):
    pass


class ProjectParseError(GraphIntegrityError):
    def __init__(self, message: str, line: int):
        super().__init__(f"line {line}: {message}")
        self.line = line


# Underlying read/write failure. Fatal for the run.
class IOFailure(PbxgraftError):
    pass


# Transform-local signals, absorbed by the transform and reported as status.
class TransformSkip(PbxgraftError):
    pass


class PreconditionSkip(TransformSkip):
    pass


class AlreadyAppliedSkip(TransformSkip):
    pass
