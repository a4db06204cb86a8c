from pbxgraft.config import Options
from pbxgraft.errors import (
    AlreadyAppliedSkip,
    GraphIntegrityError,
    IOFailure,
    PreconditionSkip,
)
