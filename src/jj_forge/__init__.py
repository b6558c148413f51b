"""jj-forge: stacked changes and code review for Jujutsu repositories.

Keeps each change's ``forge-parent`` trailer pointing at the change below it,
pushes stacks to a fork, lands them on a branch one fast-forward at a time,
and opens forge reviews for uploaded changes.
"""

from jj_forge._version import __version__

# jj access
from jj_forge.jj.client import JJClient, SubprocessExecutor

# Trailers and descriptions
from jj_forge.trailers import (
    Trailer,
    format_trailer,
    format_trailers,
    parse_description_trailers,
    parse_trailers,
)
from jj_forge.description import (
    PARENT_TRAILER_KEY,
    remove_parent_trailer,
    split_description,
    update_parent_trailer,
)

# Models
from jj_forge.models import (
    ForgeConfig,
    OpenResult,
    ReviewRecord,
    ReviewStatus,
    Revision,
    SubmitResult,
    UploadResult,
)

# Operations
from jj_forge.operations import OpenParams, open_review, submit, upload

# Protocols
from jj_forge.protocols import Executor, Forge, ReviewCreateParams, ReviewCreateResult

# Exceptions
from jj_forge.exceptions import (
    CommandError,
    ConfigError,
    ConsistencyError,
    ForgeError,
    OperationCancelled,
    QueryError,
    RemoteStateError,
    ReviewError,
    StackValidationError,
    TrailerErrorKind,
    TrailerFormatError,
)

__all__ = [
    "__version__",
    "JJClient",
    "SubprocessExecutor",
    "Trailer",
    "format_trailer",
    "format_trailers",
    "parse_description_trailers",
    "parse_trailers",
    "PARENT_TRAILER_KEY",
    "remove_parent_trailer",
    "split_description",
    "update_parent_trailer",
    "ForgeConfig",
    "OpenResult",
    "ReviewRecord",
    "ReviewStatus",
    "Revision",
    "SubmitResult",
    "UploadResult",
    "OpenParams",
    "open_review",
    "submit",
    "upload",
    "Executor",
    "Forge",
    "ReviewCreateParams",
    "ReviewCreateResult",
    "CommandError",
    "ConfigError",
    "ConsistencyError",
    "ForgeError",
    "OperationCancelled",
    "QueryError",
    "RemoteStateError",
    "ReviewError",
    "StackValidationError",
    "TrailerErrorKind",
    "TrailerFormatError",
]
