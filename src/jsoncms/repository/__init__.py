"""Git operations for the content working tree.

Classes:
    ContentRepository: Status, commit, push, pull, history and revert scoped
        to the content root.

Models:
    GitFileStatus: Per-file status derived from a status-matrix row.
    StatusRow: One ``(path, head, workdir, stage)`` row.
    CommitRecord: Metadata about a single commit.
    CommitResult: Result of a commit.
    RemoteCredentials: Credentials resolved for one push or pull.

Example:
    >>> from jsoncms.repository import ContentRepository
    >>> with ContentRepository(Path("."), ContentRoot("content")) as repo:
    ...     repo.commit("Update home page").sha
    'c0ffee...'
"""

from jsoncms.repository._credentials import (
    AUTH_REMEDIATION,
    CredentialSource,
    RemoteCredentials,
    TransportKind,
    resolve_credentials,
    transport_kind,
)
from jsoncms.repository._identity import (
    FALLBACK_EMAIL,
    FALLBACK_NAME,
    AuthorIdentity,
    resolve_identity,
)
from jsoncms.repository._models import (
    CommitRecord,
    CommitResult,
    GitFileStatus,
    HeadState,
    StageState,
    StatusRow,
    WorkdirState,
    classify,
)
from jsoncms.repository._repository import (
    DEFAULT_BRANCH,
    DEFAULT_REMOTE,
    ContentRepository,
)
from jsoncms.repository._status import build_status_matrix

__all__ = [
    "AUTH_REMEDIATION",
    "DEFAULT_BRANCH",
    "DEFAULT_REMOTE",
    "FALLBACK_EMAIL",
    "FALLBACK_NAME",
    "AuthorIdentity",
    "CommitRecord",
    "CommitResult",
    "ContentRepository",
    "CredentialSource",
    "GitFileStatus",
    "HeadState",
    "RemoteCredentials",
    "StageState",
    "StatusRow",
    "TransportKind",
    "WorkdirState",
    "build_status_matrix",
    "classify",
    "resolve_credentials",
    "resolve_identity",
    "transport_kind",
]
