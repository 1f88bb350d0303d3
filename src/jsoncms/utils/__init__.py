"""Shared utilities: content paths, locks, logging and git helpers."""

from jsoncms.utils._git import decode_bytes, get_worktree_dir, open_repo
from jsoncms.utils._locks import KeyedLock, ReadWriteLock
from jsoncms.utils._logging import (
    LogFormatType,
    create_logger,
    create_null_logger,
)
from jsoncms.utils._paths import ContentRoot

__all__ = [
    "ContentRoot",
    "KeyedLock",
    "LogFormatType",
    "ReadWriteLock",
    "create_logger",
    "create_null_logger",
    "decode_bytes",
    "get_worktree_dir",
    "open_repo",
]
