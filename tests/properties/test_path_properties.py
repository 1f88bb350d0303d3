"""Property-based tests for content path sandboxing.

Invariants:
- Every accepted path resolves inside the content root
- Accepted paths are relative and free of ``..`` segments
- Clean relative paths are accepted unchanged
- A leading ``..`` segment is always rejected
"""

import posixpath
from pathlib import Path

import pytest
from hypothesis import given, strategies as st

from jsoncms.exceptions import AccessDeniedError
from jsoncms.utils import ContentRoot

ROOT = ContentRoot(Path("/srv/jsoncms-properties/content"))

# =============================================================================
# Strategies
# =============================================================================

_SAFE_NAME_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789-_"

safe_name = st.text(alphabet=_SAFE_NAME_ALPHABET, min_size=1, max_size=12).filter(
    lambda x: x != ROOT.path.name
)

safe_relative_path = st.lists(safe_name, min_size=1, max_size=4).map("/".join)

hostile_segment = st.sampled_from(
    ["..", ".", "", "content", "srv", "a", "b.json", "\\", "..\\", "C:", "\x00"]
)

hostile_path = st.one_of(
    st.lists(hostile_segment, min_size=1, max_size=6).map("/".join),
    st.lists(hostile_segment, min_size=1, max_size=6).map(lambda p: "/" + "/".join(p)),
    st.text(max_size=40),
)


# =============================================================================
# Properties
# =============================================================================


@given(hostile_path)
def test_accepted_paths_stay_inside_root(raw: str) -> None:
    try:
        normalized = ROOT.normalize(raw)
    except AccessDeniedError:
        return

    assert not normalized.startswith("/")
    assert ".." not in normalized.split("/")
    assert ROOT.locate(normalized).is_relative_to(ROOT.path)


@given(safe_relative_path)
def test_clean_relative_paths_are_unchanged(raw: str) -> None:
    assert ROOT.normalize(raw) == raw


@given(safe_relative_path)
def test_root_prefix_is_stripped(raw: str) -> None:
    assert ROOT.normalize(f"{ROOT.path.name}/{raw}") == raw
    assert ROOT.normalize(posixpath.join(ROOT.path.as_posix(), raw)) == raw


@given(safe_relative_path)
def test_leading_parent_segment_is_rejected(raw: str) -> None:
    with pytest.raises(AccessDeniedError):
        _ = ROOT.normalize(f"../{raw}")
