"""Git-backed JSON content management.

Content files live under a content root and are validated against schemas
before they are written. Writes are mirrored to a GitHub repository when one
is configured, and the content root can be committed, pushed and pulled with
an embedded Git implementation.
"""

from jsoncms.exceptions import ErrorKind, JsoncmsError

__all__ = ["ErrorKind", "JsoncmsError"]
