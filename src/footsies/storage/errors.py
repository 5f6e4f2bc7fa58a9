"""Errors and helpers shared by the JSON document stores."""

from urllib.parse import quote


class StorageError(Exception):
    """A stored document is missing, corrupt or cannot be written."""


def safe_document_name(user_id: str) -> str:
    """Map an opaque user id onto a file name that cannot escape the store.

    Percent-encoding is injective, so distinct ids never share a document.
    """
    if not user_id or user_id in (".", ".."):
        raise StorageError(f"Invalid user id: {user_id!r}")
    return quote(user_id, safe="")
