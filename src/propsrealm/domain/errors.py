"""Realm exception hierarchy.

Lookup misses (unknown principal, missing secret, unsupported algorithm)
are never raised; they surface as ``None``, ``False`` or
``SupportLevel.UNSUPPORTED``.
"""


class RealmError(Exception):
    """Base exception for all realm operations."""


class LoadError(RealmError):
    """A load attempt failed. The previously published snapshot is kept."""


class LineDecodeError(LoadError):
    """An accounts line holds a malformed ``\\uXXXX`` escape.

    Attributes:
        partial: The hex digits collected before decoding failed.
    """

    def __init__(self, partial: str, reason: str = "incomplete unicode escape") -> None:
        self.partial = partial
        super().__init__(f"Invalid unicode escape sequence '\\u{partial}': {reason}")


class NoRealmFoundError(LoadError):
    """No ``$REALM_NAME=...$`` marker in the users file and no default realm."""

    def __init__(self) -> None:
        super().__init__("No realm name found in users property file")


class RealmUnavailableError(RealmError):
    """The realm has no loaded snapshot or its backing services failed."""


class CredentialConstructionError(RealmError):
    """A stored credential could not be materialized.

    Raised for malformed stored digests or hash service failures. This is
    data corruption, never a wrong guess.
    """
