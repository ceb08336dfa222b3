"""Exception hierarchy for diary operations."""


class DiaryError(Exception):
    """Base class for all diary failures surfaced to the HTTP layer."""

    pass


class EmptyInputError(DiaryError):
    """Input text was empty."""

    pass


class NoJsonFoundError(DiaryError):
    """No parseable JSON object was found in a block of text."""

    pass


class RemoteCallError(DiaryError):
    """The LLM call failed or returned an unusable envelope."""

    pass


class ClassificationError(DiaryError):
    """Free text could not be classified into a diary entry."""

    pass


class AnalysisError(DiaryError):
    """Entries could not be analyzed."""

    pass


class EntryNotFoundError(DiaryError):
    """No entry is stored under the requested key."""

    def __init__(self, key: str):
        super().__init__(f"Entry not found: {key}")
        self.key = key


class EntryUpdateError(DiaryError):
    """A patch does not apply to the entry's type."""

    pass


class InvalidEntryError(DiaryError):
    """A stored entry matches no known entry shape."""

    pass
