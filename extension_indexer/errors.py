"""Exception types raised while building the extension index."""


class IndexerError(Exception):
    """Base class for all indexer errors."""


class RepositoryError(IndexerError):
    """The corpus manifest is missing, unreadable or malformed."""


class ScanError(IndexerError):
    """A module's sources could not be read or parsed."""


class MetadataError(IndexerError):
    """Display metadata for a module could not be resolved."""


class DuplicateDefinitionError(IndexerError):
    """
    A second definition was recorded for an extension point.

    This points at an extractor bug or an ambiguous naming scheme, so it is
    never resolved by keeping one of the two.
    """

    def __init__(self, extension_point: str, existing: str, duplicate: str):
        self.extension_point = extension_point
        self.existing = existing
        self.duplicate = duplicate
        super().__init__(
            f"Extension point {extension_point} is already defined in {existing}; "
            f"refusing second definition from {duplicate}"
        )


class UnknownModuleError(IndexerError):
    """An extension references an artifact that was never registered."""
