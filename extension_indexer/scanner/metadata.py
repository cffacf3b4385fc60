"""Display metadata lookup for plugin modules."""

from dataclasses import dataclass
from typing import Optional

from extension_indexer.errors import MetadataError
from extension_indexer.graph.model import Artifact
from .repository import Corpus


@dataclass(frozen=True)
class DisplayInfo:
    """How a module is named and linked in the catalogue."""
    url: str
    display_name: str


class ManifestMetadataProvider:
    """
    Resolves display metadata from the titles and URLs listed in the manifest.

    A plugin without a listed URL falls back to ``url_template``, formatted
    with the artifact's ``group_id``, ``artifact_id`` and ``version``.
    """

    def __init__(self, corpus: Corpus, url_template: Optional[str] = None):
        self.corpus = corpus
        self.url_template = url_template

    def resolve(self, artifact: Artifact) -> DisplayInfo:
        """
        Look up the display name and URL of a module.

        Raises:
            MetadataError: If no URL is listed and no template is configured,
                or the template cannot be formatted.
        """
        listed = self.corpus.metadata_for(artifact)
        display_name = listed.title or artifact.artifact_id

        url = listed.url
        if not url and self.url_template:
            try:
                url = self.url_template.format(
                    group_id=artifact.group_id,
                    artifact_id=artifact.artifact_id,
                    version=artifact.version,
                )
            except (KeyError, IndexError, ValueError) as e:
                raise MetadataError(f"Bad plugin URL template {self.url_template!r}: {e}") from e

        if not url:
            raise MetadataError(f"No URL known for {artifact.gav_id}")

        return DisplayInfo(url=url, display_name=display_name)
