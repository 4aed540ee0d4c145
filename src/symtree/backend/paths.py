"""
Path conversion between the client's view of the file system and the
backend's (for example when the server runs in a container).

Rules are URI prefixes. Every rule whose prefix matches is applied, in order.
"""

import logging
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class ConversionRule(NamedTuple):
    client: str
    server: str


def path_to_uri(path: str) -> str:
    """Convert a file system path to a ``file://`` URI without resolving symlinks."""
    return Path(path).expanduser().absolute().as_uri()


class PathConverter:
    """Rewrites document URIs between client and server prefixes."""

    def __init__(self, rules: Optional[Iterable[ConversionRule]] = None) -> None:
        self.rules: List[ConversionRule] = list(rules or [])

    @classmethod
    def from_config(cls, entries: Iterable[dict]) -> "PathConverter":
        """
        Build a converter from configuration entries.

        Each entry is either ``{client: <path>, server: <path>}`` or
        ``{client_uri: <uri>, server: <path>}``.
        """
        rules = []
        for entry in entries:
            if entry.get("client_uri"):
                client = entry["client_uri"]
            else:
                client = path_to_uri(entry["client"])
            rules.append(ConversionRule(client=client, server=path_to_uri(entry["server"])))
        logger.debug(f"Loaded {len(rules)} path conversion rules")
        return cls(rules)

    def to_client(self, uri: str) -> str:
        for rule in self.rules:
            if uri.startswith(rule.server):
                uri = rule.client + uri[len(rule.server):]
        return uri

    def to_server(self, uri: str) -> str:
        for rule in self.rules:
            if uri.startswith(rule.client):
                uri = rule.server + uri[len(rule.client):]
        return uri
