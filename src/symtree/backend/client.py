"""
Language server connection used as the hierarchy backend.

Spawns the code-intelligence server over stdio with pygls' language client,
performs the initialize handshake, and forwards hierarchy queries as custom
JSON-RPC requests. Any transport or RPC failure surfaces as BackendError.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from lsprotocol import types as lsp
from pygls.lsp.client import LanguageClient

from .. import __version__
from ..config import SymtreeConfig
from ..core.errors import BackendError, BackendNotStartedError
from ..core.types import ServerInfo
from .paths import PathConverter

logger = logging.getLogger(__name__)

LANGUAGE_IDS: Dict[str, str] = {
    ".c": "c",
    ".h": "cpp",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".hh": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".m": "objective-c",
    ".mm": "objective-cpp",
}


def to_plain(value: Any) -> Any:
    """
    Normalize a decoded JSON-RPC result into dicts and lists.

    Results of methods the client has no type for may come back as
    attribute objects rather than dicts, depending on the pygls version.
    """
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)) and not hasattr(value, "_asdict"):
        return [to_plain(v) for v in value]
    if hasattr(value, "_asdict"):
        return {k: to_plain(v) for k, v in value._asdict().items()}
    return value


class LspHierarchyBackend:
    """
    Hierarchy backend speaking JSON-RPC to a language server process.

    Attributes:
        workspace_root: Directory the server indexes.
        config: Launch settings, method names and initialization options.
        paths: Converter applied to document URIs sent to the server.
    """

    def __init__(
        self,
        workspace_root: Path,
        config: Optional[SymtreeConfig] = None,
        paths: Optional[PathConverter] = None,
    ) -> None:
        self.workspace_root = workspace_root.resolve()
        self.config = config or SymtreeConfig()
        self.paths = paths or PathConverter.from_config(self.config.path_conversion_rules)
        self._client: Optional[LanguageClient] = None

    @property
    def is_running(self) -> bool:
        return self._client is not None

    @property
    def root_uri(self) -> str:
        return self.paths.to_server(self.workspace_root.as_uri())

    async def start(self) -> None:
        """Spawn the server and complete the initialize handshake."""
        if self._client is not None:
            return

        launch = self.config.launch
        logger.info(f"Starting {launch.command} {' '.join(launch.args)}")
        client = LanguageClient("symtree", __version__)
        try:
            await client.start_io(
                launch.command,
                *launch.args,
                cwd=str(self.workspace_root),
                env=self.config.backend_env(),
            )
            await client.initialize_async(
                lsp.InitializeParams(
                    process_id=os.getpid(),
                    root_uri=self.root_uri,
                    capabilities=lsp.ClientCapabilities(),
                    initialization_options=self.config.resolved_initialization_options(
                        self.workspace_root
                    ),
                    workspace_folders=[
                        lsp.WorkspaceFolder(uri=self.root_uri, name=self.workspace_root.name)
                    ],
                )
            )
        except Exception as e:
            await self._discard(client)
            raise BackendError("initialize", e) from e

        client.initialized(lsp.InitializedParams())
        self._client = client
        logger.info("Backend initialized")

    async def stop(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        try:
            await client.shutdown_async(None)
            client.exit(None)
        except Exception as e:
            logger.warning(f"Backend did not shut down cleanly: {e}")
        await client.stop()
        logger.info("Backend stopped")

    async def _discard(self, client: LanguageClient) -> None:
        """Tear down a client whose handshake failed, keeping the original error."""
        try:
            await client.stop()
        except Exception as e:
            logger.warning(f"Could not stop backend after failed start: {e}")

    def open_document(self, path: Path) -> str:
        """
        Announce ``path`` as open and return the URI the server knows it by.
        """
        client = self._require_client("textDocument/didOpen")
        uri = self.paths.to_server(path.resolve().as_uri())
        client.text_document_did_open(
            lsp.DidOpenTextDocumentParams(
                text_document=lsp.TextDocumentItem(
                    uri=uri,
                    language_id=LANGUAGE_IDS.get(path.suffix.lower(), "cpp"),
                    version=1,
                    text=path.read_text(errors="replace"),
                )
            )
        )
        return uri

    async def call_hierarchy(self, params: dict) -> Any:
        return await self._request(self.config.methods.call, params)

    async def inheritance_hierarchy(self, params: dict) -> Any:
        return await self._request(self.config.methods.inheritance, params)

    async def info(self) -> ServerInfo:
        raw = await self._request(self.config.methods.info, None)
        return ServerInfo.from_wire(raw)

    def reload(self) -> None:
        """Ask the server to drop its index and reload the project."""
        method = self.config.methods.reload
        client = self._require_client(method)
        logger.info("Requesting backend reload")
        client.protocol.notify(method, None)

    async def _request(self, method: str, params: Optional[dict]) -> Any:
        client = self._require_client(method)
        try:
            result = await client.protocol.send_request_async(method, params)
        except Exception as e:
            logger.warning(f"Request {method} failed: {e}")
            raise BackendError(method, e) from e
        return to_plain(result)

    def _require_client(self, method: str) -> LanguageClient:
        if self._client is None:
            raise BackendNotStartedError(method)
        return self._client
