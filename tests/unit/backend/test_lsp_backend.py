"""
Unit tests for the language server backend connection.
"""

import asyncio
from collections import namedtuple
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from symtree.backend.client import LspHierarchyBackend, to_plain
from symtree.config import SymtreeConfig
from symtree.core.errors import BackendError, BackendNotStartedError, MalformedResponseError


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.start_io = AsyncMock()
    client.initialize_async = AsyncMock()
    client.shutdown_async = AsyncMock()
    client.stop = AsyncMock()
    client.protocol.send_request_async = AsyncMock(return_value={"id": 1})
    return client


@pytest.fixture
def started(tmp_path, mock_client):
    with patch("symtree.backend.client.LanguageClient", return_value=mock_client):
        backend = LspHierarchyBackend(tmp_path, SymtreeConfig())
        asyncio.run(backend.start())
    return backend


class TestToPlain:
    """Normalization of decoded results."""

    def test_namedtuples_become_dicts(self):
        Obj = namedtuple("Obj", ["id", "children"])
        value = Obj(id=1, children=[Obj(id=2, children=[])])

        assert to_plain(value) == {"id": 1, "children": [{"id": 2, "children": []}]}

    def test_plain_values_pass_through(self):
        assert to_plain({"a": [1, "x", None]}) == {"a": [1, "x", None]}


class TestLifecycle:
    """start/stop handshake."""

    def test_start_initializes(self, started, mock_client, tmp_path):
        mock_client.start_io.assert_awaited_once()
        args, kwargs = mock_client.start_io.call_args
        assert args[0] == "ccls"
        assert kwargs["cwd"] == str(tmp_path.resolve())

        params = mock_client.initialize_async.call_args.args[0]
        assert params.root_uri == tmp_path.resolve().as_uri()
        assert params.initialization_options["cacheDirectory"] == ".ccls-cache"
        mock_client.initialized.assert_called_once()
        assert started.is_running

    def test_failed_start_raises_backend_error(self, tmp_path, mock_client):
        mock_client.start_io.side_effect = FileNotFoundError("ccls")
        with patch("symtree.backend.client.LanguageClient", return_value=mock_client):
            backend = LspHierarchyBackend(tmp_path, SymtreeConfig())
            with pytest.raises(BackendError):
                asyncio.run(backend.start())
        assert not backend.is_running

    def test_failed_handshake_stops_spawned_server(self, tmp_path, mock_client):
        mock_client.initialize_async.side_effect = RuntimeError("server crashed")
        with patch("symtree.backend.client.LanguageClient", return_value=mock_client):
            backend = LspHierarchyBackend(tmp_path, SymtreeConfig())
            with pytest.raises(BackendError) as exc_info:
                asyncio.run(backend.start())

        mock_client.stop.assert_awaited_once()
        mock_client.initialized.assert_not_called()
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert not backend.is_running

    def test_cleanup_failure_keeps_handshake_error(self, tmp_path, mock_client):
        mock_client.initialize_async.side_effect = RuntimeError("server crashed")
        mock_client.stop.side_effect = OSError("already gone")
        with patch("symtree.backend.client.LanguageClient", return_value=mock_client):
            backend = LspHierarchyBackend(tmp_path, SymtreeConfig())
            with pytest.raises(BackendError) as exc_info:
                asyncio.run(backend.start())

        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_stop_shuts_down(self, started, mock_client):
        asyncio.run(started.stop())

        mock_client.shutdown_async.assert_awaited_once()
        mock_client.exit.assert_called_once()
        mock_client.stop.assert_awaited_once()
        assert not started.is_running


class TestRequests:
    """Hierarchy queries over JSON-RPC."""

    def test_requests_before_start_fail(self, tmp_path):
        backend = LspHierarchyBackend(tmp_path)
        with pytest.raises(BackendNotStartedError):
            asyncio.run(backend.call_hierarchy({"id": 1}))

    def test_call_hierarchy_uses_configured_method(self, started, mock_client):
        result = asyncio.run(started.call_hierarchy({"id": 1}))

        mock_client.protocol.send_request_async.assert_awaited_once_with("$ccls/call", {"id": 1})
        assert result == {"id": 1}

    def test_inheritance_hierarchy_uses_configured_method(self, started, mock_client):
        asyncio.run(started.inheritance_hierarchy({"id": 1, "derived": True}))

        method = mock_client.protocol.send_request_async.call_args.args[0]
        assert method == "$ccls/inheritance"

    def test_rpc_failure_becomes_backend_error(self, started, mock_client):
        mock_client.protocol.send_request_async.side_effect = RuntimeError("pipe closed")

        with pytest.raises(BackendError) as exc_info:
            asyncio.run(started.call_hierarchy({"id": 1}))

        assert exc_info.value.method == "$ccls/call"
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_info(self, started, mock_client):
        mock_client.protocol.send_request_async.return_value = {
            "db": {"files": 2, "funcs": 3, "types": 4, "vars": 5},
            "pipeline": {"pendingIndexRequests": 1},
            "project": {"entries": 6},
        }

        info = asyncio.run(started.info())

        assert info.files == 2
        assert info.pending_index_requests == 1

    def test_malformed_info(self, started, mock_client):
        mock_client.protocol.send_request_async.return_value = "nope"
        with pytest.raises(MalformedResponseError):
            asyncio.run(started.info())

    def test_reload_sends_notification(self, started, mock_client):
        started.reload()
        mock_client.protocol.notify.assert_called_once_with("$ccls/reload", None)

    def test_open_document(self, started, mock_client, tmp_path):
        source = tmp_path / "shape.hpp"
        source.write_text("struct Shape {};\n")

        uri = started.open_document(source)

        params = mock_client.text_document_did_open.call_args.args[0]
        assert uri == source.resolve().as_uri()
        assert params.text_document.language_id == "cpp"
        assert params.text_document.text == "struct Shape {};\n"
