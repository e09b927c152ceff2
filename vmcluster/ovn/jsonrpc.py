"""A minimal JSON-RPC 1.0 client over a stream socket, as spoken by OVSDB."""

from __future__ import annotations

import codecs
import json
import logging
import socket
from dataclasses import dataclass
from typing import Any, Iterator, Union

from vmcluster.ovn.errors import JsonRpcError

log = logging.getLogger(__name__)

Params = Union[list, dict]

_RECV_SIZE = 65536


def make_params(value: Any) -> Params:
    """Return request parameters: by position for a list, by name for a dict."""
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    raise TypeError(f"bad JSON value for params: {value!r}")


@dataclass(frozen=True)
class Request:
    """A request or notification sent by either peer."""

    id: Any
    method: str
    params: Params

    def to_json(self) -> dict[str, Any]:
        """Return the message as a JSON-ready dict."""
        return {"id": self.id, "method": self.method, "params": self.params}


@dataclass(frozen=True)
class Response:
    """A reply to a request."""

    id: Any
    result: Any
    error: Any


Message = Union[Request, Response]


def parse_message(value: Any) -> Message:
    """Classify a decoded JSON value as a request or a response."""
    if isinstance(value, dict):
        if (
            {"id", "method", "params"} <= value.keys()
            and isinstance(value["method"], str)
            and isinstance(value["params"], (list, dict))
        ):
            return Request(value["id"], value["method"], value["params"])
        if {"id", "result", "error"} <= value.keys():
            return Response(value["id"], value["result"], value["error"])
    raise JsonRpcError(f"not a JSON-RPC message: {value!r}")


class JsonRpcConnection:
    """A connection that sends requests and waits for their matching responses."""

    def __init__(self, sock: Any) -> None:
        self._sock = sock
        self._next_id = 0
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._decoder = json.JSONDecoder()

    @classmethod
    def connect(cls, host: str, port: int) -> "JsonRpcConnection":
        """Open a TCP connection to ``host:port``."""
        try:
            sock = socket.create_connection((host, port))
        except OSError as exc:
            raise JsonRpcError(f"cannot connect to {host}:{port}: {exc}") from exc
        return cls(sock)

    def __enter__(self) -> "JsonRpcConnection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying socket."""
        self._sock.close()

    def request(self, method: str, params: Any) -> Response:
        """Send a request and return the response carrying the same id."""
        request_id = self._next_id
        self._next_id += 1
        request = Request(request_id, method, make_params(params))
        payload = json.dumps(request.to_json(), separators=(",", ":"))
        log.debug("jsonrpc: request: %s", payload)
        try:
            self._sock.sendall(payload.encode("utf-8"))
        except OSError as exc:
            raise JsonRpcError(f"failed to send request: {exc}") from exc

        for message in self._messages():
            log.debug("jsonrpc: response: %r", message)
            if isinstance(message, Response) and message.id == request_id:
                return message
        raise JsonRpcError("no response found")

    def _messages(self) -> Iterator[Message]:
        while True:
            message = self._pop_message()
            if message is not None:
                yield message
                continue
            try:
                chunk = self._sock.recv(_RECV_SIZE)
            except OSError as exc:
                raise JsonRpcError(f"failed to read response: {exc}") from exc
            if not chunk:
                if self._buffer.strip():
                    raise JsonRpcError("connection closed in the middle of a message")
                raise JsonRpcError("connection closed before a response arrived")
            self._buffer += self._utf8.decode(chunk)

    def _pop_message(self) -> Message | None:
        text = self._buffer.lstrip()
        if not text:
            self._buffer = ""
            return None
        try:
            value, end = self._decoder.raw_decode(text)
        except json.JSONDecodeError:
            # Most likely an incomplete message: wait for more data.
            self._buffer = text
            return None
        self._buffer = text[end:]
        return parse_message(value)