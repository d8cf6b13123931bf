"""
MCP Transport layer implementations.

Provides transport mechanisms for MCP communication:
- StdioTransport: Communication via stdin/stdout
"""

import io
import sys
import json
from abc import ABC, abstractmethod
from typing import Optional


class Transport(ABC):
    """Abstract base class for MCP transports."""

    @abstractmethod
    async def send(self, message: dict) -> None:
        """Send a message."""
        pass

    @abstractmethod
    async def receive(self) -> Optional[dict]:
        """Receive a message. Returns None on EOF/close."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the transport."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class StdioTransport(Transport):
    """
    Transport using stdin/stdout for communication.

    Writes one JSON message per line. Reads either newline-delimited JSON or
    messages framed with Content-Length headers. Content-Length counts UTF-8
    bytes, so stdin is read in binary mode; text streams are also accepted.
    """

    def __init__(
        self,
        input_stream=None,
        output_stream=None,
    ):
        self.input = input_stream or sys.stdin.buffer
        self.output = output_stream or sys.stdout
        self._binary = isinstance(self.input, (io.RawIOBase, io.BufferedIOBase))
        self._closed = False

    async def send(self, message: dict) -> None:
        """Send a message to stdout."""
        if self._closed:
            raise RuntimeError("Transport is closed")

        content = json.dumps(message, ensure_ascii=False)

        try:
            self.output.write(content + "\n")
            self.output.flush()
        except OSError as e:
            raise RuntimeError(f"Failed to send: {e}")

    async def receive(self) -> Optional[dict]:
        """Receive a message from stdin."""
        if self._closed:
            return None

        # Skip blank lines between messages
        while True:
            line = self._readline()
            if not line:
                return None  # EOF
            line = line.strip()
            if line:
                break

        if not line.lower().startswith("content-length:"):
            return self._decode(line)

        content_length = int(line.split(":", 1)[1].strip())

        # Read remaining headers
        while True:
            header = self._readline()
            if not header:
                return None
            if not header.strip():
                break  # Empty line = end of headers

        content = self._read_body(content_length)
        if not content:
            return None
        return self._decode(content)

    def _readline(self) -> str:
        line = self.input.readline()
        if self._binary:
            return self._to_text(line)
        return line

    def _read_body(self, length: int) -> str:
        """Read exactly length UTF-8 bytes of message body."""
        if self._binary:
            return self._to_text(self.input.read(length))

        chars = []
        size = 0
        while size < length:
            char = self.input.read(1)
            if not char:
                break
            chars.append(char)
            size += len(char.encode("utf-8"))
        return "".join(chars)

    def _to_text(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"Invalid UTF-8 input: {e}")

    def _decode(self, content: str) -> dict:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}")

    async def close(self) -> None:
        """Close the transport."""
        self._closed = True
