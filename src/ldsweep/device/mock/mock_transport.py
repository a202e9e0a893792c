from __future__ import annotations

from collections import deque
from typing import Callable, Iterable, Optional, Union

from loguru import logger

from ldsweep.types import TransportError

Response = Union[str, Iterable[str], Callable[[str], Optional[str]]]


class MockTransport:
    """Scripted transport.

    Every command sent is recorded (terminator stripped) in `sent`. When a sent
    command has an entry in `responses`, the response is queued for the next
    `read_line`:

    - a string is returned every time the command is sent
    - an iterable yields one response per send
    - a callable is called with the command and may return None for no response

    `fail_on` makes `send` raise TransportError for any command starting with the
    given prefix, after `fail_after` successful sends of that command.
    """

    def __init__(
        self,
        responses: Optional[dict[str, Response]] = None,
        fail_on: Optional[str] = None,
        fail_after: int = 0,
        name: str = "mock",
    ):
        self.responses = {}
        for cmd, resp in (responses or {}).items():
            if not isinstance(resp, str) and not callable(resp):
                resp = iter(resp)
            self.responses[cmd] = resp
        self.fail_on = fail_on
        self.fail_after = fail_after
        self.name = name
        self.sent: list[str] = []
        self.closed = False
        self._pending: deque[str] = deque()
        self._fail_count = 0

    def send(self, data: bytes) -> None:
        command = data.decode("ascii").rstrip("\r\n")
        if self.fail_on is not None and command.startswith(self.fail_on):
            if self._fail_count >= self.fail_after:
                raise TransportError(f"{self.name}: simulated write failure")
            self._fail_count += 1
        self.sent.append(command)
        response = self.respond(command)
        if response is not None:
            self._pending.append(response)

    def respond(self, command: str) -> Optional[str]:
        resp = self.responses.get(command)
        if resp is None:
            return None
        if isinstance(resp, str):
            return resp
        if callable(resp):
            return resp(command)
        return next(resp, None)

    def read_line(self) -> str:
        if not self._pending:
            raise TransportError(f"{self.name}: read timed out (no response queued)")
        response = self._pending.popleft()
        logger.trace("{} -> {}", self.name, response)
        return response + "\n"

    def close(self) -> None:
        self.closed = True

    def count(self, command: str) -> int:
        return self.sent.count(command)
