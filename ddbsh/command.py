"""Core shell types: the session, the command base class and shared formatting."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

_ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class ServiceError(Exception):
    """An error reported by the database service for one request."""

    def __init__(self, code: str, message: str = "", request_id: str = "") -> None:
        super().__init__(f"{code}. {request_id}. {message}")
        self.code = code
        self.message = message
        self.request_id = request_id


class CommandError(Exception):
    """A command could not complete."""


def failure(prefix: str, exc: ServiceError) -> CommandError:
    """Build the error a command raises when a service call fails."""
    return CommandError(f"{prefix} {exc.code}. {exc.request_id}.\n\t{exc.message}")


class Session:
    """Connection state shared by the commands of one shell.

    The client is any object exposing snake_case service operations that take
    a request mapping and return a response mapping, raising ServiceError on
    failure.  Command output goes to ``output`` (standard output when None).
    """

    def __init__(self, client: Any, region: str = "", endpoint: str = "") -> None:
        self.client = client
        self.region = region
        self.endpoint = endpoint
        self.output = None
        self.running = True

    def set_region_and_endpoint(self, region: str, endpoint: str) -> None:
        """Point the session at a new region and endpoint."""
        self.region = region
        self.endpoint = endpoint

    def quit(self) -> None:
        """Mark the session as finished."""
        self.running = False

    def emit(self, text: str) -> None:
        """Write one line of command output."""
        print(text, file=self.output)


def explain_string(payload: Mapping[str, Any]) -> str:
    """Render a request payload as single-line JSON."""
    return json.dumps(payload, separators=(",", ":"), default=str)


def format_key_schema(schema: Iterable[Mapping[str, str]]) -> str:
    """Render a key schema as ``HASH a, RANGE b``."""
    return ", ".join(
        f"{element.get('KeyType', '')} {element.get('AttributeName', '')}" for element in schema
    )


def format_timestamp(value: Any) -> str:
    """Render a timestamp (datetime, epoch seconds or ISO text) as ISO 8601 in UTC."""
    if value is None:
        moment = datetime.fromtimestamp(0, tz=timezone.utc)
    elif isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    elif isinstance(value, (int, float)):
        moment = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"not an ISO 8601 timestamp: {value!r}") from exc
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
    else:
        raise TypeError(f"cannot format {type(value).__name__} as a timestamp")
    return moment.astimezone(timezone.utc).strftime(_ISO_FORMAT)


class Command:
    """Base class of every shell command."""

    def __init__(self) -> None:
        self._explain = False

    def explain(self) -> None:
        """Show the requests the command would make instead of making them."""
        self._explain = True

    @property
    def explaining(self) -> bool:
        return self._explain

    def run(self, session: Session) -> None:
        """Execute the command."""

    def txget(self, session: Session) -> dict:
        """The transactional get item this command stands for.

        Raises CommandError for commands that cannot take part in a read
        transaction; subclasses that can override this.
        """
        raise CommandError(
            f"{type(self).__name__} cannot take part in a read transaction"
        )

    def txwrite(self, session: Session) -> list[dict]:
        """The transactional write items this command stands for.

        Raises CommandError for commands that cannot take part in a write
        transaction; subclasses that can override this.
        """
        raise CommandError(
            f"{type(self).__name__} cannot take part in a write transaction"
        )


class ConnectCommand(Command):
    """Switch the session to another region and endpoint."""

    def __init__(self, region: str, endpoint: str) -> None:
        super().__init__()
        self.region = region
        self.endpoint = endpoint

    def run(self, session: Session) -> None:
        session.set_region_and_endpoint(self.region, self.endpoint)
        session.emit("CONNECT")


class QuitCommand(Command):
    """End the shell session."""

    def run(self, session: Session) -> None:
        session.emit("QUIT")
        if self.explaining:
            session.emit("There is no good reason to quit. It is inexplicable.")
        session.quit()