"""Transactions that group reads or writes of several commands into one request."""

from __future__ import annotations

from .command import Command, ServiceError, Session, explain_string, failure


class TransactCommand(Command):
    """Collects the transactional items of other commands until commit or rollback."""

    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session
        self.items: list[dict] = []
        self.committed = False
        self._aborted = False

    def append(self, command: Command) -> None:
        """Add the items a command stands for; abort the transaction if it has none."""
        raise NotImplementedError

    def commit(self) -> None:
        """Mark the transaction ready to run."""
        self.committed = True

    def rollback(self) -> None:
        """Abandon the transaction."""
        self._aborted = True

    def abort(self) -> None:
        """Mark the transaction as failed."""
        self._aborted = True

    def aborted(self) -> bool:
        """Whether the transaction has been aborted."""
        return self._aborted

    def _ready(self) -> bool:
        return self.committed and not self._aborted


class TransactReadCommand(TransactCommand):
    """A transaction of item reads."""

    def __init__(self, session: Session, command: Command) -> None:
        super().__init__(session)
        self.append(command)

    def append(self, command: Command) -> None:
        item = command.txget(self.session)
        if item:
            self.items.append(item)
        else:
            self.abort()

    def run(self, session: Session) -> None:
        if not self._ready():
            session.emit("ABORT")
            return
        request = {"TransactItems": list(self.items)}
        if self.explaining:
            session.emit(f"TransactGetItems({explain_string(request)})")
            return
        try:
            response = session.client.transact_get_items(request)
        except ServiceError as exc:
            session.emit("ABORT")
            raise failure("Transaction failed.", exc) from exc
        for entry in response.get("Responses", []):
            session.emit(explain_string(entry.get("Item", {})))


class TransactWriteCommand(TransactCommand):
    """A transaction of item writes."""

    def __init__(self, session: Session, command: Command) -> None:
        super().__init__(session)
        self.append(command)

    def append(self, command: Command) -> None:
        items = command.txwrite(self.session)
        if items:
            self.items.extend(items)
        else:
            self.abort()

    def run(self, session: Session) -> None:
        if not self._ready():
            session.emit("ABORT")
            return
        request = {"TransactItems": list(self.items)}
        if self.explaining:
            session.emit(f"TransactWriteItems({explain_string(request)})")
            return
        try:
            session.client.transact_write_items(request)
        except ServiceError as exc:
            session.emit("ABORT")
            raise failure("Transaction failed.", exc) from exc
        session.emit("COMMIT")