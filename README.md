# ddbsh

`ddbsh` is a set of shell-style command objects for working with DynamoDB.
Each command is built with the arguments a statement would carry and then
run against a `Session`, which holds the client, the region and the
endpoint in use. Commands print what a shell would print: `CREATE`, `DROP`,
`ALTER`, `BACKUP`, `RESTORE`, `COMMIT`, `ABORT` and so on.

The package has no runtime dependencies.

## The client

`Session(client, region, endpoint)` accepts any object that offers the
service operations as snake_case methods (`describe_table`, `create_table`,
`list_tables`, `put_item`, `transact_write_items`, ...). Each method is
called with one request dictionary, in the service's own field names, and
must return the response as a dictionary. When the service reports an
error, the method must raise `ddbsh.command.ServiceError(code, message,
request_id)`. A test double fits this directly; a real client that takes
keyword arguments or raises its own exceptions needs a thin adapter.

Output is written with `print` to `session.output`, which is standard
output when left as `None`.

## Commands

| Module | Commands |
| --- | --- |
| `ddbsh.command` | `ConnectCommand`, `QuitCommand` |
| `ddbsh.tables` | `CreateTableCommand`, `DropTableCommand`, `ShowTablesCommand`, `ShowLimitsCommand` |
| `ddbsh.describe` | `DescribeCommand` |
| `ddbsh.show_create_table` | `ShowCreateTableCommand` |
| `ddbsh.alter` | `UpdateTableCommand`, `UpdateTableTTLCommand` |
| `ddbsh.replica` | `UpdateTableReplicaCommand` |
| `ddbsh.backups` | `CreateBackupCommand`, `DropBackupCommand`, `RestoreBackupCommand`, `DescribeBackupCommand`, `ShowBackupsCommand` |
| `ddbsh.pitr` | `UpdatePITRCommand`, `RestorePITRCommand` |
| `ddbsh.insert` | `InsertCommand` (INSERT or REPLACE) |
| `ddbsh.transact` | `TransactReadCommand`, `TransactWriteCommand` |

`ddbsh.tables` also offers `table_exists`, `wait_for_table_active`,
`wait_for_table_gone` and the `BillingModeAndThroughput` dataclass used by
`CreateTableCommand` and `UpdateTableCommand`.

```python
from ddbsh.command import Session, ConnectCommand
from ddbsh.backups import CreateBackupCommand, ShowBackupsCommand

session = Session(client, "us-east-1", "")

ConnectCommand("us-west-2", "").run(session)                  # prints CONNECT
CreateBackupCommand("orders", "orders-nightly").run(session)  # prints BACKUP
ShowBackupsCommand("", "orders").run(session)
```

`ShowTablesCommand(brief, regexp)` keeps only table names that the regular
expression matches as a whole. Unless `brief` is set, it prints one summary
line per table (status, billing mode, table class, id, ARN, TTL and index
counts).

### Errors

When a service call fails, the command raises
`ddbsh.command.CommandError`, chained to the `ServiceError` the client
raised. `CommandError` is also raised for problems found before any call,
such as rows of the wrong width in `InsertCommand`, an invalid regular
expression, a missing or inactive table in `ShowCreateTableCommand`, or
enabling TTL without an attribute name.

### Explaining instead of running

Call `explain()` on a command before running it, and it prints the request
it would send, such as `CreateBackup({...})` or `DeleteTable({...})`,
instead of sending it. Lookups a command needs first still go to the
client: for example `DropTableCommand` with `if_exists` set checks that the
table exists, and `InsertCommand` reads the table's partition key.

```python
from ddbsh.tables import DropTableCommand

command = DropTableCommand("orders", True, False)
command.explain()
command.run(session)   # prints DeleteTable({"TableName":"orders"})
```

### Inserting items

```python
from ddbsh.insert import InsertCommand

command = InsertCommand(
    "orders",
    ["id", "total"],
    [[{"S": "a1"}, {"N": "10"}], [{"S": "a2"}, {"N": "25"}]],
    True,      # INSERT: the put fails if an item with that key exists
    "NONE",
)
command.run(session)   # prints INSERT once per row
```

Pass `False` as the fourth argument to replace items instead. Every row
must have one value per column; `validate()` checks this.

### Transactions

`TransactWriteCommand` gathers the write items of commands whose `txwrite`
supplies them (in this package, `InsertCommand`) and sends them in one
request once committed:

```python
from ddbsh.transact import TransactWriteCommand

tx = TransactWriteCommand(session, first_insert)
tx.append(second_insert)
tx.commit()
tx.run(session)   # prints COMMIT, or ABORT if the transaction failed
```

A transaction that was rolled back, was never committed, or received a
command that supplied no items prints `ABORT` when run.
`TransactReadCommand` works the same way with `txget`; no command in this
package supplies read items, and the base `Command.txget` and
`Command.txwrite` raise `CommandError`.

### Showing a table as a statement

`ddbsh.show_create_table.create_table_statement(table, not_exists, nowait)`
turns a table description into the `CREATE TABLE ...` statement that would
recreate it. `ShowCreateTableCommand` prints it for an existing, active
table.

## What this package does not do

- There is no interactive shell, statement parser or command-line program:
  commands are built and run from Python.
- It does not create a client or read credentials; you supply the client.
- There are no SELECT, UPDATE, UPSERT or DELETE item commands, so no
  command can join a read transaction.
- Rate limiting and consumed-capacity reporting are not offered.

## Running the tests

Install the package with its `test` extra and run `pytest` from the
project directory.