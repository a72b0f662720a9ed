"""Shell-style command objects for DynamoDB tables, backups, recovery, replicas, inserts and transactions."""

__version__ = "0.1.0"