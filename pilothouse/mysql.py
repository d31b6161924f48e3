"""MariaDB helpers, run inside the mysql container."""

from __future__ import annotations

import logging
import sys

from pilothouse.compose import capture_exec, exec_args, passthrough
from pilothouse.config import MYSQL_ROOT_PASSWORD, MYSQL_ROOT_USER
from pilothouse.utils import db_ident, log


def _client_argv() -> list[str]:
    return ["mysql", f"-u{MYSQL_ROOT_USER}", f"-p{MYSQL_ROOT_PASSWORD}"]


def _mysql_try(sql: str) -> tuple[int, str, str]:
    return capture_exec("mysql", _client_argv() + ["-e", sql])


def run_mysql(sql: str) -> bool:
    rc, out, err = _mysql_try(sql)
    msg = f"SQL: {sql}\nEXIT: {rc}\nSTDOUT: {out.strip()}\nSTDERR: {err.strip()}"
    if rc == 0:
        log(f"PASS: {msg}")
        return True
    logging.error(msg)
    return False


def database_name(site: str) -> str:
    return db_ident(site)


def database_exists(dbname: str) -> bool:
    sql = (
        "SELECT SCHEMA_NAME FROM INFORMATION_SCHEMA.SCHEMATA "
        f"WHERE SCHEMA_NAME='{dbname}';"
    )
    rc, out, _ = _mysql_try(sql)
    if rc != 0:
        return False
    return bool(out.strip())


def create_database(site: str) -> bool:
    return run_mysql(f"CREATE DATABASE IF NOT EXISTS `{database_name(site)}`;")


def drop_database(site: str) -> bool:
    return run_mysql(f"DROP DATABASE IF EXISTS `{database_name(site)}`;")


def client(command: list[str] | None = None) -> int:
    """Interactive client, or a single statement when command is given."""
    if command:
        args = _client_argv() + ["-e", " ".join(command)]
        return passthrough(exec_args("mysql", args, tty=sys.stdin.isatty()))
    return passthrough(exec_args("mysql", _client_argv(), tty=sys.stdin.isatty()))
