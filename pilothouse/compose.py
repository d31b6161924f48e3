"""docker compose plumbing.

SRP: builds compose argv with the pilothouse project/env and runs the
container lifecycle verbs. Site files live in pilothouse.nginx and friends.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path

from pilothouse.config import (
    COMPOSE_COMMAND,
    COMPOSE_FILE,
    CUSTOM_CONFIG_DIR,
    MYSQL_ROOT_PASSWORD,
    MYSQL_ROOT_USER,
    MYSQL_WAIT_ATTEMPTS,
    MYSQL_WAIT_INTERVAL,
    NGINX_SITES_DIR,
    PILOTHOUSE_HOME,
    PROJECT_NAME,
    SITES_DIR,
    SSL_DIR,
    VENDOR_DIR,
)
from pilothouse.config_files import compose_env
from pilothouse.utils import log, run_capture, run_cmd, run_passthrough, status_fail


def compose_argv(args: list[str]) -> list[str]:
    return list(COMPOSE_COMMAND) + [
        "-f",
        str(COMPOSE_FILE),
        "--project-directory",
        str(PILOTHOUSE_HOME),
        "-p",
        PROJECT_NAME,
    ] + list(args)


def exec_args(
    service: str,
    command: list[str],
    user: str | None = None,
    workdir: str | None = None,
    tty: bool = True,
) -> list[str]:
    """Compose-relative `exec` arguments; pass to compose_argv or passthrough."""
    args = ["exec"]
    if not tty:
        args.append("-T")
    if user:
        args += ["--user", user]
    if workdir:
        args += ["--workdir", workdir]
    return args + [service] + list(command)


def exec_argv(
    service: str,
    command: list[str],
    user: str | None = None,
    workdir: str | None = None,
    tty: bool = True,
) -> list[str]:
    return compose_argv(exec_args(service, command, user=user, workdir=workdir, tty=tty))


def ensure_dirs() -> None:
    for path in (PILOTHOUSE_HOME, SITES_DIR, NGINX_SITES_DIR, SSL_DIR, CUSTOM_CONFIG_DIR, VENDOR_DIR):
        Path(path).mkdir(parents=True, exist_ok=True)


def run_compose(args: list[str]) -> bool:
    try:
        run_cmd(compose_argv(args), env=compose_env())
        return True
    except subprocess.CalledProcessError as err:
        status_fail(f"compose {args[0]} exit={err.returncode}; see log")
        logging.error("compose %s failed: exit=%s", " ".join(args), err.returncode)
        return False
    except FileNotFoundError:
        status_fail(f"{COMPOSE_COMMAND[0]} not found; is Docker installed?")
        return False


def capture_exec(
    service: str,
    command: list[str],
    user: str | None = None,
    workdir: str | None = None,
) -> tuple[int, str, str]:
    return run_capture(
        exec_argv(service, command, user=user, workdir=workdir, tty=False),
        env=compose_env(),
    )


def passthrough(args: list[str]) -> int:
    return run_passthrough(compose_argv(args), env=compose_env())


def running_services() -> set[str]:
    rc, out, err = run_capture(
        compose_argv(["ps", "--services", "--filter", "status=running"]),
        env=compose_env(),
    )
    if rc != 0:
        logging.debug("compose ps failed: %s", err.strip())
        return set()
    return {line.strip() for line in out.splitlines() if line.strip()}


def is_running(service: str) -> bool:
    return service in running_services()


def mysql_ready() -> bool:
    rc, _, _ = capture_exec(
        "mysql",
        [
            "mysqladmin",
            "ping",
            f"-u{MYSQL_ROOT_USER}",
            f"-p{MYSQL_ROOT_PASSWORD}",
            "--silent",
        ],
    )
    return rc == 0


def wait_for_mysql(attempts: int = MYSQL_WAIT_ATTEMPTS, interval: float = MYSQL_WAIT_INTERVAL) -> bool:
    for attempt in range(1, attempts + 1):
        if mysql_ready():
            log(f"PASS: mysql ready after {attempt} attempt(s)")
            return True
        log(f"INFO: mysql not ready (attempt {attempt}/{attempts})")
        if attempt < attempts:
            time.sleep(interval)
    logging.error("mysql did not accept connections after %d attempts", attempts)
    return False


def up() -> bool:
    ensure_dirs()
    if not run_compose(["up", "-d", "--remove-orphans"]):
        return False
    if not wait_for_mysql():
        status_fail("mysql did not become ready")
        return False
    return True


def down() -> bool:
    return run_compose(["down"])


def restart(container: str | None = None) -> bool:
    args = ["restart"]
    if container:
        args.append(container)
    return run_compose(args)


def logs(container: str | None = None) -> int:
    args = ["logs", "-f"]
    if container:
        args.append(container)
    return passthrough(args)
