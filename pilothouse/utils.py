"""Utility helpers kept dependency-free.

- init_logging: configure console + file logging with run-id.
- status_pass/status_fail: concise console status lines (with run-id).
- run_cmd: thin wrapper over subprocess.run with check + text enabled.
- run_capture: same, but never raises and returns (rc, stdout, stderr).
- run_passthrough: attach the child to the terminal, return its exit code.
- log: debug-level logger for normal status lines (file-oriented).
- db_ident: normalized identifier for database names.
- apply_placeholders: {{key}} substitution for shipped templates.
"""

import logging
import os
import shlex
import subprocess
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Mapping, Sequence

from pilothouse.config import LOG_DIR

RID_ENV = "PILOTHOUSE_RID"

_RUN_ID = ""


def _gen_run_id() -> str:
    return uuid.uuid4().hex[:8]


def init_logging(run_id: str | None = None, log_dir: Path | None = None) -> str:
    """Initialize logging with console + rotating file handlers.

    - Console: minimal, CRITICAL only; status lines are printed instead.
    - File: DEBUG+, rich format, written to <log_dir>/pilothouse-<rid>.log
    Returns the run-id used.
    """
    global _RUN_ID
    if _RUN_ID:
        return _RUN_ID

    rid = run_id or os.environ.get(RID_ENV) or _gen_run_id()
    _RUN_ID = rid

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    target_dir = Path(log_dir or LOG_DIR)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        logfile = target_dir / f"pilothouse-{rid}.log"
    except OSError:
        logfile = Path(f"pilothouse-{rid}.log").absolute()

    # Quiet any pre-existing console handlers
    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            h.setLevel(logging.CRITICAL)

    has_file = any(
        isinstance(h, RotatingFileHandler)
        and getattr(h, "baseFilename", "").endswith(logfile.name)
        for h in root.handlers
    )
    if not has_file:
        fh = RotatingFileHandler(str(logfile), maxBytes=5 * 1024 * 1024, backupCount=3)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        root.addHandler(fh)

    if not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    ):
        ch = logging.StreamHandler()
        ch.setLevel(logging.CRITICAL)
        ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root.addHandler(ch)

    logging.debug("Logging initialized. run_id=%s file=%s", rid, logfile)
    os.environ[RID_ENV] = rid
    return rid


def _rid() -> str:
    return _RUN_ID or os.environ.get(RID_ENV, "--------")


def status_pass(msg: str) -> None:
    print(f"PASS: {msg} [{_rid()}]")


def status_fail(msg: str) -> None:
    print(f"FAIL: {msg} [{_rid()}]", flush=True)


def log(msg: str) -> None:
    # File-oriented normal progress; stays out of console noise.
    logging.debug(msg)


def fmt_cmd(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(a)) for a in args)


def run_cmd(args: list[str], env: Mapping[str, str] | None = None) -> None:
    log(f"RUN: {fmt_cmd(args)}")
    subprocess.run(args, check=True, text=True, env=env)


def run_capture(
    args: list[str], env: Mapping[str, str] | None = None
) -> tuple[int, str, str]:
    log(f"RUN: {fmt_cmd(args)}")
    try:
        proc = subprocess.run(
            args, text=True, capture_output=True, check=True, env=env
        )
        return proc.returncode, (proc.stdout or ""), (proc.stderr or "")
    except subprocess.CalledProcessError as exc:
        return exc.returncode, (exc.stdout or ""), (exc.stderr or "")
    except FileNotFoundError as exc:
        logging.error("Command not found: %s", exc)
        return 127, "", str(exc)


def run_passthrough(args: list[str], env: Mapping[str, str] | None = None) -> int:
    log(f"RUN: {fmt_cmd(args)}")
    try:
        return subprocess.run(args, env=env).returncode
    except FileNotFoundError as exc:
        status_fail(f"command not found: {args[0]}")
        logging.error("Command not found: %s", exc)
        return 127


def db_ident(name: str) -> str:
    parts: list[str] = []
    for char in name:
        if char.isalnum():
            parts.append(char)
            continue
        parts.append("_")
    return "".join(parts)


def apply_placeholders(text: str, mapping: dict[str, str] | None = None) -> str:
    if not mapping:
        return text

    updated = text
    for key, value in mapping.items():
        updated = updated.replace("{{" + key + "}}", value)

    return updated
