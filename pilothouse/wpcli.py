# wpcli.py
# Invariants:
# - All WP-CLI access goes through these wrappers; callers never build exec argv.
# - Commands run as www-data in the php container, in the site's web root.
# - Accept commands with or without leading "wp"/"--path"; sanitize duplicates.
# - Logs: one PASS/FAIL per call; console stays minimal; file logs keep details.

from __future__ import annotations

import logging
import os
import shlex
import sys
import time
from pathlib import Path, PurePosixPath
from typing import Sequence

from pilothouse.compose import capture_exec, exec_args, passthrough
from pilothouse.config import (
    CONTAINER_WEB_ROOT,
    DEFAULT_WP_EMAIL,
    DEFAULT_WP_PASS,
    DEFAULT_WP_USER,
    MYSQL_HOST,
    MYSQL_ROOT_PASSWORD,
    MYSQL_ROOT_USER,
    PHP_USER,
    SITES_DIR,
)
from pilothouse.mysql import database_name
from pilothouse.utils import log


def _normalize_wp_parts(command: str | Sequence[str]) -> list[str]:
    """Normalize command into argv parts.
    Accepts str (parsed with shlex) or sequence of strings.
    Returns a list; empty list indicates an error already reported.
    """
    if isinstance(command, str):
        text = command.strip()
        if not text:
            logging.error("wp called with empty command")
            return []
        try:
            return shlex.split(text)
        except ValueError as err:
            logging.error("Could not parse command: %s", err)
            return []
    parts = [str(p) for p in command]
    if not parts:
        logging.error("wp called with empty argv list")
    return parts


def _sanitize_parts(parts: list[str]) -> list[str]:
    # drop any leading 'wp' or explicit binary tokens
    while parts and os.path.basename(parts[0]) == "wp":
        parts = parts[1:]
    # drop any --path passed by caller (we provide the working directory)
    cleaned: list[str] = []
    skip_next = False
    for i, p in enumerate(parts):
        if skip_next:
            skip_next = False
            continue
        if p.startswith("--path="):
            continue
        if p == "--path":
            if i + 1 < len(parts) and not parts[i + 1].startswith("-"):
                skip_next = True
            continue
        cleaned.append(p)
    return cleaned


def site_container_path(site: str) -> str:
    return str(PurePosixPath(CONTAINER_WEB_ROOT) / site)


def container_path_for(host_dir: Path) -> str:
    """Map a host directory inside SITES_DIR to its path in the php container.

    Directories outside SITES_DIR map to the web root.
    """
    try:
        rel = Path(host_dir).resolve().relative_to(Path(SITES_DIR).resolve())
    except ValueError:
        return CONTAINER_WEB_ROOT
    if str(rel) == ".":
        return CONTAINER_WEB_ROOT
    return str(PurePosixPath(CONTAINER_WEB_ROOT, *rel.parts))


def wp_run(site: str, command) -> tuple[bool, str, str]:
    parts = _sanitize_parts(_normalize_wp_parts(command))
    if not parts:
        return False, "", "Invalid command"

    t0 = time.monotonic()
    rc, out, err = capture_exec(
        "php", ["wp"] + parts, user=PHP_USER, workdir=site_container_path(site)
    )
    dt = time.monotonic() - t0
    pretty = " ".join(parts)
    if rc == 0:
        log(f"PASS: wp {pretty} ({dt:.1f}s)")
        return True, out, err
    logging.error("wp %s exit=%s\nSTDERR: %s", pretty, rc, err.strip())
    return False, out, err


def wp_cmd(site: str, command) -> bool:
    ok, _, _ = wp_run(site, command)
    return ok


def wp_passthrough(args: list[str], cwd: Path | None = None) -> int:
    """Run wp interactively in the container directory matching cwd."""
    workdir = container_path_for(cwd or Path.cwd())
    parts = _sanitize_parts(list(args))
    return passthrough(
        exec_args("php", ["wp"] + parts, user=PHP_USER, workdir=workdir, tty=sys.stdin.isatty())
    )


def install_wordpress(site: str, domain: str, https: bool = False) -> bool:
    dbname = database_name(site)
    scheme = "https" if https else "http"
    commands = [
        ["core", "download", "--force"],
        [
            "config", "create",
            f"--dbname={dbname}",
            f"--dbuser={MYSQL_ROOT_USER}",
            f"--dbpass={MYSQL_ROOT_PASSWORD}",
            f"--dbhost={MYSQL_HOST}",
            "--skip-check",
            "--force",
        ],
        [
            "core", "install",
            f"--url={scheme}://{domain}",
            f"--title={site}",
            f"--admin_user={DEFAULT_WP_USER}",
            f"--admin_password={DEFAULT_WP_PASS}",
            f"--admin_email={DEFAULT_WP_EMAIL}",
            "--skip-email",
        ],
    ]
    for cmd in commands:
        if not wp_cmd(site, cmd):
            return False
    log(f"PASS: WordPress installed for {site} at {scheme}://{domain}")
    return True
