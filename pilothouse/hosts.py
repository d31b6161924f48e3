#!/usr/bin/env python3
"""Manage pilothouse entries in the hosts file safely and atomically.

Only whole lines of the form "127.0.0.1 <domain> #pilothouse" are managed.
Other lines and comments are preserved intact. Run as a module under sudo
when the hosts file is not writable by the current user:

    sudo python -m pilothouse.hosts add example.test
"""
import os
import re
import sys
import tempfile
from pathlib import Path
from typing import List, Tuple

from pilothouse.config import HOSTS_FILE, HOSTS_TAG, LOCALHOST_IP
from pilothouse.utils import init_logging, log

DOMAIN_RE = re.compile(r"^[A-Za-z0-9.-]+$")


def is_valid_domain(domain: str) -> bool:
    if not domain or not DOMAIN_RE.match(domain):
        return False
    return not domain.startswith(("-", ".")) and ".." not in domain


def entry_for(domain: str) -> str:
    return f"{LOCALHOST_IP} {domain} {HOSTS_TAG}"


def hosts_writable() -> bool:
    path = Path(HOSTS_FILE)
    if not os.access(str(path.parent), os.W_OK):
        return False
    return not path.exists() or os.access(str(path), os.W_OK)


def _read_hosts() -> Tuple[List[str], int, int, int]:
    path = Path(HOSTS_FILE)
    if not path.exists():
        return [], 0o644, os.getuid(), os.getgid()
    st = path.stat()
    lines = path.read_text().splitlines(keepends=True)
    return lines, st.st_mode, st.st_uid, st.st_gid


def _write_hosts_atomic(lines: List[str], mode: int, uid: int, gid: int) -> bool:
    path = Path(HOSTS_FILE)
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", delete=False, dir=str(path.parent), prefix=".hosts."
        ) as tmp:
            tmp.writelines(lines)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = tmp.name
        os.chmod(tmp_path, mode & 0o7777)
        if os.geteuid() == 0:
            os.chown(tmp_path, uid, gid)
        os.replace(tmp_path, str(path))
        return True
    except OSError as err:
        print(f"FAIL: Could not write hosts file: {err}", file=sys.stderr)
        return False


def add_host(domain: str) -> bool:
    if not is_valid_domain(domain):
        print(f"FAIL: Invalid characters in domain {domain!r}", file=sys.stderr)
        return False
    lines, mode, uid, gid = _read_hosts()
    desired = entry_for(domain)
    if any(line.strip() == desired for line in lines):
        log(f"INFO: {domain} already in hosts file")
        return True

    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    lines.append(desired + "\n")
    if not _write_hosts_atomic(lines, mode, uid, gid):
        return False
    log(f"PASS: Added {domain} to hosts file")
    return True


def remove_host(domain: str) -> bool:
    if not is_valid_domain(domain):
        print(f"FAIL: Invalid characters in domain {domain!r}", file=sys.stderr)
        return False
    lines, mode, uid, gid = _read_hosts()
    target = entry_for(domain)
    kept = [line for line in lines if line.strip() != target]

    if len(kept) == len(lines):
        log(f"INFO: {domain} not in hosts file")
        return True

    if not _write_hosts_atomic(kept, mode, uid, gid):
        return False
    log(f"PASS: Removed {domain} from hosts file")
    return True


def list_hosts() -> list[str]:
    lines, _, _, _ = _read_hosts()
    domains = []
    for line in lines:
        parts = line.split()
        if len(parts) == 3 and parts[0] == LOCALHOST_IP and parts[2] == HOSTS_TAG:
            domains.append(parts[1])
    return domains


def main(argv: list[str]) -> int:
    init_logging(None)
    if not argv:
        print("usage: hosts.py add <domain> | remove <domain> | list", file=sys.stderr)
        return 2
    cmd = argv[0]
    if cmd == "list":
        for domain in list_hosts():
            print(domain)
        return 0
    if len(argv) < 2:
        print("FAIL: Missing domain", file=sys.stderr)
        return 1
    if cmd == "add":
        return 0 if add_host(argv[1]) else 1
    if cmd == "remove":
        return 0 if remove_host(argv[1]) else 1
    print(f"FAIL: unknown hosts command {cmd!r}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
