#!/usr/bin/env python3
"""pilothouse: run a local multi-site WordPress stack on docker compose.

Usage: pilothouse <command> [args]
"""

from __future__ import annotations

import sys

from pilothouse import compose, mysql, sites, wpcli
from pilothouse.utils import init_logging, log, status_fail, status_pass

USAGE = """usage: pilothouse <command> [args]

  up                        start the containers
  down                      stop and remove the containers
  restart [container]       restart all containers, or one
  create <site> [--domain=D] [--proxy=URL] [--empty]
                            create a site (--empty skips WordPress)
  delete <site>             delete a site, its database and hosts entry
  generate-ssl <site>       generate a certificate and enable https
  list                      list sites
  mysql [cmd]               mysql client, or run a single statement
  wp-cli [args]             run WP-CLI in the current site directory
  compose [args]            run docker compose with pilothouse settings
  logs [container]          follow container logs
"""

FLAG_DOMAIN = "--domain"
FLAG_PROXY = "--proxy"
FLAG_EMPTY = "--empty"


def _flag_value(args: list[str], flag: str) -> str | None:
    for i, a in enumerate(args):
        if a.startswith(f"{flag}="):
            return a.split("=", 1)[1]
        if a == flag and i + 1 < len(args):
            return args[i + 1]
    return None


def _positional(args: list[str]) -> list[str]:
    out: list[str] = []
    skip_next = False
    for a in args:
        if skip_next:
            skip_next = False
            continue
        if a in (FLAG_DOMAIN, FLAG_PROXY):
            skip_next = True
            continue
        if a.startswith("--"):
            continue
        out.append(a)
    return out


def cmd_create(args: list[str]) -> int:
    names = _positional(args)
    ok = sites.create_site(
        names[0] if names else None,
        domain=_flag_value(args, FLAG_DOMAIN),
        proxy_url=_flag_value(args, FLAG_PROXY),
        install_wp=FLAG_EMPTY not in args,
    )
    return 0 if ok else 1


def cmd_list(args: list[str]) -> int:
    rows = sites.list_sites()
    if not rows:
        print("no sites")
        return 0
    width = max(len(r[0]) for r in rows)
    for name, domain, proxy, has_ssl in rows:
        flags = "ssl" if has_ssl else ""
        print(f"{name:<{width}}  {domain}  proxy={proxy}  {flags}".rstrip())
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    init_logging(None)
    if not argv or argv[0] in ("help", "-h", "--help"):
        print(USAGE, end="")
        return 0 if argv else 2
    action, rest = argv[0], argv[1:]
    log(f"COMMAND: {action} {' '.join(rest)}".rstrip())

    if action == "up":
        if not compose.up():
            return 1
        status_pass("containers up")
        return 0
    if action == "down":
        if not compose.down():
            return 1
        status_pass("containers down")
        return 0
    if action == "restart":
        container = rest[0] if rest else None
        if not compose.restart(container):
            return 1
        status_pass(f"restarted {container or 'all containers'}")
        return 0
    if action == "create":
        return cmd_create(rest)
    if action == "delete":
        return 0 if sites.delete_site(rest[0] if rest else None) else 1
    if action == "generate-ssl":
        return 0 if sites.generate_ssl(rest[0] if rest else None) else 1
    if action == "list":
        return cmd_list(rest)
    if action == "mysql":
        return mysql.client(rest)
    if action == "wp-cli":
        return wpcli.wp_passthrough(rest)
    if action == "compose":
        return compose.passthrough(rest)
    if action == "logs":
        return compose.logs(rest[0] if rest else None)

    status_fail(f"unknown command {action!r}")
    print(USAGE, end="", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
