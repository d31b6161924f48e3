"""Self-signed certificates for local sites, generated with openssl."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from pilothouse.config import SSL_DAYS, SSL_DIR
from pilothouse.utils import log, run_cmd, status_fail

CERT_DIR = Path(SSL_DIR)


def cert_paths(site: str) -> tuple[Path, Path]:
    return CERT_DIR / f"{site}.key", CERT_DIR / f"{site}.crt"


def openssl_argv(domain: str, key_path: Path, cert_path: Path) -> list[str]:
    return [
        "openssl", "req",
        "-x509",
        "-nodes",
        "-newkey", "rsa:2048",
        "-days", str(SSL_DAYS),
        "-subj", f"/CN={domain}",
        "-addext", f"subjectAltName=DNS:{domain}",
        "-keyout", str(key_path),
        "-out", str(cert_path),
    ]


def generate_certificate(site: str, domain: str) -> bool:
    CERT_DIR.mkdir(parents=True, exist_ok=True)
    key_path, cert_path = cert_paths(site)
    try:
        run_cmd(openssl_argv(domain, key_path, cert_path))
    except subprocess.CalledProcessError as err:
        status_fail(f"openssl exit={err.returncode}; see log")
        logging.error("Certificate generation failed for %s", domain)
        return False
    except FileNotFoundError:
        status_fail("openssl not found")
        return False
    key_path.chmod(0o600)
    log(f"PASS: Generated certificate {cert_path} for {domain}")
    return True


def remove_certificate(site: str) -> None:
    for path in cert_paths(site):
        if path.exists():
            path.unlink()
            log(f"PASS: Removed {path}")
