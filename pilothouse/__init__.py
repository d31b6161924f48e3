"""Local multi-site WordPress development on docker compose.

Submodules:
- config: paths, credentials, environment overrides
- config_files: custom-vs-default config file resolution
- compose: docker compose argv and container lifecycle
- nginx: per-site server blocks
- hosts: tagged hosts-file entries
- mysql: database helpers in the mysql container
- wpcli: WP-CLI in the php container
- certs: self-signed certificates
- sites: create/delete orchestration
"""

__version__ = "0.3.0"
