# Path: jdk_provisioner/provision.py
"""
JDK Provisioner - Main Entry Point

Fetches, verifies and caches a JDK archive for the server-hosting tool.
Run as a module: python -m jdk_provisioner.provision

Architecture:
- Check the cache for jdk-<version>.tar.gz
- Query the release registry when missing
- Download, verify against published checksums, commit
- Optionally extract into the project's java/ directory

Usage:
    python -m jdk_provisioner.provision ensure 21
    python -m jdk_provisioner.provision ensure 21 --extract-to ./java
"""

import sys

from jdk_provisioner.cli.provision_cli import main


if __name__ == '__main__':
    sys.exit(main())
