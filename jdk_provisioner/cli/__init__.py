# Path: jdk_provisioner/cli/__init__.py
"""
Provisioner CLI Module

Command-line interface for the provisioner.
"""

from jdk_provisioner.cli.provision_cli import ProvisionCLI, build_parser, main

__all__ = ['ProvisionCLI', 'build_parser', 'main']
