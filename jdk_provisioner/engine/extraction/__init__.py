# Path: jdk_provisioner/engine/extraction/__init__.py
"""
Extraction Module

Unpacks verified JDK archives through the external tar utility.
"""

from jdk_provisioner.engine.extraction.extractor import (
    Extractor,
    CommandRunner,
    run_command,
    find_java_home,
)

__all__ = [
    'Extractor',
    'CommandRunner',
    'run_command',
    'find_java_home',
]
