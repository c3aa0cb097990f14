# Path: jdk_provisioner/engine/extraction/constants.py
"""
Extraction Constants

External archive utility invocation and JDK layout markers.
"""

# tar -xzf <archive> -C <target>
TAR_EXECUTABLE: str = 'tar'
TAR_EXTRACT_GZIP_FLAGS: str = '-xzf'
TAR_DIRECTORY_FLAG: str = '-C'

# Lines of stderr kept in failure reasons
STDERR_TAIL_LINES: int = 5

# Relative locations of the java launcher inside an extracted JDK
JAVA_BINARY_CANDIDATES: tuple = (
    ('bin', 'java'),
    ('bin', 'java.exe'),
    ('Contents', 'Home', 'bin', 'java'),  # macOS bundles
)
