# Path: jdk_provisioner/engine/constants.py
"""
Engine Constants

Registry endpoints, HTTP headers and platform identifiers used by the
catalog client and the downloader.
"""

# ============================================================================
# RELEASE REGISTRY (Eclipse Adoptium API v3)
# ============================================================================
AVAILABLE_RELEASES_PATH: str = '/info/available_releases'
ASSETS_PATH_TEMPLATE: str = '/assets/latest/{version}/hotspot'
BINARY_PATH_TEMPLATE: str = (
    '/binary/latest/{version}/ga/{os}/{arch}/{image_type}/hotspot/normal/eclipse'
)

# available_releases response keys
KEY_AVAILABLE_RELEASES: str = 'available_releases'
KEY_MOST_RECENT_LTS: str = 'most_recent_lts'

# assets response keys
KEY_BINARIES: str = 'binaries'
KEY_BINARY: str = 'binary'
KEY_PACKAGE: str = 'package'
KEY_CHECKSUM: str = 'checksum'
KEY_LINK: str = 'link'
KEY_OS: str = 'os'
KEY_ARCHITECTURE: str = 'architecture'
KEY_IMAGE_TYPE: str = 'image_type'

# ============================================================================
# HTTP HEADERS
# ============================================================================
HEADER_USER_AGENT: str = 'User-Agent'
HEADER_ACCEPT: str = 'Accept'
HEADER_CONTENT_LENGTH: str = 'Content-Length'

ACCEPT_JSON: str = 'application/json'
ACCEPT_BINARY: str = 'application/octet-stream, */*'
