"""
L1 Domain — pure functions.

No I/O, no subprocess.
"""

from provisioner.core.services.provision.domain.version import (  # noqa: F401
    extract_version,
    meets_major,
    parse_major,
    python_source_for,
    version_at_least,
    version_tuple,
)
