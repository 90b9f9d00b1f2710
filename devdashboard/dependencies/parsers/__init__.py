"""Lock-file parsers — auto-registered on import."""

from devdashboard.dependencies.parsers import (
    pipfile_lock,  # noqa: F401
    poetry_lock,  # noqa: F401
    uv_lock,  # noqa: F401
)
