"""pipeline.actions

Builtin actions.

Importing this package registers the builtin actions in the global registry.
"""

# Import side-effect: action registration decorators.
from . import checkout  # noqa: F401
from . import toolchain  # noqa: F401
from . import cache  # noqa: F401
from . import artifacts  # noqa: F401
from . import bench_report  # noqa: F401
from . import sticky_comment  # noqa: F401

__all__ = [
    "checkout",
    "toolchain",
    "cache",
    "artifacts",
    "bench_report",
    "sticky_comment",
]
