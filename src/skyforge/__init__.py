import warnings

# Suppress Google SDK FutureWarning messages about Python 3.10 deprecation
# so they do not interleave with poll heartbeats on the console.
warnings.filterwarnings("ignore", category=FutureWarning, module="google.api_core")
warnings.filterwarnings("ignore", category=FutureWarning, module="google.cloud")

from .core import Settings  # noqa: E402
from .exceptions import (  # noqa: E402
    ConfigError,
    OperationError,
    OperationTimeoutError,
    ResourceLookupError,
    SkyforgeError,
    ValidationError,
)
from .gateway import ComputeGateway  # noqa: E402
from .lifecycle import ResourceLifecycleManager  # noqa: E402
from .pagination import list_all  # noqa: E402
from .poller import OperationPoller  # noqa: E402
from .reporter import ConsoleReporter, Reporter, ReportLevel  # noqa: E402
from .validation import ValidationPipeline  # noqa: E402

__all__ = [
    "ComputeGateway",
    "ConfigError",
    "ConsoleReporter",
    "OperationError",
    "OperationPoller",
    "OperationTimeoutError",
    "ResourceLookupError",
    "ReportLevel",
    "Reporter",
    "ResourceLifecycleManager",
    "Settings",
    "SkyforgeError",
    "ValidationError",
    "ValidationPipeline",
    "list_all",
]
