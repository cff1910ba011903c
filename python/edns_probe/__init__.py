from .constants import VERSION
from .errors import EdnsProbeError

__version__ = VERSION

__all__ = ["EdnsProbeError"]
