class EdnsProbeError(Exception):
    """Base class for all exceptions raised by edns-probe."""
