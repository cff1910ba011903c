from typing_extensions import Literal

from edns_probe.utils.modeling import ModelNode

LogLevelEnum = Literal["critical", "error", "warning", "notice", "info", "debug"]
LogTargetEnum = Literal["syslog", "stderr", "stdout"]


class LoggingSchema(ModelNode):
    """
    Logging of the probe itself, the report is always printed to stdout.

    ---
    level: Global logging level.
    target: Logging stream target.
    """

    level: LogLevelEnum = "notice"
    target: LogTargetEnum = "stderr"
