from pathlib import Path

VERSION = "1.0.0"
PROBE_NAME = "edns-probe"

# files paths
CONFIG_FILE = Path("/etc/edns-probe/config.yaml")

# DNS defaults
DEFAULT_PORT = 53
DEFAULT_TIMEOUT = "5s"
EDNS0_SIZE = 4096
