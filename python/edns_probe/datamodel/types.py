import ipaddress
import re

from edns_probe.utils.modeling.errors import DataValueError
from edns_probe.utils.modeling.types import BaseIntegerRange, BaseString, BaseStringPattern, BaseUnit


class PortNumber(BaseIntegerRange):
    _min: int = 1
    _max: int = 65_535


class TimeUnit(BaseUnit):
    _units = {"ms": 1, "s": 1000, "m": 60 * 1000}

    def seconds(self) -> float:
        return int(self) / 1000

    def millis(self) -> int:
        return int(self)


# presentation length of a name without the trailing dot, 255 octets on the wire
DOMAIN_NAME_MAX_LEN = 253


class DomainName(BaseStringPattern):
    """Domain name, the root label separator at the end is optional."""

    _re = re.compile(
        r"^(\.|([a-zA-Z0-9_]([a-zA-Z0-9_-]{0,61}[a-zA-Z0-9_])?\.)*"
        r"[a-zA-Z0-9_]([a-zA-Z0-9_-]{0,61}[a-zA-Z0-9_])?\.?)$"
    )

    def validate(self) -> None:
        super().validate()
        if len(self._value.rstrip(".")) > DOMAIN_NAME_MAX_LEN:
            msg = f"'{self._value}' is longer than {DOMAIN_NAME_MAX_LEN} characters"
            raise DataValueError(msg, self._tree_path)

    def absolute(self) -> str:
        name = str(self)
        return name if name.endswith(".") else f"{name}."


class ServerAddress(BaseString):
    """IP address literal or a host name of the probed server."""

    def validate(self) -> None:
        super().validate()
        if not self.is_ip() and not DomainName._re.match(self._value):  # noqa: SLF001
            raise DataValueError(f"'{self._value}' is neither an IP address nor a host name", self._tree_path)

    def is_ip(self) -> bool:
        try:
            ipaddress.ip_address(self._value)
        except ValueError:
            return False
        return True
