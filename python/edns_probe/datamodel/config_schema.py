from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from typing_extensions import Literal

from edns_probe.constants import DEFAULT_PORT, DEFAULT_TIMEOUT
from edns_probe.datamodel.logging_schema import LoggingSchema
from edns_probe.datamodel.types import DomainName, PortNumber, ServerAddress, TimeUnit
from edns_probe.probe.registry import case_names
from edns_probe.utils.modeling import ModelNode, data_combine, try_to_parse
from edns_probe.utils.modeling.errors import DataParsingError

TransportEnum = Literal["udp", "tcp"]
OutputEnum = Literal["text", "json", "yaml"]


class ProbeConfig(ModelNode):
    """
    Configuration of a single probe run.

    ---
    server: IP address or host name of the probed name-server.
    port: Port number of the probed name-server.
    zone: Zone whose apex is queried.
    timeout: Upper bound of the wait for a single response.
    transport: Transport used for the queries, there is no fallback between them.
    cases: Names of the test cases to run, all of them when not set.
    output: Format of the report printed to stdout.
    logging: Logging of the probe itself.
    """

    server: Optional[ServerAddress] = None
    port: PortNumber = PortNumber(DEFAULT_PORT)
    zone: Optional[DomainName] = None
    timeout: TimeUnit = TimeUnit(DEFAULT_TIMEOUT)
    transport: TransportEnum = "udp"
    cases: Optional[List[str]] = None
    output: OutputEnum = "text"
    logging: LoggingSchema = LoggingSchema()

    def _validate(self) -> None:
        if self.timeout.millis() == 0:
            raise ValueError("'timeout' must be longer than zero")
        if self.cases is not None:
            known = case_names()
            for i, name in enumerate(self.cases):
                if name not in known:
                    raise ValueError(f"unknown test case '{name}' on index {i}, expected one of {list(known)}")
            if len(set(self.cases)) != len(self.cases):
                raise ValueError("duplicate test case names in 'cases'")


def load_config(
    files: Sequence[Union[str, Path]] = (),
    overrides: Optional[Dict[str, Any]] = None,
) -> ProbeConfig:
    """
    Parse and combine configuration files (YAML or JSON) and apply the overrides on top of them.

    Overrides typically come from the command line, their keys are in the same kebab-case
    format as the keys in the files and 'None' values are skipped.
    """

    data: Dict[str, Any] = {}
    for file in files:
        with open(file, "r", encoding="utf8") as f:
            parsed = try_to_parse(f.read())
        if parsed is None:
            continue
        if not isinstance(parsed, dict):
            raise DataParsingError(f"expected an object at the top level of '{file}'")
        data = data_combine(data, parsed)

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                data[key] = value
    return ProbeConfig(data)
