import argparse
import socket
import sys
from typing import Any, Dict, List, Optional, Tuple, Type

from edns_probe.client.command import Command, CommandArgs, register_command
from edns_probe.datamodel import ProbeConfig, load_config
from edns_probe.logging import start_logging
from edns_probe.probe import ProbeRunner, get_cases, resolve_endpoint
from edns_probe.report import dump, render_text
from edns_probe.utils.modeling import DataFormat
from edns_probe.utils.modeling.errors import DataModelingError


def _timeout(value: str) -> str:
    # plain number of seconds is accepted as well
    return f"{value}s" if value.isdigit() else value


@register_command
class RunCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)
        self.server: Optional[str] = namespace.server
        self.zone: Optional[str] = namespace.zone
        self.port: Optional[int] = namespace.port
        self.timeout: Optional[str] = namespace.timeout
        self.tcp: bool = namespace.tcp
        self.cases: Optional[List[str]] = namespace.cases
        self.output: Optional[str] = namespace.output
        self.verbose: bool = namespace.verbose

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        run = subparser.add_parser(
            "run",
            help="Run the EDNS test cases against a name-server and print the report.",
        )
        run.add_argument(
            "server",
            type=str,
            nargs="?",
            help="IP address or host name of the probed name-server.",
        )
        run.add_argument(
            "zone",
            type=str,
            nargs="?",
            help="Zone served by the name-server, its apex is queried.",
        )
        run.add_argument("-p", "--port", type=int, help="Port of the name-server, 53 by default.")
        run.add_argument(
            "-t",
            "--timeout",
            type=_timeout,
            help="Wait for a single response, seconds or a time unit (e.g. 500ms), 5s by default.",
        )
        run.add_argument(
            "--tcp",
            action="store_true",
            default=False,
            help="Send all queries over TCP instead of UDP.",
        )
        run.add_argument(
            "--case",
            dest="cases",
            action="append",
            metavar="NAME",
            help="Run only the named test case, can be repeated.",
        )
        run.add_argument(
            "-o",
            "--output",
            choices=["text", "json", "yaml"],
            help="Format of the report, text by default.",
        )
        run.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            default=False,
            help="Log queries and responses.",
        )
        return run, RunCommand

    def _overrides(self) -> Dict[str, Any]:
        return {
            "server": self.server,
            "zone": self.zone,
            "port": self.port,
            "timeout": self.timeout,
            "transport": "tcp" if self.tcp else None,
            "cases": self.cases,
            "output": self.output,
        }

    def _load(self, args: CommandArgs) -> ProbeConfig:
        try:
            return load_config(args.config_files, self._overrides())
        except DataModelingError as e:
            print(e, file=sys.stderr)
            sys.exit(1)
        except OSError as e:
            print(f"failed to read configuration: {e}", file=sys.stderr)
            sys.exit(1)

    def run(self, args: CommandArgs) -> None:
        config = self._load(args)
        if config.server is None or config.zone is None:
            args.subparser.print_usage(sys.stderr)
            print("both server and zone are required", file=sys.stderr)
            sys.exit(1)

        start_logging("debug" if self.verbose else config.logging.level, config.logging.target)

        server = str(config.server)
        port = int(config.port)
        zone = config.zone.absolute()
        try:
            endpoint = resolve_endpoint(server, port, config.transport)
        except (socket.gaierror, ValueError) as e:
            print(f"failed to resolve '{server}': {e}", file=sys.stderr)
            sys.exit(1)

        runner = ProbeRunner(config.timeout.seconds(), get_cases(config.cases))
        results = runner.run(endpoint, zone)

        if config.output == "text":
            print(render_text(results, server, port, zone), end="")
        else:
            fmt = DataFormat.YAML if config.output == "yaml" else DataFormat.JSON
            print(dump(results, server, port, zone, fmt).rstrip("\n"))
