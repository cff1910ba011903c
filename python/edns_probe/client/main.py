import argparse
import importlib
import os
import sys
from typing import List, Optional

from edns_probe.constants import PROBE_NAME, VERSION

from .command import CommandArgs, get_help_command, install_commands_parsers


def auto_import_commands() -> None:
    prefix = f"{'.'.join(__name__.split('.')[:-1])}.commands."
    for module_name in sorted(os.listdir(os.path.dirname(__file__) + "/commands")):
        if module_name[-3:] != ".py" or module_name == "__init__.py":
            continue
        importlib.import_module(f"{prefix}{module_name[:-3]}")


def create_main_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        PROBE_NAME,
        description="EDNS0 conformance probe. Sends a fixed battery of crafted EDNS queries to a name-server"
        " and checks the responses against the behaviour mandated by RFC 6891 and RFC 7873.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=VERSION,
        help="Get version",
    )
    parser.add_argument(
        "-c",
        "--config",
        action="append",
        type=str,
        help="Optional, path to a configuration file (YAML/JSON) with the probe settings, can be repeated."
        " Command-line arguments take precedence over them.",
        default=[],
        required=False,
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    auto_import_commands()
    parser = create_main_argument_parser()
    install_commands_parsers(parser)

    namespace = parser.parse_args(sys.argv[1:] if argv is None else argv)
    if not hasattr(namespace, "command"):
        # no command given
        namespace.command = get_help_command()
        namespace.subparser = parser

    args = CommandArgs(namespace, parser)
    command = namespace.command(namespace)
    command.run(args)
