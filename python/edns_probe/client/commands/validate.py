import argparse
import sys
from typing import List, Tuple, Type

from edns_probe.client.command import Command, CommandArgs, register_command
from edns_probe.datamodel import load_config
from edns_probe.utils.modeling import DataFormat
from edns_probe.utils.modeling.errors import DataModelingError


@register_command
class ValidateCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)
        self.input_file: List[str] = namespace.input_file
        self.print_config: bool = namespace.print_config

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        validate = subparser.add_parser("validate", help="Validates configuration in JSON or YAML format.")
        validate.add_argument(
            "--print",
            help="Print the resulting configuration with all defaults filled in, in YAML format.",
            action="store_true",
            default=False,
            dest="print_config",
        )
        validate.add_argument(
            "input_file",
            type=str,
            nargs="+",
            help="File or combination of files with the probe configuration in YAML or JSON format.",
        )
        return validate, ValidateCommand

    def run(self, args: CommandArgs) -> None:
        try:
            config = load_config(self.input_file)
        except DataModelingError as e:
            print(e, file=sys.stderr)
            sys.exit(1)
        except OSError as e:
            print(f"failed to read configuration: {e}", file=sys.stderr)
            sys.exit(1)

        if self.print_config:
            print(DataFormat.YAML.dict_dump(config.to_dict()), end="")
        else:
            print("Configuration is valid.")
