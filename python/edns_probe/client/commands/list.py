import argparse
from typing import Tuple, Type

from edns_probe.client.command import Command, CommandArgs, register_command
from edns_probe.probe.registry import CASES
from edns_probe.report import render_cases


@register_command
class ListCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)

    def run(self, args: CommandArgs) -> None:
        print(render_cases(CASES), end="")

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        list_cases = subparser.add_parser("list", help="List the test cases in the order they are run.")
        return list_cases, ListCommand
