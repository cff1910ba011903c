import os
import sys
from typing import Any, Dict, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from edns_probe.probe.model import TestCase, TestResult
from edns_probe.utils.modeling import DataFormat


def _get_templates_dir() -> str:
    module = sys.modules["edns_probe.report"].__file__
    if module:
        templates_dir = os.path.join(os.path.dirname(module), "templates")
        if os.path.isdir(templates_dir):
            return templates_dir
        raise NotADirectoryError(f"the templates dir '{templates_dir}' is not a directory or does not exist")
    raise OSError("package 'edns_probe.report' cannot be located or loaded")


_TEMPLATES_DIR = _get_templates_dir()


def template_from_file(name: str) -> Template:
    ldr = FileSystemLoader(_TEMPLATES_DIR)
    env = Environment(trim_blocks=True, lstrip_blocks=True, loader=ldr, undefined=StrictUndefined)
    return env.get_template(name)


REPORT_TEMPLATE = template_from_file("report.txt.j2")

CASES_TEMPLATE = template_from_file("cases.txt.j2")


def render_text(
    results: Sequence[TestResult],
    server: Optional[str] = None,
    port: Optional[int] = None,
    zone: Optional[str] = None,
) -> str:
    """One line per case, '<name> success' or '<name> failure! <reason>', optionally with a header line."""

    header = server is not None
    return REPORT_TEMPLATE.render(header=header, server=server, port=port, zone=zone, results=results)


def render_cases(cases: Sequence[TestCase]) -> str:
    return CASES_TEMPLATE.render(cases=cases)


def report_dict(results: Sequence[TestResult], server: str, port: int, zone: str) -> Dict[str, Any]:
    return {
        "server": server,
        "port": port,
        "zone": zone,
        "results": [result.to_dict() for result in results],
    }


def dump(results: Sequence[TestResult], server: str, port: int, zone: str, fmt: DataFormat) -> str:
    return fmt.dict_dump(report_dict(results, server, port, zone), indent=2)
