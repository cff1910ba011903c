# -*- coding: utf-8 -*-
from setuptools import setup

package_dir = \
{'': 'python'}

packages = \
['edns_probe',
 'edns_probe.client',
 'edns_probe.client.commands',
 'edns_probe.datamodel',
 'edns_probe.probe',
 'edns_probe.report',
 'edns_probe.utils',
 'edns_probe.utils.modeling',
 'edns_probe.utils.modeling.types']

package_data = \
{'': ['*'], 'edns_probe.report': ['templates/*']}

install_requires = \
['dnspython>=2.6', 'jinja2', 'pyyaml', 'typing-extensions']

extras_require = \
{'test': ['pytest']}

entry_points = \
{'console_scripts': ['edns-probe = edns_probe.client.main:main']}

setup_kwargs = {
    'name': 'edns-probe',
    'version': '1.0.0',
    'description': 'EDNS0 conformance probe - sends crafted EDNS queries to a name-server and checks the responses against RFC 6891 and RFC 7873',
    'long_description': "# EDNS probe\n\nChecks a DNS name-server for EDNS0 compliance. A fixed battery of queries (plain DNS, EDNS version 0, unknown version, unknown option, unknown flag, DO bit, truncation, DNS cookies) is sent to the apex of a zone and every response is checked against the behaviour mandated by RFC 6891 and RFC 7873.\n\n```\n$ edns-probe run 192.0.2.53 example.com\n```\n\nRun `edns-probe list` to see the test cases.\n",
    'package_dir': package_dir,
    'packages': packages,
    'package_data': package_data,
    'install_requires': install_requires,
    'extras_require': extras_require,
    'entry_points': entry_points,
    'python_requires': '>=3.9,<4.0',
}

setup(**setup_kwargs)
