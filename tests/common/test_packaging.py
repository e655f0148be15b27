# Copyright PulseMCP contributors. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the installed distribution metadata."""

import ast
import pulsemcp
import re
import sys
from importlib import metadata
from pathlib import Path


DISTRIBUTION = 'pulsemcp-mcp-servers'


def _normalize(name):
    return re.sub(r'[-_.]+', '-', name).lower()


def _requirements(extra=None):
    names = set()
    for requirement in metadata.requires(DISTRIBUTION) or []:
        is_extra = 'extra ==' in requirement
        if (extra is None and not is_extra) or (extra and (f'"{extra}"' in requirement or f"'{extra}'" in requirement)):
            names.add(_normalize(re.match(r'[A-Za-z0-9._-]+', requirement).group(0)))
    return names


def _third_party_imports():
    modules = set()
    for path in Path(pulsemcp.__file__).parent.rglob('*.py'):
        tree = ast.parse(path.read_text(encoding='utf-8'))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                modules.update(alias.name.split('.')[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                modules.add(node.module.split('.')[0])
    return {
        module
        for module in modules
        if module != 'pulsemcp' and module not in sys.stdlib_module_names
    }


class TestDistribution:
    """Tests for the declared dependencies and entry points."""

    def test_imports_are_declared(self):
        """Every third-party module the package imports comes from a declared dependency."""
        declared = _requirements()
        providers = metadata.packages_distributions()

        for module in _third_party_imports():
            distributions = {_normalize(name) for name in providers.get(module, [])}
            assert distributions & declared, f'{module} is not a declared dependency'

    def test_test_extra(self):
        """The test extra carries the test runner and the AWS mock."""
        assert {'pytest', 'pytest-asyncio', 'moto'} <= _requirements('test')

    def test_console_scripts(self):
        """Each server installs its console script."""
        scripts = {
            entry_point.name: entry_point.value
            for entry_point in metadata.entry_points(group='console_scripts')
            if entry_point.value.startswith('pulsemcp.')
        }

        assert scripts == {
            'pulsemcp-appsignal-mcp-server': 'pulsemcp.appsignal_mcp_server.server:main',
            'pulsemcp-langfuse-mcp-server': 'pulsemcp.langfuse_mcp_server.server:main',
            'pulsemcp-dynamodb-mcp-server': 'pulsemcp.dynamodb_mcp_server.server:main',
            'pulsemcp-cms-admin-mcp-server': 'pulsemcp.cms_admin_mcp_server.server:main',
        }
