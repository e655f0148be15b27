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

"""Tests for the license header of the package sources."""

import pulsemcp
import pytest
from pathlib import Path


SOURCES = sorted(Path(pulsemcp.__file__).parent.rglob('*.py'))


class TestLicenseHeaders:
    """Tests for the Apache license header."""

    def test_sources_found(self):
        """Every server package contributes source files."""
        packages = {path.parent.name for path in SOURCES}

        assert {
            'common',
            'appsignal_mcp_server',
            'langfuse_mcp_server',
            'dynamodb_mcp_server',
            'cms_admin_mcp_server',
        } <= packages

    @pytest.mark.parametrize('path', SOURCES, ids=lambda path: path.name)
    def test_header(self, path):
        """Each source file opens with the PulseMCP Apache header."""
        lines = path.read_text(encoding='utf-8').splitlines()

        assert lines[0] == '# Copyright PulseMCP contributors. All Rights Reserved.'
        assert lines[2] == '# Licensed under the Apache License, Version 2.0 (the "License");'
        assert not any('Amazon.com' in line for line in lines[:14])
