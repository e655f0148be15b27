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

"""Tests for large field truncation."""

import pytest
from pulsemcp.langfuse_mcp_server import truncation
from pulsemcp.langfuse_mcp_server.truncation import (
    sanitize_hint,
    truncate_large_fields,
    write_side_file,
)


class TestSanitizeHint:
    """Tests for sanitize_hint."""

    def test_replaces_unsafe_characters(self):
        """Characters outside [A-Za-z0-9_.-] become underscores."""
        assert sanitize_hint('observations[0].input/../x y') == 'observations_0_.input_.._x_y'

    def test_bounded_length(self):
        """Hints are cut to 64 characters."""
        assert len(sanitize_hint('a' * 200)) == 64

    def test_empty_hint(self):
        """An empty hint falls back to a default name."""
        assert sanitize_hint('') == 'field'


class TestTruncateLargeFields:
    """Tests for truncate_large_fields."""

    def test_long_string_is_replaced(self, tmp_path):
        """A 1500 character field keeps a 1000 character preview and points at its file."""
        text = 'a' * 1000 + 'b' * 500

        result = truncate_large_fields({'input': text}, directory=tmp_path)

        preview, marker = result['input'][:1000], result['input'][1000:]
        assert preview == 'a' * 1000
        assert marker.startswith('... [TRUNCATED: 1500 chars total. Full content saved to ')
        assert marker.endswith(']')
        saved = marker[len('... [TRUNCATED: 1500 chars total. Full content saved to ') : -1]
        assert saved.startswith(str(tmp_path))
        assert saved.endswith('-input.txt')
        with open(saved, encoding='utf-8') as f:
            assert f.read() == text

    def test_repeated_character_field(self, tmp_path):
        """A 1500 x field keeps 1000 x and its file holds all 1500."""
        result = truncate_large_fields({'a': 'x' * 1500}, directory=tmp_path)

        assert result['a'].startswith('x' * 1000)
        assert not result['a'].startswith('x' * 1001)
        assert '1500 chars' in result['a']
        (saved,) = tmp_path.iterdir()
        assert saved.read_text(encoding='utf-8') == 'x' * 1500

    @pytest.mark.parametrize('value', [{}, []])
    def test_empty_containers(self, tmp_path, value):
        """Empty mappings and lists come back empty."""
        assert truncate_large_fields(value, directory=tmp_path) == value
        assert list(tmp_path.iterdir()) == []

    def test_none_passes_through(self, tmp_path):
        """A top-level None is returned as is."""
        assert truncate_large_fields(None, directory=tmp_path) is None
        assert list(tmp_path.iterdir()) == []

    def test_threshold_is_inclusive(self, tmp_path):
        """Strings of exactly the threshold length are kept."""
        text = 'x' * 1000

        assert truncate_large_fields({'output': text}, directory=tmp_path) == {'output': text}
        assert list(tmp_path.iterdir()) == []

    def test_shape_is_preserved(self, tmp_path):
        """Keys, order, nesting and non-string values survive."""
        value = {
            'id': 't-1',
            'latency': 1.5,
            'tags': ['a', 'b'],
            'observations': [{'input': 'y' * 1200, 'level': None}],
            'ok': True,
        }

        result = truncate_large_fields(value, directory=tmp_path)

        assert list(result) == ['id', 'latency', 'tags', 'observations', 'ok']
        assert result['id'] == 't-1'
        assert result['latency'] == 1.5
        assert result['tags'] == ['a', 'b']
        assert result['ok'] is True
        assert result['observations'][0]['level'] is None
        assert '[TRUNCATED: 1200 chars total.' in result['observations'][0]['input']
        files = list(tmp_path.iterdir())
        assert len(files) == 1
        assert files[0].name.endswith('-observations_0_.input.txt')

    def test_does_not_mutate_input(self, tmp_path):
        """The input value is left untouched."""
        value = {'input': 'z' * 2000}

        truncate_large_fields(value, directory=tmp_path)

        assert value == {'input': 'z' * 2000}

    def test_unicode_is_saved_as_utf8(self, tmp_path):
        """Side files hold the full UTF-8 text."""
        text = 'é' * 1001

        result = truncate_large_fields(text, 'note', directory=tmp_path)

        assert '[TRUNCATED: 1001 chars total.' in result
        (saved,) = tmp_path.iterdir()
        assert saved.read_bytes().decode('utf-8') == text

    def test_distinct_file_names(self, tmp_path):
        """Every truncated field gets its own file."""
        truncate_large_fields(['q' * 1001, 'q' * 1001], 'items', directory=tmp_path)

        assert len(list(tmp_path.iterdir())) == 2

    def test_write_errors_propagate(self, tmp_path):
        """A side file that cannot be written fails the call."""
        missing = tmp_path / 'missing'

        with pytest.raises(OSError):
            truncate_large_fields('w' * 1001, directory=missing)

    def test_default_directory(self, monkeypatch, tmp_path):
        """Without a directory the shared spill directory is used."""
        monkeypatch.setattr(truncation, 'spill_directory', lambda: tmp_path)

        path = write_side_file('content', 'hint')

        assert path.parent == tmp_path
        assert path.read_text() == 'content'
