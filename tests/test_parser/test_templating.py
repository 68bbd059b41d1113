"""Tests for specsync.parser.templating."""

from __future__ import annotations

import pytest

from specsync.parser.templating import convert_path_template


class TestConvertPathTemplate:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/users/{id}", "/users/{{id}}"),
            ("/users/{userId}/posts/{post_id}", "/users/{{userId}}/posts/{{post_id}}"),
            ("/health", "/health"),
            ("/", "/"),
            ("/files/{name}.json", "/files/{{name}}.json"),
        ],
    )
    def test_conversion(self, path: str, expected: str) -> None:
        assert convert_path_template(path) == expected

    def test_idempotent(self) -> None:
        once = convert_path_template("/users/{id}/items/{itemId}")
        assert convert_path_template(once) == once

    def test_already_converted_untouched(self) -> None:
        assert convert_path_template("/users/{{id}}") == "/users/{{id}}"
