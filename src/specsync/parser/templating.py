"""Rewrite OpenAPI ``{param}`` path templates into ``{{param}}`` variables.

Imported requests use double-brace interpolation, so ``/users/{id}`` becomes
``/users/{{id}}``. Already-converted segments are left alone, which makes the
conversion idempotent.
"""

from __future__ import annotations

import re

# A single-braced word not already wrapped in a second pair of braces.
_TEMPLATE_VAR = re.compile(r"(?<!\{)\{(\w+)\}(?!\})")


def convert_path_template(path: str) -> str:
    """Replace every ``{identifier}`` in *path* with ``{{identifier}}``.

    Never fails; a path without braces is returned unchanged.

    Example::

        >>> convert_path_template("/users/{id}/posts/{postId}")
        '/users/{{id}}/posts/{{postId}}'
    """
    return _TEMPLATE_VAR.sub(r"{{\1}}", path)
