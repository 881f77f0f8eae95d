from __future__ import annotations

import json
from typing import Any


def loads_embedded_array(text: str) -> Any:
    """Decode JSON, falling back to the outermost ``[...]`` slice (code fences, prose).

    Raises ``json.JSONDecodeError`` when neither the text nor the slice decodes.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        start = text.find("[")
        end = text.rfind("]")
        if start == -1 or end == -1 or end <= start:
            raise
        return json.loads(text[start : end + 1])
