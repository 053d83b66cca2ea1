"""Source text carried in ``ReplacementOperation.old_value``/``new_value``.

The text is opaque to the core; code generation consumes it downstream.
Provider blocks always nest the modal component.
"""

import json
import re
from typing import Any, Dict, Mapping

from ..config import TargetSettings
from ..constants import ENVIRONMENT_ENUM
from .models import thaw_value


def style_import(path: str) -> str:
    return f"import '{path}'"


def environment_expression(environment: str) -> str:
    """``"production"`` -> ``"Environment.PRODUCTION"``."""
    return ENVIRONMENT_ENUM[environment]


# Dotted JS identifiers (PARA_API_KEY, process.env.KEY, Environment.DEVELOPMENT)
# are rendered as expressions, everything else as literals
_EXPRESSION_RE = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


def _jsx_value(value: Any) -> str:
    if isinstance(value, str):
        if _EXPRESSION_RE.match(value):
            return "{" + value + "}"
        return json.dumps(value)
    return "{" + json.dumps(thaw_value(value)) + "}"


def source_provider_block(provider_name: str, props: Mapping[str, Any]) -> str:
    """Approximate the source provider's JSX from its scanned props."""
    attrs = "".join(f"\n  {key}={_jsx_value(value)}" for key, value in props.items())
    return f"<{provider_name}{attrs}\n>\n  {{children}}\n</{provider_name}>"


def _render_object(value: Mapping[str, Any], indent: int) -> str:
    pad = "  " * indent
    lines = []
    for key, item in value.items():
        if isinstance(item, Mapping):
            lines.append(f"{pad}{key}: {_render_object(item, indent + 1)},")
        elif isinstance(item, str) and _EXPRESSION_RE.match(item):
            lines.append(f"{pad}{key}: {item},")
        else:
            lines.append(f"{pad}{key}: {json.dumps(thaw_value(item))},")
    closing = "  " * (indent - 1)
    return "{\n" + "\n".join(lines) + f"\n{closing}}}"


def target_provider_block(target: TargetSettings, config: Dict[str, Any]) -> str:
    """Render the target provider with its config and the nested modal."""
    provider = target.provider_component
    return (
        f"<{provider}\n"
        f"  config={{{_render_object(config, 2)}}}\n"
        f">\n"
        f"  {{children}}\n"
        f"  <{target.modal_component} />\n"
        f"</{provider}>"
    )
