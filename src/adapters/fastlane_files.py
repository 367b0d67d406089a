"""Rendering of the files fastlane reads.

Why in adapters:
- The dotenv syntax and the Markdown note (Jinja2) are infrastructure details.
- The Core only knows `ProjectConfig`; the exact bytes are decided here.

Determinism: no timestamps, fixed key order (the model's field order), so an
unchanged config renders byte-identical output.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from core.domain.models import ProjectConfig

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_NEEDS_QUOTES = set(" \t#'\"\\$=")


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def env_key(field_name: str) -> str:
    return field_name.upper()


def format_value(value: object) -> str:
    """Serialize one config value the way dotenv parsers read it back."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        value = value.value
    text = "" if value is None else str(value)
    if not text or not (_NEEDS_QUOTES & set(text)):
        return text
    if "'" not in text:
        # Single quotes: literal, no interpolation.
        return f"'{text}'"
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def render_env(config: ProjectConfig) -> str:
    """One `KEY=VALUE` line per field, in schema order."""

    lines = [
        f"{env_key(name)}={format_value(getattr(config, name))}"
        for name in ProjectConfig.model_fields
    ]
    return "\n".join(lines) + "\n"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    if len(value) >= 2 and value[0] == value[-1] == '"':
        out: list[str] = []
        chars = iter(value[1:-1])
        for ch in chars:
            if ch == "\\":
                out.append(next(chars, "\\"))
            else:
                out.append(ch)
        return "".join(out)
    return value


def parse_env(text: str) -> dict[str, str]:
    """Read back a file written by `render_env` (comments and blanks skipped)."""

    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = _unquote(value.strip())
    return data


def render_note(*, config: ProjectConfig, project_name: str, env_file: str) -> str:
    """Markdown note left next to the env file for whoever opens `fastlane/`."""

    gates = [
        ("quality_gate", config.enable_quality_gate),
        ("tests", config.enable_tests),
        ("swiftlint", config.enable_swiftlint),
        ("snapshot", config.enable_snapshot),
    ]
    template = _get_env().get_template("generated_note.md.j2")
    return template.render(
        config=config,
        project_name=project_name,
        env_file=env_file,
        gates=gates,
    )
