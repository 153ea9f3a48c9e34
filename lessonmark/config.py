"""Configuration helpers: settings file discovery and a minimal TOML reader."""

import os
import pathlib

from lessonmark.attrs import COLOR_MAP

DEFAULT_SETTINGS = {
    "edit_port": 8795,
    "spacer_height": 16,
    "accent": COLOR_MAP["primary"],
    "colors": {},
}


def get_config_path() -> pathlib.Path:
    env = os.environ.get("LESSONMARK_CONFIG")
    if env:
        return pathlib.Path(env)
    return pathlib.Path.home() / ".config" / "lessonmark" / "settings.toml"


def load_settings(path: pathlib.Path | str | None = None) -> dict:
    if path is None:
        path = get_config_path()
    path = pathlib.Path(path)
    settings = dict(DEFAULT_SETTINGS)
    settings["colors"] = {}
    if path.exists():
        parsed = _parse_toml_simple(path.read_text())
        colors = parsed.pop("colors", {})
        settings.update(parsed)
        if isinstance(colors, dict):
            settings["colors"] = {str(k).lower(): str(v) for k, v in colors.items()}
    return settings


def _parse_toml_simple(text: str) -> dict:
    """Minimal TOML parser: key = value lines, optionally under [section] headers."""
    result: dict = {}
    target = result
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            target = result.setdefault(line[1:-1].strip(), {})
            continue
        if "=" in line:
            k, v = line.split("=", 1)
            k = k.strip()
            v = v.strip()
            if v.startswith('"') and v.endswith('"'):
                v = v[1:-1]
            elif v.startswith("'") and v.endswith("'"):
                v = v[1:-1]
            elif v.isdigit():
                v = int(v)
            elif v == "true":
                v = True
            elif v == "false":
                v = False
            target[k] = v
    return result
