"""Processor options — raw string options normalized into a settings struct.

Options arrive as a mapping of option name to raw string value, the same
shape a host passes ``-Akey=value`` style options in. A key that is present
with no value (``None``) counts as switched on. Options can also be read
from the ``provreg:`` section of a YAML config file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml

DISABLED_OPTION = "disabled"
VERBOSE_OPTION = "verbose"
LOG_OPTION = "log"
DIR_OPTION = "dir"

# Order used by report()
OPTION_NAMES = (DISABLED_OPTION, VERBOSE_OPTION, LOG_OPTION, DIR_OPTION)

CONFIG_FILE = "provreg.yaml"
CONFIG_SECTION = "provreg"


@dataclass
class Options:
    """Read-only settings consumed by the driver and the persistence layer."""

    disabled: bool = False
    verbose: bool = False
    log: bool = False
    dir: str = ""  # Always "" or ends with "/"
    processor_info: str = ""
    raw: dict[str, Optional[str]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_mapping(
        cls, values: Mapping[str, Optional[str]], processor_info: str = ""
    ) -> Options:
        """Parse raw option values.

        Unknown boolean values are treated as ``False`` and recorded in
        ``warnings``; they never raise.
        """
        warnings: list[str] = []
        return cls(
            disabled=_boolean_option(values, DISABLED_OPTION, warnings),
            verbose=_boolean_option(values, VERBOSE_OPTION, warnings),
            log=_boolean_option(values, LOG_OPTION, warnings),
            dir=clean_path(values.get(DIR_OPTION)),
            processor_info=processor_info,
            raw=dict(values),
            warnings=warnings,
        )

    @classmethod
    def from_yaml(
        cls,
        path: str | Path,
        overrides: Optional[Mapping[str, Optional[str]]] = None,
        processor_info: str = "",
    ) -> Options:
        """Load options from a YAML file, then apply ``overrides`` on top.

        A missing file yields the defaults (plus overrides).
        """
        path = Path(path)
        values: dict[str, Optional[str]] = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            section = data.get(CONFIG_SECTION, {}) or {}
            for name in OPTION_NAMES:
                if name in section:
                    values[name] = _yaml_value(section[name])
        values.update(overrides or {})
        return cls.from_mapping(values, processor_info=processor_info)

    def report(self) -> str:
        """Describe the options as received, one line per known option."""
        lines = [f"Initializing provreg processor {self.processor_info}", "Used options:"]
        for name in OPTION_NAMES:
            lines.append(f" - {name}: {_option_message(self.raw, name)}")
        return "\n".join(lines) + "\n"


def clean_path(path: Optional[str]) -> str:
    """Normalize a resource directory prefix to forward slashes and a trailing '/'.

    The prefix is always relative to the output root: leading slashes are
    dropped, and an empty prefix stays empty.
    """
    if path is None:
        return ""
    path = path.replace("\\", "/").lstrip("/")
    if not path or path.endswith("/"):
        return path
    return path + "/"


def _boolean_option(
    values: Mapping[str, Optional[str]], name: str, warnings: list[str]
) -> bool:
    if name not in values:
        return False

    value = values[name]
    if value is None or value.lower() == "true":
        return True

    if value.lower() != "false":
        warnings.append(
            f"Unrecognized value for parameter '{name}'. Found '{value}'.  "
            f"Legal values: 'true', 'false'."
        )
    return False


def _option_message(values: Mapping[str, Optional[str]], name: str) -> str:
    if name in values:
        value = values[name]
        if value is None:
            return "''"
        return f"'{value}'"
    return "missing"


def _yaml_value(value) -> Optional[str]:
    # YAML gives us real booleans; the option layer works on raw strings
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
