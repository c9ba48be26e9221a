"""
GitHub Actions runtime helpers.

Reads action inputs from ``INPUT_*`` environment variables and publishes
step outputs through the ``GITHUB_OUTPUT`` file, following the runner's
file command conventions.
"""

import os
import uuid
import logging
from typing import Mapping, Optional

from error_handling import ConfigError, WriteError

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


def _input_env_names(name: str) -> list:
    key = name.replace(" ", "_").upper()
    names = [f"INPUT_{key}"]
    if "-" in key:
        names.append(f"INPUT_{key.replace('-', '_')}")
    return names


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the trimmed value of an action input, or "" when unset."""
    environ = os.environ if environ is None else environ
    for env_name in _input_env_names(name):
        value = environ.get(env_name)
        if value is not None:
            return value.strip()
    return ""


def parse_boolean_input(name: str, value: str, default: bool) -> bool:
    """Parse a boolean input using the Actions YAML 1.2 core schema."""
    if value == "":
        return default
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}. "
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`",
        details={"input": name, "value": value},
    )


def is_actions_runner(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get("GITHUB_ACTIONS") == "true"


def set_output(name: str, value: str, environ: Optional[Mapping[str, str]] = None) -> None:
    """
    Set a step output.

    Appends a heredoc-style entry to the GITHUB_OUTPUT file. Outside a
    runner the value is printed to stdout instead.

    Raises:
        WriteError: If the output file cannot be written.
    """
    environ = os.environ if environ is None else environ
    output_file = environ.get("GITHUB_OUTPUT")
    if not output_file:
        logger.info("GITHUB_OUTPUT not set, printing output '%s' to stdout", name)
        print(value)
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise WriteError(f"Unexpected input: output value contains the delimiter {delimiter}")

    try:
        with open(output_file, "a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    except OSError as exc:
        raise WriteError(
            f"Failed to write output '{name}' to {output_file}: {exc}",
            details={"file_path": output_file},
        ) from exc

    logger.info("Output '%s' set (%d characters)", name, len(value))
