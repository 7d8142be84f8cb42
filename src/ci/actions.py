# src/ci/actions.py — v1
"""GitHub Actions workflow commands.

Only the pieces the pipeline needs: exporting variables to later workflow
steps and grouping log output. Outside Actions these are no-ops.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def export_variable(name: str, value: str) -> bool:
    """Append ``name=value`` to the ``GITHUB_ENV`` file for later steps.

    The current process environment is left untouched.

    Returns:
        True if the variable was written.
    """
    env_file = os.environ.get("GITHUB_ENV")
    if not env_file:
        logger.debug("GITHUB_ENV not set, not exporting %s", name)
        return False

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with Path(env_file).open("a", encoding="utf-8") as fh:
        fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    logger.debug("Exported %s=%s", name, value)
    return True


def start_group(name: str) -> None:
    if in_github_actions():
        print(f"::group::{escape_data(name)}", flush=True)


def end_group() -> None:
    if in_github_actions():
        print("::endgroup::", flush=True)
