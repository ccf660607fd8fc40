# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Naming conventions of saved runs.

A run is saved as <base>_<YYYYMMDD>_<HHMMSS>.json where the base is derived from the project name. All runs with
the same base form a run family, see retention.py.
"""

import re

from beartype.typing import Optional

MAX_BASENAME_LENGTH = 15
DEFAULT_BASENAME = "run"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")
_RUN_TIMESTAMP = re.compile(r"_\d{8}_\d{6}")
TIMESTAMPED_RUN = re.compile(r"_\d{8}_\d{6}\.json$")
"""Matches the end of a timestamped run filename"""


def safe_run_basename(project_name: Optional[str]) -> str:
    """Derive a storage safe run base name from a project name.

    Every character that is not an ascii letter or digit becomes an underscore and the result is cut to 15
    characters.
    """
    if not project_name:
        return DEFAULT_BASENAME
    return _UNSAFE_CHARS.sub("_", project_name)[:MAX_BASENAME_LENGTH]


def strip_run_timestamp(filename: str) -> str:
    """The display name of a run: the filename without timestamp and .json extension"""
    return _RUN_TIMESTAMP.sub("", filename, count=1).replace(".json", "")
