# rectify/policy.py
"""Exit-status success policy for formatter tools.

Most tools exit 0 on success. Some fixers also use non-zero statuses to say
"ran fine and changed something"; those are listed in SUCCESS_EXIT_CODES,
keyed by a fragment of the executable's base name.
"""

import os
from typing import Dict, FrozenSet, Optional

DEFAULT_SUCCESS_CODES: FrozenSet[int] = frozenset({0})

# Executable name fragment -> accepted exit statuses.
SUCCESS_EXIT_CODES: Dict[str, FrozenSet[int]] = {
    # 1 = fixable violations were fixed
    "phpcbf": frozenset({0, 1}),
    # 2 = changes were made
    "pint": frozenset({0, 2}),
}


def success_codes(executable_path: str) -> FrozenSet[int]:
    """Return the exit statuses accepted for an executable.

    The first table entry whose key occurs in the executable's base name wins.
    """
    name = os.path.basename(executable_path)
    for fragment, codes in SUCCESS_EXIT_CODES.items():
        if fragment in name:
            return codes
    return DEFAULT_SUCCESS_CODES


def is_success(executable_path: str, exit_status: Optional[int]) -> bool:
    """Return True if exit_status counts as a successful run.

    A missing status (process never started, or was killed) is never success.
    """
    if exit_status is None:
        return False
    return exit_status in success_codes(executable_path)
