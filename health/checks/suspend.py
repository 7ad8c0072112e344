# ============================================================================
# SUSPEND CHECK
# ============================================================================
# EPOCH: 1 - COMPOSITE HEALTH PROBE
# STATUS: Infrastructure - Operator suspend marker
# PURPOSE: Stop advertising healthy when the marker file is removed
# CREATED: 18 OCT 2026
# ============================================================================
"""
Suspend Check

Operators take an instance out of rotation by deleting the marker file
``<deploy_root>/.health``. The service never creates it.

- marker present  -> not suspended
- marker absent   -> suspended
- lookup fails    -> suspended (fail closed)
"""

import logging
import os
import stat

logger = logging.getLogger(__name__)

SUSPEND_MARKER = ".health"


class SuspendChecker:
    """Checks for the operator-managed marker under the deploy root."""

    def __init__(self, deploy_root: str, marker: str = SUSPEND_MARKER):
        self.deploy_root = deploy_root
        self.marker = marker

    @property
    def marker_path(self) -> str:
        return os.path.join(self.deploy_root, self.marker)

    def is_suspended(self) -> bool:
        try:
            st = os.stat(self.marker_path)
        except FileNotFoundError:
            st = None
        except (OSError, TypeError, ValueError):
            logger.warning("Status: suspending", exc_info=True)
            return True

        if st is not None and stat.S_ISREG(st.st_mode):
            return False

        logger.debug(f"Deploy root: {os.path.abspath(self.deploy_root)}")
        logger.info("Status: suspending")
        return True


__all__ = [
    "SUSPEND_MARKER",
    "SuspendChecker",
]
