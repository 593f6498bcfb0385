# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import sys
from typing import Optional

from refman.config import log_level

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_CONFIGURED = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once (console handler, plain format)."""
    global _CONFIGURED
    lvl = getattr(logging, (level or log_level()).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(lvl)
    if _CONFIGURED:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # driver chatter only from WARNING up
    logging.getLogger("pymongo").setLevel(max(lvl, logging.WARNING))
    _CONFIGURED = True
