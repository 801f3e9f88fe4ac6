# -*- coding: utf-8 -*-
"""Identity — principal helpers.

Principals are opaque text tokens compared by equality. A request without
credentials resolves to the anonymous principal.
"""

from __future__ import annotations

from typing import Optional

ANONYMOUS_PRINCIPAL = "2vxsx-fae"


def is_anonymous(principal: Optional[str]) -> bool:
    return not principal or principal == ANONYMOUS_PRINCIPAL
