"""Reference-code generators for stock batches."""

from __future__ import annotations

import random
import string
from datetime import date
from typing import Optional

__all__ = ["generate_stock_ref"]


def generate_stock_ref(
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Return a stock reference of the form ``STK-YYYYMMDD-NNL``.

    ``NN`` is a zero-padded number in ``00..99`` and ``L`` an uppercase
    letter, e.g. ``STK-20251020-04F``.  Uniqueness is not guaranteed; the
    form lets the operator regenerate on collision.
    """
    day = today or date.today()
    picker = rng or random
    number = picker.randrange(100)
    letter = picker.choice(string.ascii_uppercase)
    return f"STK-{day:%Y%m%d}-{number:02d}{letter}"
