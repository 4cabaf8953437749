from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class RandomStreams:
    """Independent generators for each source of randomness in a run.

    All of them come from one `SeedSequence`, so a single seed reproduces the whole run. Keeping
    them apart means a different number of reservation draws cannot move arrivals or failures,
    and a thinner peak cannot move the per-step jitter.
    """

    jitter: np.random.Generator
    arrivals: np.random.Generator
    reservations: np.random.Generator
    failures: np.random.Generator


def make_streams(seed: Optional[int]) -> RandomStreams:
    jitter, arrivals, reservations, failures = np.random.SeedSequence(seed).spawn(4)
    return RandomStreams(
        jitter=np.random.default_rng(jitter),
        arrivals=np.random.default_rng(arrivals),
        reservations=np.random.default_rng(reservations),
        failures=np.random.default_rng(failures),
    )
