# connectivity.py
"""
PN->KC wiring (wPNKC, N x G).

Each KC gets nclaws claws. Every claw picks one glomerulus, independently and
with replacement, either uniformly or weighted by kc.cxn_distrib. A claw adds
1 to wPNKC[kc, glom]; two claws on the same glomerulus simply give a 2.
So every row sums to exactly nclaws.

The matrix is always regenerated whole: zeroed, then redrawn.
"""
import logging

import numpy as np

logger = logging.getLogger(__name__)


def draw_probabilities(p, n_gloms):
    if p.kc.uniform_pns:
        return np.full(n_gloms, 1.0 / n_gloms)
    w = np.asarray(p.kc.cxn_distrib, dtype=float).ravel()
    return w / w.sum()


def build_wpnkc(p, rv, rng=None):
    rng = rv.rng if rng is None else rng
    n_kc, n_gloms = rv.kc.wPNKC.shape
    probs = draw_probabilities(p, n_gloms)

    claws = rng.choice(n_gloms, size=(n_kc, p.kc.nclaws), replace=True, p=probs)
    rows = np.repeat(np.arange(n_kc), p.kc.nclaws)

    rv.kc.wPNKC[...] = 0.0
    np.add.at(rv.kc.wPNKC, (rows, claws.ravel()), 1.0)

    logger.debug("built wPNKC: %d KCs x %d claws, %s draws",
                 n_kc, p.kc.nclaws, "uniform" if p.kc.uniform_pns else "weighted")
    return rv.kc.wPNKC
