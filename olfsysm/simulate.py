# simulate.py
"""
Pipeline driver: three odor-parallel phases over one RunState.

Phase 1  ORN + LN per odor          -> orn.sims, ln.inhA_sims, ln.inhB_sims
Phase 2  PN per odor (reads phase 1) -> pn.sims
Phase 3  optional regeneration (build_wpnkc + fit_sparseness), then KC per
         odor (reads phase 2)        -> kc.responses, kc.spike_counts

Each phase is a fork-join map over odors on a ProcessPoolExecutor. The layer
loops step in Python, so separate processes are what lets odors actually run
side by side. Workers get the params tree and the odor's upstream arrays,
never the RunState; results come back in odor order and are copied into the
preallocated run-state arrays by the calling process, one odor per column.
"""
import logging
from concurrent.futures import ProcessPoolExecutor
from functools import partial

import numpy as np
from tqdm.auto import tqdm

from .connectivity import build_wpnkc
from .neurons import sim_kc_layer, sim_ln_layer, sim_orn_layer, sim_pn_layer
from .tuning import fit_sparseness

logger = logging.getLogger(__name__)


def _orn_ln_worker(p, odor):
    orn_t = sim_orn_layer(p, odor)
    inhA, inhB = sim_ln_layer(p, orn_t)
    return orn_t, inhA, inhB


def _kc_worker(p, wPNKC, thr, wAPLKC, wKCAPL, pn_t):
    _, spikes = sim_kc_layer(p, wPNKC, pn_t, thr, wAPLKC, wKCAPL)
    return spikes.sum(axis=1)


def _map_odors(fn, iterables, n_odors, n_workers, progress, desc):
    with ProcessPoolExecutor(max_workers=n_workers) as pool:
        results = pool.map(fn, *iterables)
        if progress:
            results = tqdm(results, total=n_odors, desc=desc, unit="odor", leave=False)
        yield from enumerate(results)


def run_orn_ln_sims(p, rv, progress=False):
    odors = range(rv.n_odors)
    for i, (orn_t, inhA, inhB) in _map_odors(partial(_orn_ln_worker, p), [odors],
                                             rv.n_odors, p.n_workers, progress, "ORN/LN"):
        rv.orn.sims[i][...] = orn_t
        rv.ln.inhA_sims[i][...] = inhA
        rv.ln.inhB_sims[i][...] = inhB
    rv.log(f"ORN/LN sims done for {rv.n_odors} odors")


def run_pn_sims(p, rv, progress=False):
    rngs = rv.odor_rngs(rv.n_odors)
    args = [rv.orn.sims, rv.ln.inhA_sims, rv.ln.inhB_sims, rngs]
    for i, pn_t in _map_odors(partial(sim_pn_layer, p), args,
                              rv.n_odors, p.n_workers, progress, "PN"):
        rv.pn.sims[i][...] = pn_t
    rv.log(f"PN sims done for {rv.n_odors} odors")


def run_kc_sims(p, rv, regen=True, progress=False):
    """With regen=False the current wPNKC, thresholds and APL weights are reused."""
    if regen:
        build_wpnkc(p, rv)
        fit_sparseness(p, rv)

    kc = rv.kc
    fn = partial(_kc_worker, p, kc.wPNKC, kc.thr, kc.wAPLKC, kc.wKCAPL)
    for i, counts in _map_odors(fn, [rv.pn.sims], rv.n_odors, p.n_workers, progress, "KC"):
        kc.spike_counts[:, i] = counts
        kc.responses[:, i] = np.where(counts > 0.0, 1.0, 0.0)
    rv.log(f"KC sims done for {rv.n_odors} odors (regen={regen})")
    logger.debug("KC sims: %d odors, regen=%s", rv.n_odors, regen)


def run_all(p, rv, regen=True, progress=False):
    run_orn_ln_sims(p, rv, progress)
    run_pn_sims(p, rv, progress)
    run_kc_sims(p, rv, regen=regen, progress=progress)
    return rv
