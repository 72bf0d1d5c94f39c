# tuning.py
"""
Sparseness tuner: KC thresholds plus the APL<->KC weight pair.

1. Spontaneous KC input: wPNKC times the mean PN rate over spont_window
   (halfway between start and stimulus onset, up to onset), averaged over
   the tuning odors.
2. Thresholds (unless thr_mode == "fixed"): simulate the tuning odors with no
   APL and an unreachable threshold, take each KC's peak potential per odor
   minus 2*spont_in, sort descending and cut at sp_target * factor:
   - "global": one cut over all pooled (KC, odor) peaks,
   - "homeostatic": one cut per KC over its own peaks.
   2*spont_in is added back. factor is sp_factor_pre_apl with the APL on,
   1 without it.
3. APL on: seed wAPLKC = 2*ceil(-ln sp_target), wKCAPL = wAPLKC / N, then
   repeat: simulate, measure sparsity, stop inside the band
   |sp - target| <= sp_acc * target or at max_iters, else step both weights by
   (sp - target)/target * sp_lr_coeff/sqrt(iteration) (wKCAPL scaled by 1/N),
   clamping at 0 after a negative step.
4. APL off: both weights stay exactly 0 and no loop runs.

Heuristic damped search, no convergence proof. A run that hits max_iters
keeps its last state; kc.tuning_iters and kc.tuning_sparsity tell the caller
how it went.

One process pool serves the whole procedure; its initializer hands every
worker the params, wPNKC and the tuning odors' PN traces once. Each iteration
is a parallel map over tuning odors followed by a reduction in the calling
process, which is the only writer of the weights, the iteration count and the
sparsity.
"""
import logging
import math
from concurrent.futures import ProcessPoolExecutor
from functools import partial

import numpy as np

from . import timegrid
from .analyze import sparsity
from .neurons import sim_kc_layer

logger = logging.getLogger(__name__)

UNREACHABLE_THR = 1e5

# What every tuning simulation reads; filled in each worker by the pool
# initializer.
_shared = {}


def _init_worker(p, wPNKC, pn_sims):
    _shared.update(p=p, wPNKC=wPNKC, pn_sims=pn_sims)


def tuning_odors(p, n_odors):
    return list(p.kc.tune_from) if p.kc.tune_from else list(range(n_odors))


def sample_pn_spont(p, rv, odors):
    t1, t2 = timegrid.spont_window(p.time)
    means = [rv.pn.sims[i][:, t1:t2].mean(axis=1) for i in odors]
    return np.mean(means, axis=0)[:, None]


def choose_kc_thresholds(peaks, spont_in, target, homeostatic=False):
    """
    peaks: N x n_odors, already offset by -2*spont_in. Returns N x 1.
    Index min(int(target * n), n - 1) of the descending sort is the cut.
    """
    if homeostatic:
        n = peaks.shape[1]
        idx = min(int(target * n), n - 1)
        cut = -np.sort(-peaks, axis=1)[:, idx:idx + 1]
    else:
        flat = -np.sort(-peaks.ravel())
        idx = min(int(target * flat.size), flat.size - 1)
        cut = flat[idx]
    return cut + 2.0 * spont_in


def _peak_potential(k):
    vm, _ = sim_kc_layer(_shared["p"], _shared["wPNKC"], _shared["pn_sims"][k],
                         UNREACHABLE_THR, 0.0, 0.0)
    return vm.max(axis=1)


def _spike_counts(thr, wAPLKC, wKCAPL, k):
    _, spikes = sim_kc_layer(_shared["p"], _shared["wPNKC"], _shared["pn_sims"][k],
                             thr, wAPLKC, wKCAPL)
    return spikes.sum(axis=1)


def _measure(pool, rv, n):
    fn = partial(_spike_counts, rv.kc.thr, rv.kc.wAPLKC, rv.kc.wKCAPL)
    return sparsity(np.column_stack(list(pool.map(fn, range(n)))))


def fit_sparseness(p, rv, n_workers=None):
    kc = p.kc
    N = rv.n_kcs
    odors = tuning_odors(p, rv.n_odors)
    n_workers = n_workers or p.n_workers

    rv.kc.wAPLKC[...] = 0.0
    rv.kc.wKCAPL[...] = 0.0
    rv.kc.tuning_iters = 0
    spont_in = rv.kc.wPNKC @ sample_pn_spont(p, rv, odors)
    factor = kc.sp_factor_pre_apl if kc.enable_apl else 1.0
    rv.log(f"fit_sparseness: {N} KCs, {len(odors)} tuning odors, thr_mode={kc.thr_mode}")

    pn_sims = [rv.pn.sims[i] for i in odors]
    with ProcessPoolExecutor(max_workers=n_workers, initializer=_init_worker,
                             initargs=(p, rv.kc.wPNKC, pn_sims)) as pool:
        if kc.thr_mode == "fixed":
            rv.kc.thr[...] = kc.fixed_thr
            raw = None
        else:
            raw = np.column_stack(list(pool.map(_peak_potential, range(len(odors)))))
            rv.kc.thr[...] = choose_kc_thresholds(
                raw - 2.0 * spont_in, spont_in, kc.sp_target * factor,
                homeostatic=kc.thr_mode == "homeostatic")
        rv.log(f"  thresholds: min={rv.kc.thr.min():.4g} max={rv.kc.thr.max():.4g}")

        if not kc.enable_apl:
            if raw is None:
                sp = _measure(pool, rv, len(odors))
            else:
                # with no APL a KC spikes iff its unreset peak crosses threshold
                sp = sparsity(raw > rv.kc.thr)
            rv.kc.tuning_sparsity = sp
            rv.log(f"  APL disabled; sparsity={sp:.4f}")
            return sp

        w0 = 2.0 * math.ceil(-math.log(kc.sp_target))
        rv.kc.wAPLKC[...] = w0
        rv.kc.wKCAPL[...] = w0 / N

        count = 0
        while True:
            count += 1
            sp = _measure(pool, rv, len(odors))
            rv.log(f"  iter {count}: sparsity={sp:.4f} wAPLKC={rv.kc.wAPLKC[0, 0]:.4g}")
            if abs(sp - kc.sp_target) <= kc.sp_acc * kc.sp_target or count >= kc.max_iters:
                break

            lr = kc.sp_lr_coeff / math.sqrt(count)
            delta = (sp - kc.sp_target) / kc.sp_target * lr
            rv.kc.wAPLKC += delta
            rv.kc.wKCAPL += delta / N
            if delta < 0.0:
                np.maximum(rv.kc.wAPLKC, 0.0, out=rv.kc.wAPLKC)
                np.maximum(rv.kc.wKCAPL, 0.0, out=rv.kc.wKCAPL)

    rv.kc.tuning_iters = count
    rv.kc.tuning_sparsity = sp
    if abs(sp - kc.sp_target) > kc.sp_acc * kc.sp_target:
        rv.log(f"  stopped at max_iters={kc.max_iters} outside tolerance")
        logger.warning("sparsity tuning hit max_iters=%d at sparsity %.4f (target %.4f)",
                       kc.max_iters, sp, kc.sp_target)
    return sp
