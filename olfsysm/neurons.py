# neurons.py
"""
Layer integrators for one odor at a time (ORN -> LN -> PN -> KC).

All layers use explicit Euler on the shared grid: x[t] = x[t-1] + dt/tau * dx/dt,
with fixed seed values at step 0. No step-size control; parameter sets that
blow up are not caught.

- ORN: target = spont + delta * stim, exponentially smoothed; rate relaxes to
  the target with orn.taum.
- LN: potential driven by (mean ORN rate)^3 scaled to n_physical_gloms,
  divisively damped by the A trace; rectified at ln.thr it drives the two
  GABA traces A (tauGA) and B (tauGB).
- PN: 200*tanh of the ORN deviation from spont, inhibited by
  pn.inhsc / (pn.inhadd + 0.25*A + 0.75*B), plus Gaussian noise; clipped at 0.
- KC: V' = -V + wPNKC pn - wAPLKC inh. Crossing thr emits a spike and resets
  V to 0 in the same step. The APL low-pass filters the population spike
  count twice (tau_apl2kc, then apl_taum) into one shared inhibition.

Linear first-order stages (ORN smoothing and relaxation) go through
scipy.signal.lfilter; it computes exactly the same recurrence.

Nothing here keeps state between calls and every input is a plain array or
the params tree, so the functions pickle cleanly into worker processes.
"""
import numpy as np
from scipy.signal import lfilter

from . import timegrid

# Seed values at step 0
LN_POTENTIAL0 = 300.0
LN_RESPONSE0 = 1.0
LN_INH0 = 50.0

PN_TANH_SCALE = 200.0
PN_INH_A_FRAC = 0.25
APL_SPIKE_GAIN = 1e4


def _first_order(x, a, y0):
    """y[0] = y0, y[t] = a*x[t] + (1-a)*y[t-1], along axis 1."""
    y0 = np.asarray(y0, dtype=float).reshape(x.shape[0], 1)
    if x.shape[1] < 2:
        return y0.copy()
    rest, _ = lfilter([a], [1.0, a - 1.0], x[:, 1:], axis=1, zi=(1.0 - a) * y0)
    return np.hstack([y0, rest])


def smoothts_exp(x, wsize):
    """Exponential part of MATLAB's smoothts: window > 1 is a sample count."""
    a = 2.0 / (wsize + 1.0) if wsize > 1.0 else wsize
    return _first_order(x, a, x[:, :1])


def sim_orn_layer(p, odor):
    spont = p.orn.data.spont
    delta = p.orn.data.delta[:, odor:odor + 1]

    base = spont * timegrid.ones_row(p.time)
    target = base + delta * timegrid.stim_row(p.time)
    target = smoothts_exp(target, p.orn.smoothing_window / p.time.dt)

    mul = p.time.dt / p.orn.taum
    return _first_order(target, mul, spont)


def sim_ln_layer(p, orn_t):
    T = orn_t.shape[1]
    dt = p.time.dt
    ln = p.ln
    drive = orn_t.mean(axis=0) ** 3 * (p.orn.n_physical_gloms / orn_t.shape[0] / 2.0)
    drive = drive.tolist()

    inhA = [LN_INH0] * T
    inhB = [LN_INH0] * T
    potential = LN_POTENTIAL0
    response = LN_RESPONSE0
    inh_ln = 0.0
    for t in range(1, T):
        dinhA = -inhA[t - 1] + response
        dinhB = -inhB[t - 1] + response
        dln = -potential + drive[t - 1] * inh_ln
        inhA[t] = inhA[t - 1] + dinhA * dt / ln.tauGA
        inhB[t] = inhB[t - 1] + dinhB * dt / ln.tauGB
        inh_ln = ln.inhsc / (ln.inhadd + inhA[t])
        potential = potential + dln * dt / ln.taum
        response = potential - ln.thr if potential > ln.thr else 0.0
    return np.array(inhA), np.array(inhB)


def sim_pn_layer(p, orn_t, inhA, inhB, rng):
    pn = p.pn
    G, T = orn_t.shape
    spont = p.orn.data.spont[:, 0]
    spont_drive = spont * pn.inhsc / (spont.sum() + pn.inhadd)
    gain = pn.tanhsc / PN_TANH_SCALE
    k = p.time.dt / pn.taum

    # deviation, offset and noise are all known up front
    arg = (orn_t - spont[:, None] + pn.offset).T
    noise = rng.normal(pn.noise.mean, pn.noise.sd, size=(T, G))
    inh = pn.inhsc / (pn.inhadd + PN_INH_A_FRAC * inhA + (1.0 - PN_INH_A_FRAC) * inhB)

    out = np.empty((T, G))
    out[0] = spont
    inh_pn = 0.0
    for t in range(1, T):
        d = -out[t - 1] + spont_drive + PN_TANH_SCALE * np.tanh(arg[t - 1] * gain * inh_pn)
        d += noise[t]
        inh_pn = inh[t]
        out[t] = np.maximum(out[t - 1] + d * k, 0.0)
    return out.T.copy()


def _per_kc(value, n):
    return np.broadcast_to(np.asarray(value, dtype=float).reshape(-1), (n,))


def sim_kc_layer(p, wPNKC, pn_t, thr, wAPLKC, wKCAPL):
    """
    Return (vm, spikes), both N x T. Columns up to and including start_step
    stay 0. thr / wAPLKC / wKCAPL are N x 1 columns or scalars broadcast to
    every KC.
    """
    N = wPNKC.shape[0]
    T = pn_t.shape[1]
    thr = _per_kc(thr, N)
    w_apl_kc = _per_kc(wAPLKC, N)
    w_kc_apl = _per_kc(wKCAPL, N)

    kv = p.time.dt / p.kc.taum
    ka = p.time.dt / p.kc.apl_taum
    ki = p.time.dt / p.kc.tau_apl2kc

    # time-major so each step touches contiguous memory
    drive = pn_t.T @ wPNKC.T
    vm = np.zeros((T, N))
    spikes = np.zeros((T, N))
    fired = np.zeros(N, dtype=bool)
    inh = 0.0
    Is = 0.0
    for t in range(timegrid.start_step(p.time) + 1, T):
        dIs = -Is + w_kc_apl[fired].sum() * APL_SPIKE_GAIN
        dinh = -inh + Is

        v = vm[t - 1] + (-vm[t - 1] + drive[t] - w_apl_kc * inh) * kv
        inh = inh + dinh * ka
        Is = Is + dIs * ki

        fired = v > thr
        v[fired] = 0.0
        vm[t] = v
        spikes[t, fired] = 1.0
    return vm.T, spikes.T
