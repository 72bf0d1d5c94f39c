# inputs.py
"""
Model input: Hallem-Carlson ORN rates and PN->KC draw weights.

File layout (comma separated):
- 2 header lines, discarded
- one row per odor: 2 identifier columns, then 24 glomerulus columns holding
  odor-evoked rate changes (deltas)
- one last row of the same shape with the spontaneous rates

Column HC_BAD_GLOM_INDEX of the 24 is always dropped, leaving G = 23.
Parsing is left to numpy: a missing file raises OSError, a non-numeric field
raises ValueError, and either aborts the load with ModelParams untouched.

synthetic_hc_data() builds inputs of the same shape for demos and tests.
"""
import numpy as np

from .config import HC_BAD_GLOM_INDEX, HC_GLOMNUMS, HC_N_ID_COLS, drop_bad_glom

N_HC_COLS = len(HC_GLOMNUMS)
N_HC_GLOMS = N_HC_COLS - 1


def read_hc_table(fpath, n_cols=N_HC_COLS, bad_index=HC_BAD_GLOM_INDEX):
    """Return (spont G x 1, delta G x O) from an HC data file."""
    table = np.loadtxt(fpath, delimiter=",", skiprows=2, ndmin=2,
                       usecols=range(HC_N_ID_COLS, HC_N_ID_COLS + n_cols))
    if table.shape[0] < 2:
        raise ValueError(f"{fpath}: need at least one odor row and the spontaneous-rate row")
    table = drop_bad_glom(table, bad_index)
    spont = table[-1][:, None]
    delta = table[:-1].T.copy()
    return spont, delta


def load_hc_data(p, fpath):
    spont, delta = read_hc_table(fpath)
    p.orn.data.spont = spont
    p.orn.data.delta = delta
    return p


def load_cxn_distrib(p, fpath):
    """
    Read PN->KC draw weights: either one value per file column (the bad
    glomerulus is dropped) or one value per usable glomerulus.
    """
    w = np.loadtxt(fpath, delimiter=",", ndmin=1).ravel()
    if w.size == N_HC_COLS:
        w = drop_bad_glom(w)
    elif w.size != N_HC_GLOMS:
        raise ValueError(f"{fpath}: expected {N_HC_COLS} or {N_HC_GLOMS} weights, got {w.size}")
    p.kc.cxn_distrib = w[None, :]
    return p


def synthetic_hc_data(rng, n_odors, n_gloms=N_HC_GLOMS, p_active=0.25):
    """
    Random inputs with HC-like statistics: spontaneous rates of a few to
    ~30 Hz, small deltas on most gloms and strong excitation on a random
    subset. Rates never go negative.
    """
    spont = rng.uniform(2.0, 30.0, size=(n_gloms, 1))
    delta = rng.normal(0.0, 8.0, size=(n_gloms, n_odors))
    active = rng.random((n_gloms, n_odors)) < p_active
    delta += active * rng.uniform(40.0, 200.0, size=(n_gloms, n_odors))
    delta = np.maximum(delta, -spont)
    return spont, delta
