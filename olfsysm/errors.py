"""
Exception classes and parameter validation for olfsysm.

Exception Hierarchy:
    OlfsysmError (base)
    ├── ConfigurationError        - invalid or inconsistent ModelParams
    ├── UnknownParameterError     - unknown dotted key on ModelParams
    ├── UnknownRunVariableError   - unknown dotted key on RunState
    ├── ShapeMismatchError        - run-state array assigned with a new shape
    └── LoggerError               - logger misuse (duplicating an active sink)

Input-file problems are deliberately NOT wrapped: a missing file surfaces as
OSError and a non-numeric field as ValueError, straight from numpy.
"""
from __future__ import annotations

import math

import numpy as np

THR_MODES = ("fixed", "global", "homeostatic")


class OlfsysmError(Exception):
    """Base exception for all olfsysm errors."""


class ConfigurationError(OlfsysmError):
    """Model parameters are out of range or incompatible with each other."""


class UnknownParameterError(OlfsysmError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"invalid model parameter: {name}")
        self.name = name


class UnknownRunVariableError(OlfsysmError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"invalid run variable: {name}")
        self.name = name


class ShapeMismatchError(OlfsysmError, ValueError):
    """Run-state arrays are sized once; assignments must keep the shape."""


class LoggerError(OlfsysmError):
    """Programmer error: a logger sink was duplicated."""


def _require(cond, msg):
    if not cond:
        raise ConfigurationError(msg)


def _float_array(value, name):
    try:
        return np.asarray(value, dtype=float)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} is not a numeric array: {e}") from e


def validate_params(p) -> None:
    """
    Check a ModelParams snapshot before a RunState is sized from it.
    Array inputs assigned as nested lists are converted to float arrays in place.
    """
    t = p.time
    _require(t.dt > 0.0, f"time.dt must be positive, got {t.dt}")
    _require(t.pre_start <= t.start < t.end,
             f"need pre_start <= start < end, got {t.pre_start}, {t.start}, {t.end}")
    _require(t.pre_start <= t.stim.start <= t.stim.end <= t.end,
             f"stimulus window [{t.stim.start}, {t.stim.end}] outside the simulated time")

    for name, tau in (("orn.taum", p.orn.taum), ("ln.taum", p.ln.taum),
                      ("ln.tauGA", p.ln.tauGA), ("ln.tauGB", p.ln.tauGB),
                      ("pn.taum", p.pn.taum), ("kc.taum", p.kc.taum),
                      ("kc.apl_taum", p.kc.apl_taum), ("kc.tau_apl2kc", p.kc.tau_apl2kc)):
        _require(tau > 0.0, f"{name} must be positive, got {tau}")

    data = p.orn.data
    _require(data.spont is not None and data.delta is not None,
             "no ORN input data; load it with load_hc_data or assign orn.data.spont/delta")
    data.spont = _float_array(data.spont, "orn.data.spont")
    data.delta = _float_array(data.delta, "orn.data.delta")
    _require(data.spont.ndim == 2 and data.spont.shape[1] == 1,
             f"orn.data.spont must be a column, got shape {data.spont.shape}")
    n_gloms = data.spont.shape[0]
    _require(data.delta.ndim == 2 and data.delta.shape[0] == n_gloms,
             f"orn.data.delta must be {n_gloms} x n_odors, got shape {data.delta.shape}")
    _require(n_gloms >= 1 and data.delta.shape[1] >= 1, "input data is empty")

    kc = p.kc
    _require(kc.N >= 1, f"kc.N must be >= 1, got {kc.N}")
    _require(kc.nclaws >= 1, f"kc.nclaws must be >= 1, got {kc.nclaws}")
    _require(kc.max_iters >= 1, f"kc.max_iters must be >= 1, got {kc.max_iters}")
    _require(0.0 < kc.sp_target < 1.0, f"kc.sp_target must lie in (0, 1), got {kc.sp_target}")
    _require(kc.sp_acc >= 0.0, f"kc.sp_acc must be non-negative, got {kc.sp_acc}")
    _require(kc.thr_mode in THR_MODES,
             f"kc.thr_mode must be one of {THR_MODES}, got {kc.thr_mode!r}")
    if not kc.uniform_pns:
        _require(kc.cxn_distrib is not None,
                 "kc.cxn_distrib is required for weighted connectivity")
        w = kc.cxn_distrib = _float_array(kc.cxn_distrib, "kc.cxn_distrib")
        _require(w.size == n_gloms,
                 f"kc.cxn_distrib needs {n_gloms} weights for weighted connectivity")
        _require(bool((w >= 0).all()) and w.sum() > 0 and math.isfinite(float(w.sum())),
                 "kc.cxn_distrib must be non-negative with a positive sum")

    n_odors = data.delta.shape[1]
    bad = [i for i in kc.tune_from if not 0 <= i < n_odors]
    _require(not bad, f"kc.tune_from has odor ids outside [0, {n_odors}): {bad}")
    _require(p.n_workers is None or p.n_workers >= 1,
             f"n_workers must be None or >= 1, got {p.n_workers}")
