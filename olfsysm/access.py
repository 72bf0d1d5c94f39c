# access.py
"""
Named-field get/set by dotted key, for callers that address the model by
string (scripts, notebooks, host-language bindings).

Both tables are closed: every key is listed once with its converter, and an
unknown key raises UnknownParameterError / UnknownRunVariableError naming it.
The numeric core never goes through here; it uses the dataclasses directly.

Run-state arrays keep the shape they were allocated with; a set copies the
new values in place and rejects any other shape.
"""
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from .errors import (THR_MODES, ShapeMismatchError, UnknownParameterError,
                     UnknownRunVariableError)


def _as_bool(v):
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "1", "yes"):
            return True
        if s in ("false", "0", "no"):
            return False
        raise ValueError(f"not a boolean: {v!r}")
    if isinstance(v, (bool, np.bool_, int, np.integer)) and v in (0, 1):
        return bool(v)
    raise ValueError(f"not a boolean: {v!r}")


def _as_int(v):
    if isinstance(v, (float, np.floating)) and not float(v).is_integer():
        raise ValueError(f"not an integer: {v!r}")
    return int(v)


def _optional_int(v):
    return None if v is None else _as_int(v)


def _column(v):
    return None if v is None else np.asarray(v, dtype=float).reshape(-1, 1)


def _row(v):
    return None if v is None else np.asarray(v, dtype=float).reshape(1, -1)


def _matrix(v):
    if v is None:
        return None
    m = np.asarray(v, dtype=float)
    return m.reshape(-1, 1) if m.ndim == 1 else m


def _odor_ids(v):
    return [_as_int(i) for i in np.atleast_1d(v)] if v is not None else []


def _thr_mode(v):
    if v not in THR_MODES:
        raise ValueError(f"kc.thr_mode must be one of {THR_MODES}, got {v!r}")
    return str(v)


@dataclass(frozen=True)
class Field:
    path: Tuple[str, ...]
    convert: Callable


def _fields(table):
    return {key: Field(tuple(key.split(".")), conv) for key, conv in table.items()}


PARAM_FIELDS = _fields({
    "time.pre_start": float,
    "time.start": float,
    "time.end": float,
    "time.stim.start": float,
    "time.stim.end": float,
    "time.dt": float,
    "orn.taum": float,
    "orn.n_physical_gloms": _as_int,
    "orn.smoothing_window": float,
    "orn.data.spont": _column,
    "orn.data.delta": _matrix,
    "ln.taum": float,
    "ln.tauGA": float,
    "ln.tauGB": float,
    "ln.thr": float,
    "ln.inhsc": float,
    "ln.inhadd": float,
    "pn.taum": float,
    "pn.offset": float,
    "pn.tanhsc": float,
    "pn.inhsc": float,
    "pn.inhadd": float,
    "pn.noise.mean": float,
    "pn.noise.sd": float,
    "kc.N": _as_int,
    "kc.nclaws": _as_int,
    "kc.uniform_pns": _as_bool,
    "kc.cxn_distrib": _row,
    "kc.enable_apl": _as_bool,
    "kc.thr_mode": _thr_mode,
    "kc.fixed_thr": float,
    "kc.sp_target": float,
    "kc.sp_acc": float,
    "kc.sp_lr_coeff": float,
    "kc.max_iters": _as_int,
    "kc.sp_factor_pre_apl": float,
    "kc.tune_from": _odor_ids,
    "kc.taum": float,
    "kc.apl_taum": float,
    "kc.tau_apl2kc": float,
    "seed": _optional_int,
    "n_workers": _optional_int,
})


# kind: "array" (fixed shape), "arrays" (fixed-length list of fixed shapes),
# or a scalar converter.
VAR_FIELDS = {
    "orn.sims": (("orn", "sims"), "arrays"),
    "ln.inhA.sims": (("ln", "inhA_sims"), "arrays"),
    "ln.inhB.sims": (("ln", "inhB_sims"), "arrays"),
    "pn.sims": (("pn", "sims"), "arrays"),
    "kc.wPNKC": (("kc", "wPNKC"), "array"),
    "kc.wAPLKC": (("kc", "wAPLKC"), "array"),
    "kc.wKCAPL": (("kc", "wKCAPL"), "array"),
    "kc.thr": (("kc", "thr"), "array"),
    "kc.responses": (("kc", "responses"), "array"),
    "kc.spike_counts": (("kc", "spike_counts"), "array"),
    "kc.tuning_iters": (("kc", "tuning_iters"), _as_int),
    "kc.tuning_sparsity": (("kc", "tuning_sparsity"), float),
}


def _owner(obj, path):
    for attr in path[:-1]:
        obj = getattr(obj, attr)
    return obj, path[-1]


def get_param(p, name):
    f = PARAM_FIELDS.get(name)
    if f is None:
        raise UnknownParameterError(name)
    owner, attr = _owner(p, f.path)
    return getattr(owner, attr)


def set_param(p, name, value):
    f = PARAM_FIELDS.get(name)
    if f is None:
        raise UnknownParameterError(name)
    owner, attr = _owner(p, f.path)
    setattr(owner, attr, f.convert(value))
    return getattr(owner, attr)


def get_var(rv, name):
    entry = VAR_FIELDS.get(name)
    if entry is None:
        raise UnknownRunVariableError(name)
    owner, attr = _owner(rv, entry[0])
    return getattr(owner, attr)


def _copy_into(name, cur, value):
    new = np.asarray(value, dtype=float)
    if new.shape != cur.shape:
        raise ShapeMismatchError(f"{name}: expected shape {cur.shape}, got {new.shape}")
    cur[...] = new


def set_var(rv, name, value):
    entry = VAR_FIELDS.get(name)
    if entry is None:
        raise UnknownRunVariableError(name)
    path, kind = entry
    owner, attr = _owner(rv, path)
    cur = getattr(owner, attr)
    if kind == "array":
        _copy_into(name, cur, value)
    elif kind == "arrays":
        if len(value) != len(cur):
            raise ShapeMismatchError(f"{name}: expected {len(cur)} arrays, got {len(value)}")
        for i, (c, v) in enumerate(zip(cur, value)):
            _copy_into(f"{name}[{i}]", c, v)
    else:
        setattr(owner, attr, kind(value))
    return getattr(owner, attr)


def set_log_destf(rv, path):
    rv.log.redirect(path)
