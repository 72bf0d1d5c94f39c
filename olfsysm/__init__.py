"""
olfsysm: rate/spiking model of the insect olfactory pathway
(ORN -> LN -> PN -> KC) with KC sparseness tuning.

Typical run:

    p = default_params()
    load_hc_data(p, "hc_data.csv")
    rv = RunState.from_params(p)
    run_orn_ln_sims(p, rv)
    run_pn_sims(p, rv)
    run_kc_sims(p, rv)          # builds wPNKC and tunes, then simulates KCs
    rv.kc.responses             # KC x odor, 1.0 where the KC spiked
"""
from .access import get_param, get_var, set_log_destf, set_param, set_var
from .config import ModelParams, default_params
from .connectivity import build_wpnkc
from .errors import (ConfigurationError, LoggerError, OlfsysmError, ShapeMismatchError,
                     UnknownParameterError, UnknownRunVariableError)
from .inputs import load_cxn_distrib, load_hc_data
from .simulate import run_all, run_kc_sims, run_orn_ln_sims, run_pn_sims
from .state import RunState
from .tuning import fit_sparseness

__all__ = [
    "ModelParams", "RunState", "default_params",
    "get_param", "set_param", "get_var", "set_var", "set_log_destf",
    "load_hc_data", "load_cxn_distrib",
    "build_wpnkc", "fit_sparseness",
    "run_orn_ln_sims", "run_pn_sims", "run_kc_sims", "run_all",
    "OlfsysmError", "ConfigurationError", "UnknownParameterError",
    "UnknownRunVariableError", "ShapeMismatchError", "LoggerError",
]
