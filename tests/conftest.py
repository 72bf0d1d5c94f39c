"""Shared test fixtures: a small seeded model on synthetic HC-shaped inputs."""

import numpy as np
import pytest

from olfsysm.config import default_params
from olfsysm.inputs import synthetic_hc_data
from olfsysm.simulate import run_orn_ln_sims, run_pn_sims
from olfsysm.state import RunState

N_ODORS = 6
N_KCS = 200


def make_params(n_odors=N_ODORS, n_kcs=N_KCS, data_seed=7, seed=1234):
    p = default_params()
    p.seed = seed
    p.n_workers = 2
    p.kc.N = n_kcs
    rng = np.random.default_rng(data_seed)
    p.orn.data.spont, p.orn.data.delta = synthetic_hc_data(rng, n_odors)
    return p


@pytest.fixture
def params():
    """Default model on 6 synthetic odors and 200 KCs."""
    return make_params()


@pytest.fixture
def run_state(params):
    return RunState.from_params(params)


@pytest.fixture
def upstream(params, run_state):
    """Params and run state with ORN, LN and PN phases already simulated."""
    run_orn_ln_sims(params, run_state)
    run_pn_sims(params, run_state)
    return params, run_state
