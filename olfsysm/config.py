# config.py
"""
Model parameters and defaults for the ORN -> LN -> PN -> KC olfactory model.

Layer constants follow the Kennedy rate model of the antennal lobe and the
mushroom-body KC/APL extension:
- ORN: single time constant, input is Hallem-Carlson spontaneous rates + deltas.
- LN: two GABA traces (A fast, B slow) driven by a thresholded LN potential.
- PN: tanh-compressed ORN drive, divisively inhibited by 0.25*A + 0.75*B.
- KC: leaky integrators with hard reset; one APL unit for global inhibition.

ModelParams is a snapshot: a RunState is sized from it once and it is treated
as read-only while the pipeline runs.
"""
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

# Hallem-Carlson glomerulus ids in file column order (2 id columns first).
# Column 7 is the bad glomerulus and is dropped on load.
HC_GLOMNUMS = (6, 16, 45, 11, 7, 19, 4, 123456, 38, 5, 44, 20, 28, 32, 21,
               14, 23, 39, 33, 22, 47, 15, 27, 48)
HC_BAD_GLOM_INDEX = 7
HC_N_ID_COLS = 2

# Observed PN->KC claw frequencies per HC glomerulus, same column order.
HC_GLOM_CXN_DISTRIB = (2.0, 24.0, 4.0, 30.0, 33.0, 8.0, 0.0,
                       0.0,  # bad glom
                       29.0, 6.0, 2.0, 4.0, 21.0, 18.0, 4.0,
                       12.0, 21.0, 10.0, 27.0, 4.0, 26.0, 7.0,
                       26.0, 24.0)


def drop_bad_glom(values, bad_index=HC_BAD_GLOM_INDEX):
    v = np.asarray(values, dtype=float)
    return np.delete(v, bad_index, axis=-1)


@dataclass
class StimParams:
    start: float = 0.0
    end: float = 0.5


@dataclass
class TimeParams:
    # ORN/LN/PN start at pre_start to settle; KCs only integrate from start.
    pre_start: float = -2.0
    start: float = -0.5
    end: float = 0.75
    stim: StimParams = field(default_factory=StimParams)
    dt: float = 0.5e-3


@dataclass
class ORNData:
    spont: Optional[np.ndarray] = None  # G x 1
    delta: Optional[np.ndarray] = None  # G x O


@dataclass
class ORNParams:
    taum: float = 0.01
    # Gloms in the physical system; scales the mean ORN rate seen by LNs.
    n_physical_gloms: int = 51
    # Exponential smoothing window of the ORN target, in seconds. Taken over
    # unchanged from the Kennedy source, which does not explain it.
    smoothing_window: float = 0.02
    data: ORNData = field(default_factory=ORNData)


@dataclass
class LNParams:
    taum: float = 0.01
    tauGA: float = 0.1
    tauGB: float = 0.4
    thr: float = 1.0
    inhsc: float = 500.0
    inhadd: float = 200.0


@dataclass
class NoiseParams:
    mean: float = 0.0
    sd: float = 0.0


@dataclass
class PNParams:
    taum: float = 0.01
    offset: float = 2.9410
    tanhsc: float = 5.3395
    inhsc: float = 368.6631
    inhadd: float = 31.4088
    noise: NoiseParams = field(default_factory=NoiseParams)


@dataclass
class KCParams:
    N: int = 2000
    nclaws: int = 6

    # Connectivity: uniform over gloms, or weighted by cxn_distrib (1 x G).
    uniform_pns: bool = False
    cxn_distrib: Optional[np.ndarray] = field(
        default_factory=lambda: drop_bad_glom(HC_GLOM_CXN_DISTRIB)[None, :])

    enable_apl: bool = True

    # "fixed" uses fixed_thr for every KC; "global" takes one percentile cut
    # over all (KC, odor) peaks; "homeostatic" cuts per KC.
    thr_mode: str = "global"
    fixed_thr: float = 0.0

    # Sparsity tuning
    sp_target: float = 0.1
    sp_acc: float = 0.1         # accepted band is sp_target * (1 +/- sp_acc)
    sp_lr_coeff: float = 10.0   # step size is sp_lr_coeff / sqrt(iteration)
    max_iters: int = 40
    # Thresholds alone aim at sp_factor_pre_apl * sp_target; the APL brings
    # the population down to sp_target.
    sp_factor_pre_apl: float = 2.0
    # 0-based odor ids used for tuning; empty means all odors.
    tune_from: List[int] = field(default_factory=list)

    taum: float = 0.01
    apl_taum: float = 0.05
    tau_apl2kc: float = 0.01


@dataclass
class ModelParams:
    time: TimeParams = field(default_factory=TimeParams)
    orn: ORNParams = field(default_factory=ORNParams)
    ln: LNParams = field(default_factory=LNParams)
    pn: PNParams = field(default_factory=PNParams)
    kc: KCParams = field(default_factory=KCParams)

    seed: Optional[int] = None       # None draws fresh OS entropy
    n_workers: Optional[int] = None  # None uses os.cpu_count()


def default_params() -> ModelParams:
    return ModelParams()
