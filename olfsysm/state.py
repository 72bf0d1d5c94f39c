# state.py
"""
Per-run storage, sized once from a ModelParams snapshot.

Shapes (G gloms, O odors, N KCs, T = steps_all):
- orn.sims, pn.sims: O arrays of G x T
- ln.inhA_sims, ln.inhB_sims: O arrays of length T
- kc.wPNKC: N x G, kc.wAPLKC: N x 1, kc.wKCAPL: 1 x N, kc.thr: N x 1
- kc.responses, kc.spike_counts: N x O

Pipeline stages write into these arrays in place; nothing is ever resized.

Randomness: seed_seq is the root of every random draw in the run. rng (one
spawned child) drives connectivity; PN noise gets fresh per-odor children at
each PN phase, so worker scheduling never changes the numbers.
"""
from dataclasses import dataclass, field
from typing import List

import numpy as np

from . import timegrid
from .errors import validate_params
from .log import Logger


@dataclass
class ORNVars:
    sims: List[np.ndarray]


@dataclass
class LNVars:
    inhA_sims: List[np.ndarray]
    inhB_sims: List[np.ndarray]


@dataclass
class PNVars:
    sims: List[np.ndarray]


@dataclass
class KCVars:
    wPNKC: np.ndarray
    wAPLKC: np.ndarray
    wKCAPL: np.ndarray
    thr: np.ndarray
    responses: np.ndarray
    spike_counts: np.ndarray
    tuning_iters: int = 0
    tuning_sparsity: float = float("nan")


@dataclass
class RunState:
    orn: ORNVars
    ln: LNVars
    pn: PNVars
    kc: KCVars
    seed_seq: np.random.SeedSequence
    rng: np.random.Generator
    log: Logger = field(default_factory=Logger)

    @classmethod
    def from_params(cls, p):
        validate_params(p)
        n_gloms, n_odors = p.orn.data.delta.shape
        n_kc = p.kc.N
        T = timegrid.steps_all(p.time)

        seed_seq = np.random.SeedSequence(p.seed)
        rng = np.random.default_rng(seed_seq.spawn(1)[0])
        return cls(
            orn=ORNVars(sims=[np.zeros((n_gloms, T)) for _ in range(n_odors)]),
            ln=LNVars(inhA_sims=[np.zeros(T) for _ in range(n_odors)],
                      inhB_sims=[np.zeros(T) for _ in range(n_odors)]),
            pn=PNVars(sims=[np.zeros((n_gloms, T)) for _ in range(n_odors)]),
            kc=KCVars(
                wPNKC=np.zeros((n_kc, n_gloms)),
                wAPLKC=np.zeros((n_kc, 1)),
                wKCAPL=np.zeros((1, n_kc)),
                thr=np.zeros((n_kc, 1)),
                responses=np.zeros((n_kc, n_odors)),
                spike_counts=np.zeros((n_kc, n_odors)),
            ),
            seed_seq=seed_seq,
            rng=rng,
        )

    @property
    def n_odors(self):
        return len(self.orn.sims)

    @property
    def n_gloms(self):
        return self.kc.wPNKC.shape[1]

    @property
    def n_kcs(self):
        return self.kc.wPNKC.shape[0]

    def odor_rngs(self, n):
        return [np.random.default_rng(s) for s in self.seed_seq.spawn(n)]
