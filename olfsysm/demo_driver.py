# demo_driver.py
"""
Minimal driver:
1) Build default params; load HC data from --data, or draw synthetic inputs.
2) Run ORN/LN, PN, then KC sims (connectivity + sparseness tuning included).
3) Print concise summaries: tuning outcome, sparsity, response breadth.

    python -m olfsysm.demo_driver --kcs 500 --odors 20 --seed 1
"""
import argparse

import numpy as np

from .analyze import summarize
from .config import default_params
from .inputs import load_cxn_distrib, load_hc_data, synthetic_hc_data
from .simulate import run_all
from .state import RunState


def build_params(args):
    p = default_params()
    p.seed = args.seed
    p.kc.N = args.kcs
    p.kc.enable_apl = not args.no_apl
    p.kc.thr_mode = args.thr_mode
    if args.workers:
        p.n_workers = args.workers
    if args.data:
        load_hc_data(p, args.data)
    else:
        rng = np.random.default_rng(args.seed)
        p.orn.data.spont, p.orn.data.delta = synthetic_hc_data(rng, args.odors)
    if args.cxn:
        load_cxn_distrib(p, args.cxn)
    return p


def main(argv=None):
    ap = argparse.ArgumentParser(description="Run the ORN->LN->PN->KC olfactory model.")
    ap.add_argument("--data", help="HC data file (default: synthetic inputs)")
    ap.add_argument("--cxn", help="PN->KC connection weight file")
    ap.add_argument("--odors", type=int, default=20, help="synthetic odor count")
    ap.add_argument("--kcs", type=int, default=2000)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--thr-mode", default="global", choices=["fixed", "global", "homeostatic"])
    ap.add_argument("--no-apl", action="store_true")
    ap.add_argument("--workers", type=int, default=None)
    ap.add_argument("--log", help="append run progress to this file")
    ap.add_argument("--progress", action="store_true")
    args = ap.parse_args(argv)

    p = build_params(args)
    rv = RunState.from_params(p)
    if args.log:
        rv.log.redirect(args.log)
    run_all(p, rv, progress=args.progress)
    rv.log.disable()

    out = summarize(rv.kc.responses, rv.kc.spike_counts)
    print("KCs x odors:", rv.kc.responses.shape)
    print("Tuning iterations:", rv.kc.tuning_iters)
    print("Tuning sparsity  :", round(rv.kc.tuning_sparsity, 4))
    for k, v in out.items():
        print(f"{k:28s}: {v}")
    return out


if __name__ == "__main__":
    main()
