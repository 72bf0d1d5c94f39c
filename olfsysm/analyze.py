# analyze.py
"""
Summary statistics over KC (KC x odor) response matrices.

- A KC "responds" to an odor when it fires at least one spike.
- Sparsity is the fraction of responding (KC, odor) pairs, overall or per odor.
- Response breadth is the number of odors each KC responds to.
"""
import numpy as np


def responses_from_counts(spike_counts):
    return (np.asarray(spike_counts) > 0.0).astype(float)


def sparsity(responses):
    r = np.asarray(responses)
    if r.size == 0:
        return float("nan")
    return float((r > 0.0).mean())


def odor_sparsity(responses):
    """Per-odor fraction of responding KCs (one value per column)."""
    return (np.asarray(responses) > 0.0).mean(axis=0)


def kc_response_breadth(responses):
    return (np.asarray(responses) > 0.0).sum(axis=1)


def summarize(responses, spike_counts):
    breadth = kc_response_breadth(responses)
    per_odor = odor_sparsity(responses)
    counts = np.asarray(spike_counts)
    fired = counts[counts > 0]
    return dict(
        sparsity=sparsity(responses),
        odor_sparsity_min=float(per_odor.min()),
        odor_sparsity_max=float(per_odor.max()),
        silent_kcs=int((breadth == 0).sum()),
        mean_breadth=float(breadth.mean()),
        mean_spikes_when_responding=float(fired.mean()) if fired.size else 0.0,
    )
