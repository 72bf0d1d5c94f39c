# timegrid.py
"""
Step arithmetic for the shared simulation time grid.

Every step index is relative to time.pre_start. All functions take the whole
TimeParams, so the stimulus window never needs to know who owns it.

Step counts truncate (b - a)/dt toward zero like an integer cast would; the
small guard keeps e.g. 2.75/0.0005 from landing on 5499.999... and losing a step.
"""
import math

import numpy as np

_GUARD = 1e-9


def _nsteps(span, dt):
    return int(math.floor(span / dt + _GUARD))


def start_step(time):
    return _nsteps(time.start - time.pre_start, time.dt)


def steps_all(time):
    """Total number of steps, pre_start to end."""
    return _nsteps(time.end - time.pre_start, time.dt)


def steps(time):
    """Number of "real" steps, start to end."""
    return _nsteps(time.end - time.start, time.dt)


def stim_start_step(time):
    return _nsteps(time.stim.start - time.pre_start, time.dt)


def stim_end_step(time):
    return _nsteps(time.stim.end - time.pre_start, time.dt)


def ones_row(time):
    return np.ones(steps_all(time))


def stim_row(time):
    """1.0 on [stim_start_step, stim_end_step), 0.0 elsewhere."""
    row = np.zeros(steps_all(time))
    row[stim_start_step(time):stim_end_step(time)] = 1.0
    return row


def spont_window(time):
    """Steps from halfway between start and stimulus onset, up to the onset."""
    s0 = start_step(time)
    lead = time.stim.start - time.start
    return (s0 + _nsteps(lead, 2.0 * time.dt),
            s0 + _nsteps(lead, time.dt))
