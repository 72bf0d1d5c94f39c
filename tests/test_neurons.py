"""Tests for the ORN, LN, PN and KC layer integrators."""

import numpy as np
import pytest

from olfsysm import timegrid
from olfsysm.config import default_params
from olfsysm.connectivity import build_wpnkc
from olfsysm.neurons import (LN_INH0, sim_kc_layer, sim_ln_layer, sim_orn_layer,
                             sim_pn_layer, smoothts_exp)


class TestSmoothing:
    def test_coefficient_below_one_used_directly(self):
        y = smoothts_exp(np.array([[0.0, 1.0, 1.0]]), 0.5)
        assert np.allclose(y, [[0.0, 0.5, 0.75]])

    def test_window_converted_to_coefficient(self):
        """Window 3 samples gives a = 2/(3+1) = 0.5."""
        y = smoothts_exp(np.array([[0.0, 1.0, 1.0]]), 3.0)
        assert np.allclose(y, [[0.0, 0.5, 0.75]])

    def test_constant_unchanged(self):
        x = np.full((4, 50), 7.0)
        assert np.allclose(smoothts_exp(x, 40.0), x)


class TestORN:
    def test_spont_before_stimulus(self, params):
        orn = sim_orn_layer(params, 0)
        s0 = timegrid.stim_start_step(params.time)
        assert orn.shape == (23, 5500)
        assert np.allclose(orn[:, :s0], params.orn.data.spont)

    def test_reaches_odor_rate_during_stimulus(self, params):
        orn = sim_orn_layer(params, 2)
        s1 = timegrid.stim_end_step(params.time)
        expected = params.orn.data.spont[:, 0] + params.orn.data.delta[:, 2]
        assert np.allclose(orn[:, s1 - 1], expected, rtol=1e-3, atol=1e-3)

    def test_decays_after_stimulus(self, params):
        orn = sim_orn_layer(params, 1)
        assert np.allclose(orn[:, -1], params.orn.data.spont[:, 0], rtol=1e-2, atol=1e-2)


class TestLN:
    def test_traces(self, params):
        inhA, inhB = sim_ln_layer(params, sim_orn_layer(params, 0))
        assert inhA.shape == inhB.shape == (5500,)
        assert inhA[0] == inhB[0] == LN_INH0
        assert np.all(np.isfinite(inhA)) and np.all(np.isfinite(inhB))
        assert np.all(inhA >= 0.0) and np.all(inhB >= 0.0)

    def test_stronger_input_more_inhibition(self, params):
        orn = sim_orn_layer(params, 0)
        weak, _ = sim_ln_layer(params, orn)
        strong, _ = sim_ln_layer(params, orn * 2.0)
        assert strong[-1] > weak[-1]

    def test_first_euler_steps(self):
        """Two gloms at 8 and 12 Hz, default LN constants, dt = 1 ms."""
        p = default_params()
        p.time.dt = 1e-3
        orn = np.array([[8.0] * 4, [12.0] * 4])
        inhA, inhB = sim_ln_layer(p, orn)

        drive = 10.0 ** 3 * 51 / 2 / 2
        kA, kB, kV = 1e-3 / 0.1, 1e-3 / 0.4, 1e-3 / 0.01
        a, b, v, r, g = [50.0], [50.0], 300.0, 1.0, 0.0
        for _ in range(3):
            dv = -v + drive * g
            a.append(a[-1] + (-a[-1] + r) * kA)
            b.append(b[-1] + (-b[-1] + r) * kB)
            g = 500.0 / (200.0 + a[-1])
            v = v + dv * kV
            r = max(v - 1.0, 0.0)

        assert a[1] == pytest.approx(49.51)
        assert b[1] == pytest.approx(49.8775)
        assert np.allclose(inhA, a, rtol=1e-12, atol=0.0)
        assert np.allclose(inhB, b, rtol=1e-12, atol=0.0)

    def test_below_threshold_gives_no_response(self):
        """Potential under ln.thr feeds nothing into the GABA traces."""
        p = default_params()
        p.time.dt = 1e-3
        p.ln.thr = 1e9
        inhA, _ = sim_ln_layer(p, np.zeros((2, 4)))
        # step 1 still sees the seed response of 1, after that only decay
        assert inhA[1] == pytest.approx(50.0 + (-50.0 + 1.0) * 0.01)
        assert inhA[2] == pytest.approx(inhA[1] * 0.99)
        assert inhA[3] == pytest.approx(inhA[2] * 0.99)


class TestPN:
    def _inputs(self, params):
        orn = sim_orn_layer(params, 0)
        inhA, inhB = sim_ln_layer(params, orn)
        return orn, inhA, inhB

    def test_nonnegative_and_starts_at_spont(self, params):
        params.pn.noise.sd = 50.0
        orn, inhA, inhB = self._inputs(params)
        pn = sim_pn_layer(params, orn, inhA, inhB, np.random.default_rng(0))
        assert pn.shape == (23, 5500)
        assert np.all(pn >= 0.0)
        assert np.array_equal(pn[:, 0], params.orn.data.spont[:, 0])

    def test_noise_uses_given_generator(self, params):
        params.pn.noise.sd = 1.0
        orn, inhA, inhB = self._inputs(params)
        a = sim_pn_layer(params, orn, inhA, inhB, np.random.default_rng(5))
        b = sim_pn_layer(params, orn, inhA, inhB, np.random.default_rng(5))
        c = sim_pn_layer(params, orn, inhA, inhB, np.random.default_rng(6))
        assert np.array_equal(a, b)
        assert not np.array_equal(a, c)

    def test_odor_raises_pn_rates(self, params):
        orn, inhA, inhB = self._inputs(params)
        pn = sim_pn_layer(params, orn, inhA, inhB, np.random.default_rng(0))
        t1, t2 = timegrid.spont_window(params.time)
        s0 = timegrid.stim_start_step(params.time)
        assert pn[:, s0:s0 + 200].sum() > pn[:, t1:t2].mean(axis=1).sum() * 200

    def test_first_euler_steps(self):
        """
        Two gloms, no noise, unit tanh gain. A = 50 and B = 100 blend to
        0.25*50 + 0.75*100 = 87.5, so the inhibition factor is 100/(12.5 + 87.5) = 1.
        """
        p = default_params()
        p.time.dt = 1e-3
        p.orn.data.spont = np.array([[1.0], [3.0]])
        p.pn.offset = 0.5
        p.pn.tanhsc = 200.0
        p.pn.inhsc = 100.0
        p.pn.inhadd = 12.5
        # deviation + offset is 2.0 for glom 0 and -99.5 for glom 1
        orn = np.array([[2.5] * 4, [-97.0] * 4])
        inhA, inhB = np.full(4, 50.0), np.full(4, 100.0)
        pn = sim_pn_layer(p, orn, inhA, inhB, np.random.default_rng(0))

        spont = np.array([1.0, 3.0])
        spont_drive = spont * 100.0 / 16.5
        k = 0.1
        # step 1 uses zero PN inhibition, so the tanh term vanishes
        x1 = spont + (-spont + spont_drive) * k
        x2 = x1 + (-x1 + spont_drive + 200.0 * np.tanh(np.array([2.0, -99.5]))) * k
        assert np.allclose(pn[:, 0], spont)
        assert np.allclose(pn[:, 1], x1, rtol=1e-12, atol=0.0)
        assert pn[0, 2] == pytest.approx(x2[0], rel=1e-12)
        # glom 1 is driven below zero and clipped
        assert x2[1] < 0.0
        assert pn[1, 2] == 0.0


class TestKC:
    @pytest.fixture
    def wired(self, upstream):
        p, rv = upstream
        build_wpnkc(p, rv)
        return p, rv.kc.wPNKC, rv.pn.sims[0]

    def test_unreachable_threshold_never_spikes(self, wired):
        p, w, pn_t = wired
        vm, spikes = sim_kc_layer(p, w, pn_t, 1e5, 0.0, 0.0)
        assert vm.shape == spikes.shape == (p.kc.N, 5500)
        assert spikes.sum() == 0
        s = timegrid.start_step(p.time)
        assert np.all(vm[:, :s + 1] == 0.0)
        assert np.all(vm[:, s + 1:] > 0.0)

    def test_reset_on_threshold_crossing(self, wired):
        p, w, pn_t = wired
        vm, _ = sim_kc_layer(p, w, pn_t, 1e5, 0.0, 0.0)
        thr = 0.5 * vm.max(axis=1, keepdims=True)
        vm, spikes = sim_kc_layer(p, w, pn_t, thr, 0.0, 0.0)
        s = timegrid.start_step(p.time)
        assert spikes.sum() > 0
        assert np.all(spikes[:, :s + 1] == 0.0)
        assert np.all(vm[spikes == 1.0] == 0.0)
        assert np.all(vm <= thr)

    def test_apl_feedback_reduces_spiking(self, wired):
        p, w, pn_t = wired
        vm, _ = sim_kc_layer(p, w, pn_t, 1e5, 0.0, 0.0)
        thr = 0.5 * vm.max(axis=1, keepdims=True)
        _, free = sim_kc_layer(p, w, pn_t, thr, 0.0, 0.0)
        _, inhibited = sim_kc_layer(p, w, pn_t, thr, 10.0, 10.0 / p.kc.N)
        assert inhibited.sum() < free.sum()

    def test_inputs_not_modified(self, wired):
        p, w, pn_t = wired
        thr = np.full((p.kc.N, 1), 7.0)
        w_before, pn_before = w.copy(), pn_t.copy()
        sim_kc_layer(p, w, pn_t, thr, 3.0, 0.1)
        assert np.all(thr == 7.0)
        assert np.array_equal(w, w_before) and np.array_equal(pn_t, pn_before)
