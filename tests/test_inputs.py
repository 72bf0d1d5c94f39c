"""Tests for HC data loading and synthetic inputs."""

import numpy as np
import pytest

from olfsysm.config import HC_BAD_GLOM_INDEX, default_params
from olfsysm.inputs import (N_HC_COLS, N_HC_GLOMS, load_cxn_distrib, load_hc_data,
                            synthetic_hc_data)


def _write_hc_file(path, n_odors=3, bad_value=999.0, spont_value=5.0):
    lines = ["header line one", "odor,name," + ",".join(f"g{i}" for i in range(N_HC_COLS))]
    for o in range(n_odors):
        vals = [float(10 * o + g) for g in range(N_HC_COLS)]
        vals[HC_BAD_GLOM_INDEX] = bad_value
        lines.append(f"{o},odor{o}," + ",".join(str(v) for v in vals))
    spont = [spont_value] * N_HC_COLS
    spont[HC_BAD_GLOM_INDEX] = bad_value
    lines.append("spont,spontaneous," + ",".join(str(v) for v in spont))
    path.write_text("\n".join(lines) + "\n")
    return path


class TestLoadHCData:
    def test_shapes_and_bad_column(self, tmp_path):
        p = load_hc_data(default_params(), _write_hc_file(tmp_path / "hc.csv"))
        assert p.orn.data.spont.shape == (N_HC_GLOMS, 1)
        assert p.orn.data.delta.shape == (N_HC_GLOMS, 3)
        assert 999.0 not in p.orn.data.delta
        assert 999.0 not in p.orn.data.spont

    def test_column_mapping(self, tmp_path):
        """Columns after the bad one shift down by one."""
        p = load_hc_data(default_params(), _write_hc_file(tmp_path / "hc.csv"))
        delta = p.orn.data.delta
        assert delta[0, 1] == 10.0
        assert delta[HC_BAD_GLOM_INDEX - 1, 2] == 20.0 + HC_BAD_GLOM_INDEX - 1
        assert delta[HC_BAD_GLOM_INDEX, 2] == 20.0 + HC_BAD_GLOM_INDEX + 1
        assert np.all(p.orn.data.spont == 5.0)

    def test_non_numeric_field(self, tmp_path):
        path = _write_hc_file(tmp_path / "hc.csv")
        text = path.read_text().replace(",21.0,", ",abc,", 1)
        path.write_text(text)
        p = default_params()
        with pytest.raises(ValueError):
            load_hc_data(p, path)
        assert p.orn.data.delta is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_hc_data(default_params(), tmp_path / "nope.csv")


class TestLoadCxnDistrib:
    def test_full_row_drops_bad_glom(self, tmp_path):
        path = tmp_path / "w.csv"
        path.write_text(",".join(str(float(i)) for i in range(N_HC_COLS)) + "\n")
        p = load_cxn_distrib(default_params(), path)
        assert p.kc.cxn_distrib.shape == (1, N_HC_GLOMS)
        assert float(HC_BAD_GLOM_INDEX) not in p.kc.cxn_distrib

    def test_wrong_length(self, tmp_path):
        path = tmp_path / "w.csv"
        path.write_text("1,2,3\n")
        with pytest.raises(ValueError):
            load_cxn_distrib(default_params(), path)

    def test_default_weights_match_usable_gloms(self):
        w = default_params().kc.cxn_distrib
        assert w.shape == (1, N_HC_GLOMS)
        assert w.sum() > 0


class TestSyntheticData:
    def test_shapes_and_nonnegative_rates(self):
        spont, delta = synthetic_hc_data(np.random.default_rng(0), 9)
        assert spont.shape == (N_HC_GLOMS, 1)
        assert delta.shape == (N_HC_GLOMS, 9)
        assert np.all(spont + delta >= 0.0)
