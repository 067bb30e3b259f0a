import numpy as np
import pytest
from factories import samples
from cafeplatform.contracts.core import CoverClass
from cafeplatform.contracts.errors import EmptyCorpusError
from cafeplatform.contracts.model import DegenerateModel, TrainedModel, VARIANCE_FLOOR
from cafeplatform.services.training_service import TrainingService

def test_train_stats_and_priors():
    target = [0.7, 0.8, 0.9]
    other = [0.1, 0.2, 0.3, 0.4, 0.5]
    m = TrainingService().train(samples(target, other))
    assert isinstance(m, TrainedModel)
    assert m.target.mean == pytest.approx(0.8)
    assert m.target.variance == pytest.approx(np.var(target, ddof=1))
    assert m.other.variance == pytest.approx(np.var(other, ddof=1))
    assert m.prior_target == pytest.approx(3 / 8)
    assert m.prior_target + m.prior_other == pytest.approx(1.0)

def test_train_is_idempotent():
    data = samples([0.61, 0.72, 0.83, 0.55], [0.12, 0.33, 0.29])
    svc = TrainingService()
    assert svc.train(data) == svc.train(data)

def test_single_sample_and_zero_spread_use_floor():
    m = TrainingService().train(samples([0.8], [0.25, 0.25, 0.25]))
    assert m.target.variance == VARIANCE_FLOOR
    assert m.other.variance == VARIANCE_FLOOR

def test_empty_corpus_fails():
    with pytest.raises(EmptyCorpusError):
        TrainingService().train([])

@pytest.mark.parametrize("target,other,present", [
    ([0.5, 0.6], [], CoverClass.TARGET),
    ([], [0.1, 0.2, 0.3], CoverClass.OTHER),
])
def test_single_label_gives_degenerate(target, other, present):
    m = TrainingService().train(samples(target, other))
    assert isinstance(m, DegenerateModel)
    assert m.present is present
    expected = 1.0 if present is CoverClass.TARGET else 0.0
    assert {m.predict(x) for x in (-10.0, 0.0, 0.55, 99.0)} == {expected}

def test_build_dataset_split():
    svc = TrainingService()
    ds = svc.build_dataset(samples([1.0, 2.0], [3.0]))
    t, o = svc.split(ds)
    assert t.tolist() == [1.0, 2.0] and o.tolist() == [3.0]
    assert (ds.n_target, ds.n_other) == (2, 1)
