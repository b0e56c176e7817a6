import pytest

from twolevel.predictors.two_level import create_predictor


@pytest.fixture
def gag():
    return create_predictor('GAg', history_width=2, counter_width=2)
