# Predictors Package
from .base import BasePredictor, BranchInstruction, BranchResult, PredictorStats
from .two_level import (
    TwoLevelPredictor,
    SchemeConfig,
    Scope,
    SCHEMES,
    get_scheme,
    create_predictor,
    GAG_DEFAULT,
    GAP_DEFAULT,
    GAS_DEFAULT,
    PAP_DEFAULT,
    SAS_DEFAULT,
)

__all__ = [
    'BasePredictor',
    'BranchInstruction',
    'BranchResult',
    'PredictorStats',

    'TwoLevelPredictor',
    'SchemeConfig',
    'Scope',
    'SCHEMES',
    'get_scheme',
    'create_predictor',

    'GAG_DEFAULT',
    'GAP_DEFAULT',
    'GAS_DEFAULT',
    'PAP_DEFAULT',
    'SAS_DEFAULT',
]
