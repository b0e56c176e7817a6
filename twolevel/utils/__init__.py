# Utils Package
from .helpers import (
    load_config, save_config, save_results, setup_logging,
    format_number, create_predictor_from_config
)

__all__ = [
    'load_config',
    'save_config',
    'save_results',
    'setup_logging',
    'format_number',
    'create_predictor_from_config',
]
