from .loader import load_config
from .models import (
    MergeConfig,
    MergeToolConfig,
    OutputConfig,
    VariantsConfig,
    VehicleConfig,
)

__all__ = [
    "MergeConfig",
    "MergeToolConfig",
    "OutputConfig",
    "VariantsConfig",
    "VehicleConfig",
    "load_config",
]
