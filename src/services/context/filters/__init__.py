from .binary_file import BinaryFileFilter
from .configured_path import ConfiguredPathFilter, PathsConfig
from .relevance import RelevanceFilter
from .sensitive_data import SensitiveDataFilter
from .token_limit import TokenLimitFilter
from .vendor_path import VendorPathFilter

__all__ = [
    "BinaryFileFilter",
    "ConfiguredPathFilter",
    "PathsConfig",
    "RelevanceFilter",
    "SensitiveDataFilter",
    "TokenLimitFilter",
    "VendorPathFilter",
]
