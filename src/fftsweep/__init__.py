"""
fftsweep - FFT Parametrisation Sweeps for Acoustic-Index Ordination
===================================================================

Version: 0.1.0
"""

__version__ = "0.1.0"

from fftsweep.core.domains import TERRESTRIAL, UNDERWATER, Domain, get_domain

__all__ = [
    "__version__",
    "Domain",
    "UNDERWATER",
    "TERRESTRIAL",
    "get_domain",
]
