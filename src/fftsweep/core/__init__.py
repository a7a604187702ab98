"""Core Module

This package contains the algorithmic core of fftsweep: loading acoustic
index tables, enumerating the FFT parameter grid, NMDS ordination and the
multivariate separation descriptors computed from it.

Submodules:
    - analysis: loader, grid, selection, ordination, descriptors, pipeline
    - config: TOML configuration
    - domains: underwater / terrestrial habitat conventions
    - exceptions: error taxonomy
    - logger: logging configuration
    - results: result accumulation and persistence
    - visualize: NMDS scatter plots and the plot naming convention

Note: matplotlib is imported lazily by the visualize module.
Import from specific submodules as needed:
    from fftsweep.core.analysis.loader import load_observations
    from fftsweep.core.config import load_config
"""
