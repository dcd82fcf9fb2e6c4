"""
Metering package - usage-based billing calculations.

Prices metered usage under per-unit, graduated, volume, package and flat-fee
models, aggregates raw usage events per meter, builds per-period usage
summaries and derives subscription billing periods.

Payment providers, database repositories and HTTP bindings consume these
results; none of them live here. Usage storage is abstracted behind
UsageStorageInterface.
"""
