"""
Inventory forecasting: per-product stockout forecasts and fleet-wide scans.

Modules
-------
calculator : ForecastCalculator + pure policy functions (stockout days,
             trend, risk bucket, reorder maths) — one product at a time.
aggregator : ForecastAggregator — scans low-stock candidates, sorts by risk,
             and summarizes inventory health.
"""
