"""
regen_ratio.forecast: Trend extrapolation over a project's snapshot history.

Modules:
  engine - Two-point vector extrapolation with a bounded trend ray.
"""
