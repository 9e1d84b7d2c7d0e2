"""
regen_ratio: Regenerative Ratio tracker.

Scores a system on two axes (structural potential Re, realized outcomes Rx),
keeps named projects of timestamped snapshots, and extrapolates a trend point
from the snapshot history.

Packages:
  models     - MetricSet, Indicator, Snapshot, Project, Forecast, FormState.
  scoring    - Re/Rx calculator and quadrant classifier.
  forecast   - Two-point trend extrapolation.
  store      - SnapshotStore plus durable key-value backends.
  db         - SQLite connection + key-value schema used by the SQLite backend.
  reporting  - Terminal formatters and flat-file export.
"""

__version__ = "0.1.0"
