"""
regen_ratio.reporting: Terminal formatting and flat-file export.

This package reads models already held by the store and renders them for CLI
display or flat-file export. It does NOT mutate anything.

Modules:
  history    - Flat per-snapshot rows (temporal evolution chart data).
  formatters - ASCII terminal formatters for Typer CLI commands.
  export     - CSV/JSON flat-file export helpers.
"""
