"""
CLI reporting helpers.

Modules
-------
formatters : ASCII tables for forecasts, fleet health, recommendations and
             customer profiles — plain strings for ``typer.echo()``.
export     : CSV / JSON file export of fleet scans.
"""
