"""
Prefect flows for the UV data pipeline.

Flows:
- fetch: Download today's and tomorrow's UV records into the local archive

Usage (local):
    python -m daylight_dose.flows.fetch

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'fetch-uv-data/default'
"""
