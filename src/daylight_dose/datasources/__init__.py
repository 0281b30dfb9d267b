"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants
    ├── {feature}.py      # Blocking fetch + parse functions
    └── provider.py       # Async adapter matching ``uv.cache.FetchDaily``

Adding a new UV source
----------------------
1. Write a blocking fetch function that returns a ``DailyUVRecord``::

       from daylight_dose.services.http import session

       def fetch_daily_uv(lat, lon, day) -> DailyUVRecord:
           resp = session.get(API_URL, params={...})
           resp.raise_for_status()
           return parse(resp.json())

2. Wrap it in a provider whose ``fetch_daily`` coroutine raises
   ``FetchFailedError`` for every transport or payload problem.

3. Pass ``provider.fetch_daily`` to ``UVTimeSeriesCache``.

4. Add tests in ``tests/test_{name}.py``.
"""
