"""GitHub pull-request comment integration.

Split into:
  - types.py      : connection settings + the comment record
  - api.py        : all HTTP calls to the GitHub REST API
  - local_store.py: the same interface over a JSON file (local runs, tests)
  - sticky.py     : pure sticky-comment logic on top of either backend
"""
