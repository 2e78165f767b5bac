"""
Data source adapters.

Tapcard does not own any storage: profiles and templates live behind the
remote profile API. Services depend on the adapter here rather than issuing
HTTP calls themselves.
"""
