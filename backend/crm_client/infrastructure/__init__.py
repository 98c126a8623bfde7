"""Infrastructure Layer — HTTP transport, mock transport, storage, logging.

Invariants:
    - All outbound calls pass through ApiClient (retry/timeout/error mapping)
    - Infrastructure depends on core/, never the reverse
"""
