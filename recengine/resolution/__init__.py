"""
Resolution pipeline.

Responsibilities:
- Run raw candidates through dedupe, top-up, platform normalization and
  link resolution.
- Derive the preference hash that keys cached batches.
- Cache resolved batches in-process with a TTL.
"""
