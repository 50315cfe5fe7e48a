"""
Platform label normalization.

Responsibilities:
- Rewrite platform labels for Chinese mobile app traffic.
- Map display labels onto provider ids known to the outbound catalog.
"""
