"""
Outbound link layer.

Responsibilities:
- Declare every provider the engine may link to, with its URL templates.
- Gate every outbound URL through the domain allow-list.
- Resolve a candidate into a primary link plus ordered fallbacks.
- Encode resolved links for the /outbound redirect page and decode them back.
"""
