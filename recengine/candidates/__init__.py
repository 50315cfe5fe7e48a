"""
Candidate handling layer.

Responsibilities:
- Validate raw candidate, history and preference records into typed models.
- Normalize titles and queries into comparable text keys.
- Deduplicate batches against themselves, user history and shown titles.
- Synthesize template candidates so required kinds are always covered.
"""
