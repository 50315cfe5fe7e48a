"""
Recommendation candidate resolution engine.

Responsibilities:
- Deduplicate AI-generated candidates against the batch, user history and
  titles already shown.
- Top up batches with template candidates so each category keeps its
  required type diversity.
- Rewrite platform labels for the client/region the user is on.
- Build outbound links that only ever point at allow-listed providers.
- Derive a stable preference hash used to key cached batches.
"""
