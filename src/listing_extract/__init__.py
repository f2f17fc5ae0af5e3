"""Resilient table extraction from vision-model output for property listings.

Subpackages:
  extraction -- strategy chain, extractors, normalization, result schema
  llm        -- model call boundary, prompt dialects, retry policy
"""
