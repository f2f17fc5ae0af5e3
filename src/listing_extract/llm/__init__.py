"""Model call boundary: vision client, prompt dialects and retry policy."""
