"""HTTP surface for capture requests, probes and record browsing."""
