"""Records produced by walking a tree."""
