"""Stages of a duplicate scan: walk and hash, then directory and file grouping."""
