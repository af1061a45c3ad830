"""
Utilities for jj-agent: logging, jj command execution, workspace file
operations, manifest parsing and related-file discovery.
"""
