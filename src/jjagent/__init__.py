"""
jj-agent: a JJ-first coding agent.

Analyzes a Jujutsu workspace, asks a language model for an execution
plan, runs it step by step and reviews the outcome.
"""

__version__ = "0.1.0"
