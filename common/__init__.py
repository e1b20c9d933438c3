"""
Shared plumbing: value types, YAML configuration, logging setup.
"""
