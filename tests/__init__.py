"""
Tile pyramid test suite

Structure:
- unit/: conversions, quadkeys, coverage, config, logging, value types
- integration/: the command-line inspector end to end
"""
