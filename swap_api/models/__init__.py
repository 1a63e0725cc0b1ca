"""Domain and wire models for the swap API.

Import from the submodules directly: ``types`` (shared field types),
``swap`` (request side), ``quote`` (routing engine output) and
``responses`` (wire format).
"""
