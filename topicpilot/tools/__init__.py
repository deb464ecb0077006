"""
Tool contracts, registry and dispatch.
"""
