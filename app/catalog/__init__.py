"""
Catalog store backends, query engine and snapshot artifact.
"""
