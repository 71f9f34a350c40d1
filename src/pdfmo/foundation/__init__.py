"""
Foundation layer: errors, registries, problem and solver contracts.
"""
