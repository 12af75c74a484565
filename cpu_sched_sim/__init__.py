"""
Discrete-event CPU scheduling simulator.
"""
