"""
Utility functions shared by the provider, the ABI codec and the engine.
"""
