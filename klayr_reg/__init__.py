"""
klayr-reg: register a sidechain on its mainchain and the mainchain back on the sidechain
"""

__version__ = "1.0.0"
