"""Run pipeline scripts of shell command stages composed in serial and parallel.
"""
__version__ = "0.1.0"
