"""High level code for driving a pipeline script from the command line.
"""
