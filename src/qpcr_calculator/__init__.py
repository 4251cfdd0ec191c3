"""
qPCR Calculator - Reaction Setup Utility

A quantitative PCR (qPCR) reaction setup utility that calculates reagent
volumes for per-target working solutions, a combined master mix, and cDNA.
"""

__version__ = "0.1.0"
__author__ = "Genome Innovation Hub"
