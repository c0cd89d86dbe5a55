"""
Find sequencing data for studies, samples, libraries, lanes and species
across the pathogen tracking databases.
"""

__version__ = "0.1.0"
