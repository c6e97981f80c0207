"""MediFlow - clinical record derivation toolkit.

Pure derivations over hospital records (patients, visits, orders,
appointments) plus dataset loading, configuration and a command line
interface.
"""

__version__ = "0.1.0"
