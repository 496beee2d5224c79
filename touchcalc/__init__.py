"""
Path-addressed storage and user accounts for the TouchCalc backend.

:mod:`touchcalc.storage` provides a hierarchical key-value store with
interchangeable filesystem, Redis and SQL adapters. :mod:`touchcalc.accounts`
implements user registration, confirmation and authentication on top of it.
"""
