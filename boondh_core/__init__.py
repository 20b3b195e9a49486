"""
boondh_core
===========
Core package for the Boondh rainwater harvesting estimator.

Who this is for
---------------
This package is written so that someone who knows rainwater harvesting (but
does not live in code every day) can follow the logic. Every module focuses on
a single, clear responsibility and keeps its units explicit:
- Monthly / annual rainfall in inches
- Daily precipitation in millimetres (mm)
- Rooftop areas in square feet (sq ft)
- Collected volumes in litres (L)

What this file does
-------------------
This file marks the folder as a Python package and defines what the package
exposes at import time. Keeping this minimal avoids importing pandas,
requests or osmnx until they are actually needed.

Example
-------
>>> import boondh_core as bk
>>> bk.__version__
'1.0.0'

"""

# Import only the light-weight version string here to avoid heavy imports.
from .version import __version__

__all__ = ["__version__"]
