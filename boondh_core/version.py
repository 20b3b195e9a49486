"""
boondh_core.version
-------------------
Keeps track of the Boondh package version.

Homeowners will never look here, but it keeps the dashboard, the PDF report
and the tests consistent when someone installs or upgrades the package.
"""

# Semantic Versioning: MAJOR.MINOR.PATCH
#   - MAJOR: formula changes (breaks stored estimates)
#   - MINOR: new features
#   - PATCH: small fixes
__version__ = "1.0.0"
