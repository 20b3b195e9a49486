"""
boondh_core.errors
------------------
Exception types shared across the package.

Most of Boondh never raises: the calculators clamp their inputs and the
rainfall / location steps fall back to safe defaults. Exceptions only travel
between a data source and the code that asked it for data, so that the caller
can switch to its fallback path.
"""

from __future__ import annotations


class BoondhError(Exception):
    """Base class for all Boondh errors."""


class DataSourceUnavailable(BoondhError):
    """
    The live weather source could not deliver usable data.

    Raised for network errors, timeouts, HTTP errors and malformed responses.
    The rainfall estimator catches it and uses the seasonal fallback instead.
    """
