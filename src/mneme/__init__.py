"""mneme: spaced-repetition scheduling core."""

from mneme.consts import VERSION

__version__ = VERSION
