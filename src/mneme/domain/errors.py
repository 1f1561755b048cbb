"""Domain exceptions."""


class InvalidQualityError(ValueError):
    """Raised when a submitted quality cannot be mapped to a rating."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(f"Invalid quality rating: {quality!r}")
