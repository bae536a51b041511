class ConfigurationMissingError(ValueError):
    """A reference table has no entry for the requested year, filing status, state or product."""


class InvalidInputError(ValueError):
    """Client input is outside the modeled domain and was rejected before simulating."""
