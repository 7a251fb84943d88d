"""Weather awareness for pre-dawn runs: trail wetness, daylight and hazards."""

__version__ = "0.1.0"
