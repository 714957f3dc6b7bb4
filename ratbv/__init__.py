"""RATBV bus times: scraping and caching of Brașov bus timetables."""

__version__ = "1.0.0"
