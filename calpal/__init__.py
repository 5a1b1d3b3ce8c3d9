"""CalPal - sports fixture parsing and validation for calendar use.

Scraped date/time text goes through a multi-stage parser that records every
guess it makes, and each resulting fixture is classified into a data quality
tier before it is put on a calendar.
"""

__version__ = "0.1.0"
