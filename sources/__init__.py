# Importing the package registers the built-in sources
from . import csv_import  # noqa: F401
from . import people_search  # noqa: F401
