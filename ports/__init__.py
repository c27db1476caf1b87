from .people_search import PeopleSearchPort
from .source import SourcePort

__all__ = [
    "PeopleSearchPort",
    "SourcePort",
]
