from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Union


class PeopleSearchPort(Protocol):
    def lookup(self, params: Dict[str, str]) -> Dict[str, Any]:
        ...

    def check_status(self, ids: Union[str, List[str]]) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        ...

    def search_employees(
        self,
        company_name: str,
        location: Optional[str] = None,
        start: int = 1,
        page_size: int = 10,
    ) -> List[Dict[str, Any]]:
        ...
