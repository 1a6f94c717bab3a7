"""Country list from the compliance rules data"""
from typing import List

from supabase import Client  # type: ignore


class CountryRepository:
    """Read-only access to the countries known to the compliance rules"""
    
    def __init__(self, client: Client, table_name: str = "compliance_rules_comprehensive"):
        self._client = client
        self._table_name = table_name
    
    async def list_countries(self) -> List[str]:
        """Distinct country names, sorted"""
        response = self._client.table(self._table_name).select("country_name").execute()
        names = {row["country_name"] for row in response.data or [] if row.get("country_name")}
        return sorted(names)
