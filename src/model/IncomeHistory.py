from typing import Dict, Optional


class IncomeHistory:
    """Year -> MAGI record used for the Medicare two-year lookback.

    One instance belongs to exactly one simulation run. Runners create a fresh
    history at the start of every run and record each year's MAGI as they go.
    """

    def __init__(self):
        self._magi_by_year: Dict[int, int] = {}

    def record(self, year: int, magi: int):
        self._magi_by_year[year] = magi

    def magi_for(self, year: int) -> Optional[int]:
        return self._magi_by_year.get(year)

    def __contains__(self, year: int) -> bool:
        return year in self._magi_by_year

    def __len__(self) -> int:
        return len(self._magi_by_year)
