import os
import json
from typing import Optional


class StateDetails:
    """Flat-rate state and local income tax estimates keyed by ZIP code.

    States are resolved from the three-digit ZIP prefix table in
    state-tax-details.json; localities (city wage taxes) use the same prefixes.
    """

    def __init__(self, inflation_rate: float, final_year: int):
        self.inflation_rate = inflation_rate
        self.final_year = final_year

        ref_path = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..', 'reference', 'state-tax-details.json'))
        with open(ref_path, 'r') as f:
            data = json.load(f)

        self.base_year = data.get('baseYear')
        self.states = data.get('states', {})
        self.unknown = data.get('unknownState', {'code': '', 'name': 'Unknown', 'rate': 0.05, 'standardDeduction': 0})
        self.zip_prefixes = data.get('zipPrefixes', [])
        self.localities = data.get('localities', [])

        for entry in self.zip_prefixes:
            if entry.get('state') not in self.states:
                raise ValueError(f"state-tax-details.json maps ZIP prefixes to unknown state '{entry.get('state')}'")

    def _inflate(self, amount: float, to_year: Optional[int]) -> float:
        if amount is None:
            return 0.0
        if self.base_year is None or to_year is None or self.inflation_rate is None:
            return amount
        years = max(0, to_year - self.base_year)
        return amount * ((1.0 + float(self.inflation_rate)) ** years)

    @staticmethod
    def _prefix(zip_code: str) -> Optional[int]:
        if not zip_code or len(zip_code) < 3 or not zip_code[:3].isdigit():
            return None
        return int(zip_code[:3])

    def stateCode(self, zip_code: str) -> str:
        """Return the two-letter state code for a ZIP, or '' when it is not mapped."""
        prefix = self._prefix(zip_code)
        if prefix is None:
            return ''
        for entry in self.zip_prefixes:
            if entry['from'] <= prefix <= entry['to']:
                return entry['state']
        return ''

    def stateInfo(self, zip_code: str) -> dict:
        code = self.stateCode(zip_code)
        if not code:
            return dict(self.unknown)
        info = dict(self.states[code])
        info['code'] = code
        return info

    def stateName(self, zip_code: str) -> str:
        return self.stateInfo(zip_code)['name']

    def taxBurden(self, annual_taxable: float, zip_code: str, year: Optional[int] = None) -> float:
        """Annual state tax: flat state rate applied after the state standard deduction.

        States without an income tax have a rate of 0 and always return 0.
        """
        tax_year = year if year is not None else self.final_year
        info = self.stateInfo(zip_code)
        rate = info.get('rate', 0)
        if rate <= 0:
            return 0.0
        standard_deduction = self._inflate(info.get('standardDeduction', 0), tax_year)
        return max(0.0, annual_taxable - standard_deduction) * rate

    def locality(self, zip_code: str) -> Optional[dict]:
        """Return {name, rate} of the local income tax for a ZIP, or None."""
        prefix = self._prefix(zip_code)
        if prefix is None:
            return None
        for entry in self.localities:
            if entry['from'] <= prefix <= entry['to']:
                return {'name': entry['name'], 'rate': entry['rate']}
        return None

    def localTax(self, taxable: float, zip_code: str) -> float:
        local = self.locality(zip_code)
        if local is None:
            return 0.0
        return max(0.0, taxable) * local['rate']
