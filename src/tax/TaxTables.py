from dataclasses import dataclass

from tax.AcaDetails import AcaDetails
from tax.FederalDetails import FederalDetails
from tax.MedicareDetails import MedicareDetails
from tax.NiitDetails import NiitDetails
from tax.RmdDetails import RmdDetails
from tax.SocialSecurityDetails import SocialSecurityDetails
from tax.StateDetails import StateDetails


@dataclass(frozen=True)
class TaxTables:
    """Every tax-law module a run needs, loaded once for a horizon."""
    federal: FederalDetails
    state: StateDetails
    rmd: RmdDetails
    social_security: SocialSecurityDetails
    niit: NiitDetails
    medicare: MedicareDetails
    aca: AcaDetails
    final_year: int

    @classmethod
    def load(cls, final_year: int) -> 'TaxTables':
        return cls(
            federal=FederalDetails(final_year),
            state=StateDetails(),
            rmd=RmdDetails(),
            social_security=SocialSecurityDetails(),
            niit=NiitDetails(),
            medicare=MedicareDetails(final_year),
            aca=AcaDetails(),
            final_year=final_year,
        )
