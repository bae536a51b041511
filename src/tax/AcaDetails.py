import json
import os

from model.TaxResults import AcaResult


class AcaDetails:
    """Affordable Care Act premium-subsidy cliff at a multiple of the federal poverty level."""

    def __init__(self):
        ref_path = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..', 'reference', 'federal-poverty.json'))
        with open(ref_path, 'r') as f:
            data = json.load(f)
        self.guidelines = data["guidelines"]
        self.cliff_percent = data.get("cliffPercent", 400)
        self.estimated_subsidy_loss = data.get("estimatedSubsidyLoss", 0)
        self.max_age = data.get("maxAge", 65)

    def poverty_level(self, household_size: int, state: str = '') -> int:
        """Federal poverty guideline for a household; Alaska and Hawaii have their own tables."""
        g = self.guidelines.get((state or '').upper(), self.guidelines["contiguous"])
        return g["base"] + g["perAdditionalPerson"] * max(0, household_size - 1)

    def cliff_amount(self, household_size: int, state: str = '') -> int:
        return self.poverty_level(household_size, state) * self.cliff_percent // 100

    def cliff_impact(self, magi: int, household_size: int, state: str, age: int) -> AcaResult:
        """Whether MAGI crosses the subsidy cliff for a pre-Medicare household."""
        fpl = self.poverty_level(household_size, state)
        cliff = self.cliff_amount(household_size, state)
        percent = (magi / fpl) * 100 if fpl > 0 else 0.0
        if age >= self.max_age:
            return AcaResult(applies=False, crosses_cliff=False, cliff_amount=cliff,
                             percent_of_fpl=percent, estimated_subsidy_loss=0)
        crosses = magi > cliff
        return AcaResult(
            applies=True,
            crosses_cliff=crosses,
            cliff_amount=cliff,
            percent_of_fpl=percent,
            estimated_subsidy_loss=self.estimated_subsidy_loss if crosses else 0
        )
