"""Growth / fixed-indexed-annuity variant of the conversion strategy.

Same year loop as the strategy scenario, with the contract details of a growth
product: a premium bonus, anniversary bonuses credited on the post-interest
value during the first contract years, and a surrender schedule reported as a
surrender value each year.
"""

from calc.products import GrowthProduct, growth_product
from calc.strategy_calculator import StrategyCalculator
from model.SimulationInput import SimulationInput
from model.money import round_half_up


class GrowthCalculator(StrategyCalculator):
    @staticmethod
    def product(inp: SimulationInput) -> GrowthProduct:
        return growth_product(inp.product_id or 'fia')

    def anniversary_terms(self, inp: SimulationInput):
        """(percent, years) of anniversary bonus; client values override the product's."""
        product = self.product(inp)
        percent = inp.anniversary_bonus_percent
        years = inp.anniversary_bonus_years
        if percent is None:
            percent = product.anniversary_bonus_percent
        if years is None:
            years = product.anniversary_bonus_years if inp.anniversary_bonus_percent is None else 3
        return percent, years

    def surrender_schedule(self, inp: SimulationInput) -> tuple:
        if inp.surrender_schedule is not None:
            return inp.surrender_schedule
        return self.product(inp).surrender_schedule

    def anniversary_credit(self, inp: SimulationInput, contract_year: int, traditional: int) -> int:
        percent, years = self.anniversary_terms(inp)
        if percent <= 0 or contract_year > years or traditional <= 0:
            return 0
        return round_half_up(traditional * percent / 100)

    def surrender_fields(self, inp: SimulationInput, contract_year: int, traditional: int) -> dict:
        schedule = self.surrender_schedule(inp)
        charge = schedule[contract_year - 1] if contract_year <= len(schedule) else 0
        return {
            'surrender_charge_percent': charge,
            'surrender_value': traditional - round_half_up(traditional * charge / 100),
        }
