import os
import sys
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
from dataclasses import replace
from calc.guaranteed_income_calculator import AnnuityContract, GuaranteedIncomeCalculator
from calc.products import RollUpOption, gi_product
from model.GuaranteedIncome import PHASES
from model.money import round_half_up

PRODUCT = 'american-equity-incomeshield-bonus-10'


@pytest.fixture
def gi_client(single_client):
    # Convert for three years, buy at 65, take income from 70
    return replace(single_client, product_id=PRODUCT, gi_conversion_years=3, income_start_age=70)


@pytest.fixture
def strategy_run(tables, gi_client):
    return GuaranteedIncomeCalculator(tables).calculate_strategy(gi_client)


@pytest.fixture
def baseline_run(tables, gi_client):
    return GuaranteedIncomeCalculator(tables).calculate_baseline(gi_client)


def test_phase_ages(gi_client):
    assert GuaranteedIncomeCalculator.phase_ages(gi_client) == (65, 70)
    # Income never starts in the purchase year
    assert GuaranteedIncomeCalculator.phase_ages(replace(gi_client, income_start_age=60)) == (65, 66)


def test_phases_run_in_order(strategy_run):
    phases = [g.phase for g in strategy_run.gi_years]
    assert phases[:3] == ['conversion'] * 3
    assert phases[3] == 'purchase'
    assert phases[4:8] == ['deferral'] * 4
    assert set(phases[8:]) == {'income'}
    order = [PHASES.index(p) for p in phases]
    assert order == sorted(order)


def test_purchase_uses_whole_roth_and_credits_bonus(strategy_run):
    before, purchase = strategy_run.gi_years[2], strategy_run.gi_years[3]
    assert purchase.purchase_amount == before.roth_balance
    bonus = round_half_up(purchase.purchase_amount * 10 / 100)
    assert purchase.bonus_amount == bonus
    # Bonus applies to both the income base and the account value
    assert purchase.income_base == purchase.purchase_amount + bonus
    assert purchase.account_value == (purchase.purchase_amount + bonus) + round_half_up((purchase.purchase_amount + bonus) * 7 / 100)


def test_simple_roll_up_and_rider_fee(strategy_run):
    original = strategy_run.gi_years[3].income_base
    for row in strategy_run.gi_years[4:8]:
        assert row.roll_up_amount == round_half_up(original * 8.25 / 100)
        assert row.rider_fee == round_half_up(row.income_base * 1.2 / 100)
    assert strategy_run.metrics.total_rider_fees == sum(g.rider_fee for g in strategy_run.gi_years)


def test_income_locks_and_stays_level(strategy_run):
    locked_base = strategy_run.gi_years[7].income_base
    metrics = strategy_run.metrics
    assert metrics.payout_percent == 7.25
    assert metrics.income_base_at_income_age == locked_base
    assert metrics.annual_income_gross == round_half_up(locked_base * 7.25 / 100)
    income_rows = [g for g in strategy_run.gi_years if g.phase == 'income']
    assert {g.guaranteed_income_gross for g in income_rows} == {metrics.annual_income_gross}
    assert metrics.lifetime_income_gross == metrics.annual_income_gross * len(income_rows)


def test_roth_income_is_tax_free(strategy_run):
    for g in strategy_run.gi_years:
        assert g.income_tax == 0
        assert g.guaranteed_income_net == g.guaranteed_income_gross


def test_account_value_floors_at_zero_and_income_continues(tables, gi_client):
    # No growth on a no-bonus product exhausts the account well before 90
    client = replace(gi_client, product_id='north-american-income-pay-pro', growth_rate=0)
    run = GuaranteedIncomeCalculator(tables).calculate_strategy(client)
    metrics = run.metrics
    assert metrics.depletion_age is not None
    assert metrics.depletion_age < client.end_age
    assert all(g.account_value >= 0 for g in run.gi_years)
    depleted = [g for g in run.gi_years if g.age >= metrics.depletion_age]
    assert all(g.account_value == 0 for g in depleted)
    assert {g.guaranteed_income_gross for g in depleted} == {metrics.annual_income_gross}
    assert metrics.annual_income_gross > 0


def test_fully_converted_ira_takes_no_rmds(strategy_run, baseline_run):
    # The strategy converts the whole IRA; the baseline buys at 65, before RMD age
    assert strategy_run.years[2].traditional_balance == 0
    for run in (strategy_run, baseline_run):
        assert all(y.rmd_amount == 0 for y in run.years)


def test_unconverted_remainder_takes_rmds(tables, gi_client):
    # A $3M IRA cannot be converted in three years at the 24% bracket
    client = replace(gi_client, product_id='athene-ascent-pro-10', traditional_balance=300000000)
    run = GuaranteedIncomeCalculator(tables).calculate_strategy(client)
    start_age = tables.rmd.start_age(client.birth_year)
    beginning = client.traditional_balance
    for row in run.years:
        expected = tables.rmd.calculate(row.age, beginning, client.birth_year).rmd_amount
        assert row.rmd_amount == expected
        if row.age < start_age:
            assert row.rmd_amount == 0
        elif beginning > 0:
            assert row.rmd_amount > 0
            assert row.gross_income >= row.rmd_amount
        beginning = row.traditional_balance
    assert any(y.rmd_amount > 0 for y in run.years)
    # Distributions draw the remainder down instead of letting it compound untouched
    assert run.years[-1].traditional_balance < max(y.traditional_balance for y in run.years)


def test_baseline_takes_rmds_before_a_late_purchase(tables, gi_client):
    client = replace(gi_client, age=70, birth_year=gi_client.start_year - 70, projection_years=20, end_age=90,
                     gi_conversion_years=6, income_start_age=78)
    run = GuaranteedIncomeCalculator(tables).calculate_baseline(client)
    start_age = tables.rmd.start_age(client.birth_year)
    pre_purchase = [y for y, g in zip(run.years, run.gi_years) if g.phase == 'conversion']
    assert [y.rmd_amount > 0 for y in pre_purchase] == [y.age >= start_age for y in pre_purchase]
    after = [y for y, g in zip(run.years, run.gi_years) if g.phase != 'conversion']
    assert all(y.rmd_amount == 0 for y in after)


def test_baseline_buys_inside_the_ira(baseline_run):
    assert all(g.conversion_amount == 0 for g in baseline_run.gi_years)
    before, purchase = baseline_run.gi_years[2], baseline_run.gi_years[3]
    assert purchase.purchase_amount == before.traditional_balance
    income_rows = [g for g in baseline_run.gi_years if g.phase == 'income']
    assert income_rows[0].income_tax > 0
    assert income_rows[0].guaranteed_income_net < income_rows[0].guaranteed_income_gross


def test_comparison(strategy_run, baseline_run):
    comparison = GuaranteedIncomeCalculator.compare(strategy_run.metrics, baseline_run.metrics)
    assert comparison.annual_income_advantage == (
        strategy_run.metrics.annual_income_net - baseline_run.metrics.annual_income_net)
    assert comparison.tax_free_wealth_created == comparison.lifetime_income_advantage
    if comparison.annual_income_advantage > 0:
        assert comparison.break_even_age >= strategy_run.metrics.income_start_age


def test_contract_rider_fee_deducted_from_account_value():
    contract = AnnuityContract(product=gi_product(PRODUCT))
    contract.purchase(10000000, 10)
    assert contract.income_base == 11000000
    assert contract.account_value == 11000000
    fee = contract.charge_rider_fee()
    assert fee == 132000
    assert contract.account_value == 11000000 - 132000
    assert contract.income_base == 11000000


def test_contract_without_bonus():
    contract = AnnuityContract(product=gi_product('north-american-income-pay-pro'))
    assert contract.purchase(10000000, 10) == 0
    assert contract.income_base == 10000000
    # Compound roll-up grows on the rolled-up base
    contract.roll_up(1)
    contract.roll_up(2)
    assert contract.income_base == 10000000 + 800000 + 864000


def test_contract_withdraw_never_negative():
    contract = AnnuityContract(product=gi_product(PRODUCT), account_value=100, annual_income=500)
    assert contract.withdraw() == 500
    assert contract.account_value == 0


def test_increasing_option_selects_its_table():
    product = gi_product('north-american-income-pay-pro')
    assert product.payout_percent(65) == 6.80
    assert product.payout_percent(65, payout_option='increasing') == 4.80
    assert product.payout_percent(65, 'joint') == 6.30
    # Ages are clamped to the table
    assert product.payout_percent(90) == 8.30
    assert gi_product(PRODUCT).payout_percent(70, payout_option='increasing') == 7.25


def elective_product():
    return replace(
        gi_product('north-american-income-pay-pro'),
        roll_up_options=(RollUpOption('simple', 'simple', 7, 10), RollUpOption('compound', 'compound', 6, 10)),
        default_roll_up_option='simple',
    )


def test_roll_up_terms_follow_the_elected_option():
    product = elective_product()
    assert product.roll_up_terms(1) == (7, 'simple')
    assert product.roll_up_terms(1, 'compound') == (6, 'compound')
    assert product.roll_up_terms(1, 'stepped') == (7, 'simple')
    assert product.roll_up_terms(11, 'compound') is None
    assert product.roll_up_terms(0) is None


def test_fixed_roll_up_ignores_the_option():
    assert gi_product(PRODUCT).roll_up_terms(1, 'compound') == (8.25, 'simple')
    athene = gi_product('athene-ascent-pro-10')
    assert athene.roll_up_terms(10) == (10, 'simple')
    assert athene.roll_up_terms(11) == (5, 'simple')
    assert athene.roll_up_terms(21) is None


def test_contract_rolls_up_with_the_elected_option():
    simple = AnnuityContract(product=elective_product())
    simple.purchase(10000000, 10)
    simple.roll_up(1)
    simple.roll_up(2)
    assert simple.income_base == 10000000 + 700000 + 700000

    compound = AnnuityContract(product=elective_product(), roll_up_option='compound')
    compound.purchase(10000000, 10)
    compound.roll_up(1)
    compound.roll_up(2)
    assert compound.income_base == 10000000 + 600000 + 636000


def test_client_roll_up_option_reaches_the_contract(tables, gi_client, monkeypatch):
    import calc.guaranteed_income_calculator as gi_module
    monkeypatch.setattr(gi_module, 'gi_product', lambda product_id: elective_product())
    calculator = GuaranteedIncomeCalculator(tables)
    simple = calculator.calculate_strategy(gi_client)
    compound = calculator.calculate_strategy(replace(gi_client, roll_up_option='compound'))
    base = simple.gi_years[3].income_base
    assert simple.gi_years[4].roll_up_amount == round_half_up(base * 7 / 100)
    assert compound.gi_years[4].roll_up_amount == round_half_up(base * 6 / 100)
