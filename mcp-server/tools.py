"""Roth Conversion Planner Tools for MCP Server.

This module provides the tool implementations that wrap the simulation
engine and analyses and expose their results through MCP. Money in every
payload is integer cents, as produced by the engine.
"""

import os
import sys
import json
import logging
from dataclasses import asdict
from typing import Dict, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from calc.breakeven import analyze_break_even
from calc.engine import SimulationEngine
from calc.multi_strategy import compare_strategies
from calc.products import gi_products, growth_products
from calc.sensitivity import format_sensitivity_summary, run_sensitivity_analysis
from calc.strategies import all_strategies
from calc.widow import analyze_widow_penalty
from model.ClientRecord import ClientRecord
from model.SimulationInput import SimulationInput
from model.YearlyResult import SimulationResult

logger = logging.getLogger(__name__)


class ClientTools:
    """Tools that run the simulation for one client record."""

    def __init__(self, base_path: str, client_name: str, start_year: Optional[int] = None):
        """Load and normalize the client record.

        Args:
            base_path: Path to the planner root directory
            client_name: Name of the client folder in input-parameters
            start_year: First projection year (defaults to the current year)
        """
        self.base_path = base_path
        self.client_name = client_name
        self.record = self._load_record()
        self.inp: SimulationInput = self.record.to_simulation_input(start_year)
        self.engine = SimulationEngine.for_input(self.inp)
        self._result: Optional[SimulationResult] = None

    def _load_record(self) -> ClientRecord:
        path = os.path.join(self.base_path, 'input-parameters', self.client_name, 'client.json')
        with open(path, 'r') as f:
            return ClientRecord.from_dict(json.load(f))

    @property
    def result(self) -> SimulationResult:
        if self._result is None:
            self._result = self.engine.run(self.inp)
        return self._result

    def overview(self) -> dict:
        inp = self.inp
        return {
            "name": inp.name,
            "filing_status": inp.filing_status,
            "age": inp.age,
            "first_year": inp.start_year,
            "last_year": inp.end_year,
            "product_id": inp.product_id,
            "strategy": inp.strategy,
            "input_hash": self.record.input_hash(),
        }

    def run_projection(self, include_years: bool = True) -> dict:
        result = self.result
        payload = {
            "client": self.client_name,
            "input_hash": self.record.input_hash(),
            "break_even_age": result.break_even_age,
            "total_tax_savings": result.total_tax_savings,
            "heir_benefit": result.heir_benefit,
            "metrics": asdict(result.metrics) if result.metrics else None,
            "ending": {
                "baseline_net_worth": result.baseline[-1].net_worth,
                "strategy_net_worth": result.strategy[-1].net_worth,
            },
        }
        if result.gi_metrics is not None:
            payload["gi_metrics"] = asdict(result.gi_metrics)
            payload["gi_baseline_metrics"] = asdict(result.gi_baseline_metrics)
            payload["gi_comparison"] = asdict(result.gi_comparison)
        if include_years:
            payload["baseline"] = [y.to_dict() for y in result.baseline]
            payload["strategy"] = [y.to_dict() for y in result.strategy]
            if result.gi_year_data is not None:
                payload["gi_year_data"] = [asdict(g) for g in result.gi_year_data]
        return payload

    def compare_strategies(self) -> dict:
        comparison = compare_strategies(self.engine, self.inp)
        return {
            "client": self.client_name,
            "best_strategy": comparison.best_strategy,
            "strategies": {key: asdict(m) for key, m in comparison.metrics.items()},
        }

    def run_sensitivity(self) -> dict:
        result = run_sensitivity_analysis(self.engine, self.inp)
        return {
            "client": self.client_name,
            "outcomes": [asdict(o) for o in result.outcomes],
            "break_even_min": result.break_even_min,
            "break_even_max": result.break_even_max,
            "wealth_min": result.wealth_min,
            "wealth_max": result.wealth_max,
            "summary": asdict(format_sensitivity_summary(result)),
        }

    def analyze_breakeven(self) -> dict:
        analysis = analyze_break_even(self.result.baseline, self.result.strategy)
        payload = asdict(analysis)
        payload["client"] = self.client_name
        return payload

    def analyze_widow_penalty(self, death_year: Optional[int] = None) -> dict:
        analysis = analyze_widow_penalty(self.engine.tables, self.inp, death_year)
        return {
            "client": self.client_name,
            "death_year": analysis.death_year,
            "married_years": len(analysis.married_years),
            "widow_years": len(analysis.widow_years),
            "impacts": [asdict(i) for i in analysis.impacts],
            "total_additional_tax": analysis.total_additional_tax,
            "average_bracket_jump": analysis.average_bracket_jump,
            "recommended_conversion_increase": analysis.recommended_conversion_increase,
        }

    def get_year_detail(self, year: int) -> dict:
        rows = self.result.get_year(year)
        if not rows:
            return {"error": f"Year {year} is outside the projection ({self.inp.start_year}-{self.inp.end_year})"}
        payload = {label: row.to_dict() for label, row in rows.items()}
        if self.result.gi_year_data is not None:
            gi = next((g for g in self.result.gi_year_data if g.year == year), None)
            payload["gi"] = asdict(gi) if gi else None
        payload["year"] = year
        payload["client"] = self.client_name
        return payload


class MultiClientTools:
    """Manager for every client record under input-parameters.

    Discovers the available clients and caches their simulations, allowing
    queries to specify which client to use.
    """

    def __init__(self, base_path: str, default_client: Optional[str] = None, start_year: Optional[int] = None):
        self.base_path = base_path
        self.start_year = start_year
        self.clients: Dict[str, ClientTools] = {}
        self.default_client = default_client
        self._discover_clients()

    def _discover_clients(self):
        input_params_path = os.path.join(self.base_path, 'input-parameters')

        if not os.path.exists(input_params_path):
            return

        for name in sorted(os.listdir(input_params_path)):
            client_path = os.path.join(input_params_path, name, 'client.json')
            if not os.path.exists(client_path):
                continue
            try:
                self.clients[name] = ClientTools(self.base_path, name, self.start_year)
            except (ValueError, OSError) as e:
                # A broken record must not hide the others
                logger.warning("Failed to load client '%s': %s", name, e)

        if self.default_client is None and self.clients:
            self.default_client = next(iter(self.clients))

    def _get_client(self, client: Optional[str] = None) -> ClientTools:
        client_name = client or self.default_client
        if client_name not in self.clients:
            raise ValueError(f"Client '{client_name}' not found. Available clients: {list(self.clients)}")
        return self.clients[client_name]

    def list_clients(self) -> dict:
        return {
            "available_clients": list(self.clients),
            "default_client": self.default_client,
            "clients_info": {name: tools.overview() for name, tools in self.clients.items()},
        }

    def reload_clients(self) -> dict:
        """Reload all client records from disk, dropping cached simulations."""
        old_clients = set(self.clients)
        self.clients.clear()
        self.default_client = None
        self._discover_clients()
        new_clients = set(self.clients)
        return {
            "status": "success",
            "message": f"Reloaded {len(self.clients)} clients",
            "clients_loaded": list(self.clients),
            "default_client": self.default_client,
            "changes": {
                "added": sorted(new_clients - old_clients),
                "removed": sorted(old_clients - new_clients),
                "reloaded": sorted(old_clients & new_clients),
            },
        }

    def list_products(self) -> dict:
        return {
            "strategies": {key: asdict(s) for key, s in all_strategies().items()},
            "growth_products": {key: asdict(p) for key, p in growth_products().items()},
            "guaranteed_income_products": {
                key: {
                    "label": p.label,
                    "bonus_applies_to": p.bonus_applies_to,
                    "rider_fee": p.rider_fee,
                    "roll_up_type": p.roll_up_type,
                    "roll_up_max_period": p.roll_up_max_period,
                    "roll_up_options": [o.option_id for o in p.roll_up_options],
                    "payout_options": sorted(p.payout_tables),
                    "roll_up_description": p.roll_up_description,
                }
                for key, p in gi_products().items()
            },
        }

    def run_projection(self, client: Optional[str] = None, include_years: bool = True) -> dict:
        return self._get_client(client).run_projection(include_years)

    def compare_strategies(self, client: Optional[str] = None) -> dict:
        return self._get_client(client).compare_strategies()

    def run_sensitivity(self, client: Optional[str] = None) -> dict:
        return self._get_client(client).run_sensitivity()

    def analyze_breakeven(self, client: Optional[str] = None) -> dict:
        return self._get_client(client).analyze_breakeven()

    def analyze_widow_penalty(self, death_year: Optional[int] = None, client: Optional[str] = None) -> dict:
        return self._get_client(client).analyze_widow_penalty(death_year)

    def get_year_detail(self, year: int, client: Optional[str] = None) -> dict:
        return self._get_client(client).get_year_detail(year)
