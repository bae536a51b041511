import sys
import os
import json
import logging
import argparse
from calc.breakeven import analyze_break_even
from calc.engine import SimulationEngine
from calc.multi_strategy import compare_strategies
from calc.sensitivity import run_sensitivity_analysis
from calc.widow import analyze_widow_penalty
from model.ClientRecord import ClientRecord
from model.errors import ConfigurationMissingError, InvalidInputError
from render.renderers import ProjectionRenderer, RENDERER_REGISTRY, parse_year_range


def client_path(args) -> str:
    """Resolve the client file from --client or the named input-parameters folder."""
    if args.client:
        return args.client
    return os.path.join(os.path.dirname(__file__), '../input-parameters', args.client_name, 'client.json')


def load_client(path: str) -> ClientRecord:
    with open(path, 'r') as f:
        return ClientRecord.from_dict(json.load(f))


def run(args) -> None:
    path = client_path(args)
    if not os.path.exists(path):
        print(f"Client file not found: {path}", file=sys.stderr)
        sys.exit(1)
    record = load_client(path)
    inp = record.to_simulation_input(args.start_year)
    engine = SimulationEngine.for_input(inp)

    if args.mode == 'projection':
        result = engine.run(inp)
        rows = result.baseline if args.scenario == 'baseline' else result.strategy
        start, end = parse_year_range(args.years, rows) if args.years else (None, None)
        ProjectionRenderer(start, end, args.scenario).render(result)
    elif args.mode in ('summary', 'gi'):
        RENDERER_REGISTRY[args.mode]().render(engine.run(inp))
    elif args.mode == 'breakeven':
        result = engine.run(inp)
        RENDERER_REGISTRY['breakeven']().render(analyze_break_even(result.baseline, result.strategy))
    elif args.mode == 'strategies':
        RENDERER_REGISTRY['strategies']().render(compare_strategies(engine, inp))
    elif args.mode == 'sensitivity':
        RENDERER_REGISTRY['sensitivity']().render(run_sensitivity_analysis(engine, inp))
    elif args.mode == 'widow':
        RENDERER_REGISTRY['widow']().render(analyze_widow_penalty(engine.tables, inp, args.death_year))


def main():
    parser = argparse.ArgumentParser(
        description='Roth conversion and guaranteed income simulator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  summary      Lifetime comparison of the conversion strategy against doing nothing (default)
  projection   Year-by-year balances, distributions and taxes for one scenario
  gi           Guaranteed income annuity phases and income comparison
  strategies   Compare every conversion strategy and pick the best
  sensitivity  Re-run under alternative growth and tax-rate assumptions
  breakeven    Years in which the strategy and the baseline trade the lead
  widow        Extra tax once a surviving spouse files single

Examples:
  python src/Program.py example
  python src/Program.py example --mode projection --years 2026-2035
  python src/Program.py example --mode projection --scenario baseline
  python src/Program.py --client path/to/client.json --mode strategies
  python src/Program.py example --mode widow --death-year 2040
        """
    )
    parser.add_argument('client_name', nargs='?', help='Name of the client (folder in input-parameters)')
    parser.add_argument('--client', '-c', help='Path to a client.json file')
    parser.add_argument('--mode', '-m',
                        choices=list(RENDERER_REGISTRY.keys()),
                        default='summary',
                        help='Output mode (default: summary)')
    parser.add_argument('--start-year', type=int, default=None,
                        help='First projection year (defaults to the current year)')
    parser.add_argument('--years', help="Year range for projection mode, e.g. '2026-2035', '2030-' or '-2040'")
    parser.add_argument('--scenario', choices=['strategy', 'baseline'], default='strategy',
                        help='Scenario shown in projection mode')
    parser.add_argument('--death-year', type=int, default=None, help='Year of the spouse\'s death for widow mode')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log each simulated year')

    args = parser.parse_args()

    if not args.client_name and not args.client:
        parser.error("client_name is required (or use --client to point at a client.json file)")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        run(args)
    except (ConfigurationMissingError, InvalidInputError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: client file is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
