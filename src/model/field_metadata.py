"""Field metadata for YearlyResult fields.

This module provides descriptions and short names for the YearlyResult
fields. Short names are used as column headers in the projection tables and
the MCP year detail.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class FieldInfo:
    """Metadata for a single field."""
    short_name: str  # Column header (unique, concise)
    description: str  # Full description of the field
    kind: str = 'money'  # 'money', 'flow', 'rate', 'count' or 'flag'

    @property
    def summable(self) -> bool:
        """Flows add up across years; balances, ages and rates do not."""
        return self.kind == 'flow'


FIELD_METADATA: Dict[str, FieldInfo] = {
    # Year Info
    "year": FieldInfo("Year", "Calendar year", 'count'),
    "age": FieldInfo("Age", "Client age during the year", 'count'),
    "spouse_age": FieldInfo("Spouse Age", "Spouse age during the year", 'count'),

    # Account Balances
    "traditional_balance": FieldInfo("Traditional", "Tax-deferred account end-of-year balance"),
    "roth_balance": FieldInfo("Roth", "Tax-free account end-of-year balance"),
    "taxable_balance": FieldInfo("Taxable", "Taxable account end-of-year balance"),
    "cash_balance": FieldInfo("Cash", "After-tax RMDs held as cash (no growth)"),
    "net_worth": FieldInfo("Net Worth", "Sum of all account balances"),

    # Distributions
    "rmd_amount": FieldInfo("RMD", "Required minimum distribution taken", 'flow'),
    "conversion_amount": FieldInfo("Conversion", "Amount converted to the Roth account", 'flow'),
    "cumulative_distributions": FieldInfo("Spent RMDs", "Cumulative after-tax RMDs spent"),

    # Income
    "ss_income": FieldInfo("Social Security", "Social Security benefits received", 'flow'),
    "taxable_ss": FieldInfo("Taxable SS", "Taxable portion of Social Security", 'flow'),
    "pension_income": FieldInfo("Pension", "Pension income", 'flow'),
    "other_income": FieldInfo("Other Income", "Other taxable income", 'flow'),
    "tax_exempt_income": FieldInfo("Tax-Exempt", "Tax-exempt interest", 'flow'),
    "gross_income": FieldInfo("Gross Income", "Total taxable income before deductions", 'flow'),
    "deductions": FieldInfo("Deductions", "Standard deduction including the age-65 addition", 'flow'),
    "taxable_income": FieldInfo("Taxable Income", "Gross income less deductions", 'flow'),
    "magi": FieldInfo("MAGI", "Modified adjusted gross income (IRMAA and NIIT basis)", 'flow'),

    # Taxes
    "federal_tax": FieldInfo("Federal Tax", "Federal income tax", 'flow'),
    "state_tax": FieldInfo("State Tax", "State income tax", 'flow'),
    "niit_tax": FieldInfo("NIIT", "Net investment income tax", 'flow'),
    "irmaa_surcharge": FieldInfo("IRMAA", "Medicare premium surcharge (two-year lookback)", 'flow'),
    "total_tax": FieldInfo("Total Tax", "Federal + state + NIIT + IRMAA", 'flow'),
    "conversion_tax": FieldInfo("Conversion Tax", "Marginal tax attributable to the conversion", 'flow'),
    "marginal_bracket": FieldInfo("Bracket", "Marginal federal tax bracket (percent)", 'rate'),

    # Product
    "surrender_charge_percent": FieldInfo("Surrender %", "Surrender charge in this contract year", 'rate'),
    "surrender_value": FieldInfo("Surrender Value", "Tax-deferred balance net of the surrender charge"),
    "aca_cliff_crossed": FieldInfo("ACA Cliff", "MAGI is above the premium subsidy cliff", 'flag'),
}


def get_short_name(field_name: str) -> str:
    """Get the short name for a field, or the field name if not found."""
    info = FIELD_METADATA.get(field_name)
    return info.short_name if info else field_name


def get_field_info(field_name: str) -> FieldInfo | None:
    """Get the full FieldInfo for a field, or None if not found."""
    return FIELD_METADATA.get(field_name)


def wrap_header(text: str, max_width: int) -> list[str]:
    """Wrap a header text into multiple lines to fit within max_width.

    Args:
        text: The header text to wrap
        max_width: Maximum width per line

    Returns:
        List of strings, each representing a line
    """
    if len(text) <= max_width:
        return [text]

    words = text.split()
    lines = []
    current_line = ""

    for word in words:
        if not current_line:
            current_line = word
        elif len(current_line) + 1 + len(word) <= max_width:
            current_line += " " + word
        else:
            lines.append(current_line)
            current_line = word

    if current_line:
        lines.append(current_line)

    return lines
