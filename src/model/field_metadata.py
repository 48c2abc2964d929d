"""Field metadata for PlanData fields.

This module provides descriptions and short names for all PlanData fields.
Short names are used as column headers in tables and the shell 'get' command.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class FieldInfo:
    """Metadata for a single field."""
    short_name: str  # Column header (unique, concise)
    description: str  # Full description of the field


FIELD_METADATA: Dict[str, FieldInfo] = {
    # Program
    "tax_year": FieldInfo("Tax Year", "Tax year used for brackets and wage base"),
    "zip_code": FieldInfo("ZIP", "Work location ZIP code"),
    "state_name": FieldInfo("State", "State resolved from the ZIP code"),
    "local_tax_name": FieldInfo("Locality", "City or county levying a local income tax"),
    "filing_status": FieldInfo("Filing Status", "single, married, married_separately or head_of_household"),
    "allowances": FieldInfo("Allowances", "Withholding allowances claimed"),
    "pay_frequency": FieldInfo("Pay Frequency", "weekly, biweekly, semimonthly or monthly"),
    "pay_periods_per_year": FieldInfo("Pay Periods", "Number of paychecks per year"),

    # Paycheck
    "gross_pay": FieldInfo("Gross Pay", "Gross pay per paycheck"),
    "pre_tax_deductions": FieldInfo("Pre-Tax Ded", "Pre-tax deductions per paycheck (401k, HSA, premiums)"),
    "taxable_income": FieldInfo("Taxable", "Gross pay less pre-tax deductions"),
    "federal_tax": FieldInfo("Federal W/H", "Federal income tax withheld per paycheck"),
    "state_tax": FieldInfo("State W/H", "State income tax withheld per paycheck"),
    "local_tax": FieldInfo("Local W/H", "Local income tax withheld per paycheck"),
    "social_security": FieldInfo("SS W/H", "Social Security tax per paycheck"),
    "medicare": FieldInfo("Medicare W/H", "Medicare tax per paycheck, surcharge included"),
    "total_taxes": FieldInfo("Total Taxes", "All taxes withheld per paycheck"),
    "post_tax_deductions": FieldInfo("Post-Tax Ded", "Post-tax deductions per paycheck (Roth, loans)"),
    "net_pay": FieldInfo("Net Pay", "Take-home pay per paycheck"),

    # Yearly projection
    "annual_gross": FieldInfo("Annual Gross", "Gross pay for the year"),
    "annual_pre_tax_deductions": FieldInfo("Annual Pre-Tax", "Pre-tax deductions for the year"),
    "annual_taxable_income": FieldInfo("Annual Taxable", "Taxable income for the year"),
    "annual_federal_tax": FieldInfo("Annual Federal", "Federal withholding for the year"),
    "annual_state_tax": FieldInfo("Annual State", "State withholding for the year"),
    "annual_local_tax": FieldInfo("Annual Local", "Local withholding for the year"),
    "annual_social_security": FieldInfo("Annual SS", "Social Security for the year, capped at the wage base"),
    "annual_medicare": FieldInfo("Annual Medicare", "Medicare for the year"),
    "annual_total_taxes": FieldInfo("Annual Taxes", "All taxes for the year"),
    "effective_tax_rate": FieldInfo("Eff Rate", "Effective tax rate (total taxes / gross)"),
    "annual_post_tax_deductions": FieldInfo("Annual Post-Tax", "Post-tax deductions for the year"),
    "annual_net_pay": FieldInfo("Annual Net", "Take-home pay for the year"),
    "monthly_net_pay": FieldInfo("Monthly Net", "Annual take-home pay divided by 12"),
}


def get_short_name(field_name: str) -> str:
    """Get the short name for a field, or the field name if not found."""
    info = FIELD_METADATA.get(field_name)
    return info.short_name if info else field_name


def get_description(field_name: str) -> str:
    """Get the description for a field, or empty string if not found."""
    info = FIELD_METADATA.get(field_name)
    return info.description if info else ""


def get_field_info(field_name: str) -> FieldInfo | None:
    return FIELD_METADATA.get(field_name)


def wrap_header(text: str, max_width: int) -> list[str]:
    """Wrap a header text into multiple lines to fit within max_width.

    Words are split on spaces and distributed across lines to minimize
    the total number of lines while staying within max_width.
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
