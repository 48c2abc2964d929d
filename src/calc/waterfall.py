from typing import List

from model.PaycheckResult import PaycheckResult


def waterfall_steps(result: PaycheckResult) -> List[dict]:
    """Ordered gross-to-net steps with the running remainder after each one.

    Local tax and post-tax deductions appear only when positive; any step with
    a zero amount is dropped. Each step carries its percent of gross pay.
    """
    taxes = result.taxes
    gross = result.gross_pay
    candidates = [('Pre-Tax Deductions', result.pre_tax_deductions),
                  ('Federal Tax', taxes.federal_tax),
                  ('State Tax', taxes.state_tax)]
    if taxes.local_tax > 0:
        candidates.append((taxes.local_tax_name or 'Local Tax', taxes.local_tax))
    candidates += [('Social Security', taxes.social_security),
                   ('Medicare', taxes.medicare)]
    if result.post_tax_deductions > 0:
        candidates.append(('Post-Tax Deductions', result.post_tax_deductions))

    def percent(amount: float) -> float:
        return max(amount / gross * 100, 0.0) if gross > 0 else 0.0

    steps = [{'label': 'Gross Pay', 'amount': gross, 'remaining': gross, 'percentOfGross': percent(gross)}]
    remaining = gross
    for label, amount in candidates:
        if amount <= 0:
            continue
        remaining -= amount
        steps.append({'label': label, 'amount': amount, 'remaining': remaining, 'percentOfGross': percent(amount)})
    return steps
