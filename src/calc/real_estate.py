"""Rental property, mortgage, rent-vs-buy and affordability calculators."""

from dataclasses import dataclass

from calc.pay_schedule import parse_number

CONSERVATIVE_FRONT_END_RATIO = 0.28
ESTIMATED_PROPERTY_TAX_RATE = 0.012
ESTIMATED_MONTHLY_INSURANCE = 150.0
PMI_RATE = 0.005
RENT_VS_BUY_YEARS = 10
RENT_VS_BUY_PAYMENTS = 360
HOME_APPRECIATION = 0.03


@dataclass
class RealEstateInputs:
    purchase_price: float = 300000.0
    down_payment_percent: float = 20.0
    interest_rate_percent: float = 7.0
    loan_term_years: int = 30
    monthly_rent: float = 2000.0
    property_tax_rate_percent: float = 1.2
    insurance_annual: float = 1500.0
    maintenance_percent: float = 1.0
    vacancy_rate_percent: float = 5.0
    appreciation_rate_percent: float = 3.0
    rent_increase_percent: float = 3.0
    investment_return_percent: float = 7.0
    monthly_debts: float = 0.0
    dti_limit_percent: float = 36.0

    @classmethod
    def from_spec(cls, spec: dict) -> 'RealEstateInputs':
        data = spec.get('realEstate') or {}
        defaults = cls()
        return cls(
            purchase_price=parse_number(data.get('purchasePrice'), defaults.purchase_price),
            down_payment_percent=parse_number(data.get('downPaymentPercent'), defaults.down_payment_percent),
            interest_rate_percent=parse_number(data.get('interestRatePercent'), defaults.interest_rate_percent),
            loan_term_years=int(parse_number(data.get('loanTermYears'), defaults.loan_term_years)),
            monthly_rent=parse_number(data.get('monthlyRent'), defaults.monthly_rent),
            property_tax_rate_percent=parse_number(data.get('propertyTaxRatePercent'), defaults.property_tax_rate_percent),
            insurance_annual=parse_number(data.get('insuranceAnnual'), defaults.insurance_annual),
            maintenance_percent=parse_number(data.get('maintenancePercent'), defaults.maintenance_percent),
            vacancy_rate_percent=parse_number(data.get('vacancyRatePercent'), defaults.vacancy_rate_percent),
            appreciation_rate_percent=parse_number(data.get('appreciationRatePercent'), defaults.appreciation_rate_percent),
            rent_increase_percent=parse_number(data.get('rentIncreasePercent'), defaults.rent_increase_percent),
            investment_return_percent=parse_number(data.get('investmentReturnPercent'), defaults.investment_return_percent),
            monthly_debts=parse_number(data.get('monthlyDebts'), defaults.monthly_debts),
            dti_limit_percent=parse_number(data.get('dtiLimitPercent'), defaults.dti_limit_percent),
        )


def monthly_payment(principal: float, annual_rate_percent: float, years: float) -> float:
    """Fixed-rate mortgage payment; a zero rate repays principal evenly."""
    payments = years * 12
    if principal <= 0 or payments <= 0:
        return 0.0
    rate = annual_rate_percent / 100 / 12
    if rate == 0:
        return principal / payments
    growth = (1 + rate) ** payments
    return principal * rate * growth / (growth - 1)


def loan_from_payment(payment: float, annual_rate_percent: float, years: float) -> float:
    """Largest principal a monthly payment can carry; 0 for non-positive payment or rate."""
    rate = annual_rate_percent / 100 / 12
    payments = years * 12
    if payment <= 0 or rate <= 0:
        return 0.0
    growth = (1 + rate) ** payments
    return payment * (growth - 1) / (rate * growth)


def investment_analysis(inputs: RealEstateInputs) -> dict:
    price = inputs.purchase_price
    down_payment = inputs.down_payment_percent / 100 * price
    loan_amount = price - down_payment
    mortgage = monthly_payment(loan_amount, inputs.interest_rate_percent, inputs.loan_term_years)

    property_tax = price * inputs.property_tax_rate_percent / 100 / 12
    insurance = inputs.insurance_annual / 12
    maintenance = price * inputs.maintenance_percent / 100 / 12
    effective_rent = inputs.monthly_rent * (1 - inputs.vacancy_rate_percent / 100)

    total_expenses = mortgage + property_tax + insurance + maintenance
    monthly_cash_flow = effective_rent - total_expenses
    annual_cash_flow = monthly_cash_flow * 12
    noi = effective_rent * 12 - (property_tax + insurance + maintenance) * 12
    cap_rate = noi / price * 100 if price > 0 else 0.0
    cash_on_cash = annual_cash_flow / down_payment * 100 if down_payment > 0 else 0.0

    projection = []
    value = price
    equity = down_payment
    remaining_loan = loan_amount
    # Equity assumes straight-line principal paydown
    yearly_principal = loan_amount / inputs.loan_term_years if inputs.loan_term_years > 0 else 0.0
    for year in range(11):
        projection.append({'year': year, 'propertyValue': value, 'equity': equity,
                           'cumulativeCashFlow': annual_cash_flow * year})
        value *= 1 + inputs.appreciation_rate_percent / 100
        equity = value - remaining_loan + yearly_principal
        remaining_loan -= yearly_principal

    return {
        'downPayment': down_payment,
        'loanAmount': loan_amount,
        'monthlyMortgage': mortgage,
        'monthlyPropertyTax': property_tax,
        'monthlyInsurance': insurance,
        'monthlyMaintenance': maintenance,
        'effectiveRent': effective_rent,
        'totalExpenses': total_expenses,
        'monthlyCashFlow': monthly_cash_flow,
        'annualCashFlow': annual_cash_flow,
        'noi': noi,
        'capRate': cap_rate,
        'cashOnCash': cash_on_cash,
        'projection': projection,
    }


def amortization_schedule(price: float, down_payment: float, annual_rate_percent: float, years: int = 30) -> dict:
    """Yearly principal, interest and balance for a fixed-rate loan."""
    loan_amount = price - down_payment
    payment = monthly_payment(loan_amount, annual_rate_percent, years)
    rate = annual_rate_percent / 100 / 12
    total_payment = payment * years * 12

    schedule = []
    balance = loan_amount
    principal_paid = 0.0
    interest_paid = 0.0
    for year in range(1, years + 1):
        yearly_principal = 0.0
        yearly_interest = 0.0
        for _ in range(12):
            interest = balance * rate
            principal = payment - interest
            yearly_interest += interest
            yearly_principal += principal
            balance -= principal
        principal_paid += yearly_principal
        interest_paid += yearly_interest
        schedule.append({
            'year': year,
            'principal': yearly_principal,
            'interest': yearly_interest,
            'balance': max(0.0, balance),
            'totalPaid': principal_paid + interest_paid,
        })

    return {
        'loanAmount': loan_amount,
        'monthlyPayment': payment,
        'totalPayment': total_payment,
        'totalInterest': total_payment - loan_amount,
        'schedule': schedule,
    }


def rent_vs_buy(monthly_rent: float, rent_increase_percent: float, price: float, down_payment_percent: float,
                annual_rate_percent: float, investment_return_percent: float) -> dict:
    """Ten-year wealth comparison of renting (investing the down payment) against buying."""
    down = down_payment_percent / 100 * price
    loan_balance = price - down
    rate = annual_rate_percent / 100 / 12
    mortgage = monthly_payment(loan_balance, annual_rate_percent, RENT_VS_BUY_PAYMENTS / 12)

    rows = []
    total_rent = 0.0
    rent = monthly_rent
    investment = down
    home_value = price
    for year in range(1, RENT_VS_BUY_YEARS + 1):
        total_rent += rent * 12
        investment *= 1 + investment_return_percent / 100
        rent *= 1 + rent_increase_percent / 100

        home_value *= 1 + HOME_APPRECIATION
        for _ in range(12):
            interest = loan_balance * rate
            loan_balance -= mortgage - interest
        rows.append({
            'year': year,
            'rentWealth': investment - total_rent,
            'buyWealth': home_value - max(0.0, loan_balance),
            'totalRentPaid': total_rent,
            'homeValue': home_value,
        })
    return {'monthlyMortgage': mortgage, 'years': rows}


def affordability(annual_income: float, monthly_debts: float, down_payment: float,
                  annual_rate_percent: float, term_years: int = 30, dti_limit_percent: float = 36) -> dict:
    """Maximum home price under a debt-to-income limit and under the 28% front-end ratio."""
    monthly_income = annual_income / 12
    max_housing_payment = monthly_income * dti_limit_percent / 100 - monthly_debts
    conservative_payment = monthly_income * CONSERVATIVE_FRONT_END_RATIO

    max_loan = loan_from_payment(max_housing_payment, annual_rate_percent, term_years)
    conservative_loan = loan_from_payment(conservative_payment, annual_rate_percent, term_years)
    max_price = max_loan + down_payment

    estimated_tax = max_price * ESTIMATED_PROPERTY_TAX_RATE / 12
    estimated_pmi = max_loan * PMI_RATE / 12 if down_payment < max_price * 0.2 else 0.0

    return {
        'monthlyIncome': monthly_income,
        'maxHousingPayment': max_housing_payment,
        'conservativePayment': conservative_payment,
        'maxLoan': max_loan,
        'maxHomePrice': max_price,
        'conservativePrice': conservative_loan + down_payment,
        'currentDti': monthly_debts / monthly_income * 100 if monthly_income > 0 else 0.0,
        'projectedDti': (monthly_debts + max_housing_payment) / monthly_income * 100 if monthly_income > 0 else 0.0,
        'breakdown': {
            'principalAndInterest': max_housing_payment - estimated_tax - ESTIMATED_MONTHLY_INSURANCE - estimated_pmi,
            'tax': estimated_tax,
            'insurance': ESTIMATED_MONTHLY_INSURANCE,
            'pmi': estimated_pmi,
        },
    }


def rent_vs_buy_for(inputs: RealEstateInputs) -> dict:
    """rent_vs_buy for a 'realEstate' block: its rent against buying at its price."""
    return rent_vs_buy(inputs.monthly_rent, inputs.rent_increase_percent, inputs.purchase_price,
                       inputs.down_payment_percent, inputs.interest_rate_percent,
                       inputs.investment_return_percent)


def affordability_for(inputs: RealEstateInputs, annual_income: float) -> dict:
    down_payment = inputs.purchase_price * inputs.down_payment_percent / 100
    result = affordability(annual_income, inputs.monthly_debts, down_payment, inputs.interest_rate_percent,
                           inputs.loan_term_years, inputs.dti_limit_percent)
    result['annualIncome'] = annual_income
    result['withinBudget'] = inputs.purchase_price <= result['maxHomePrice']
    return result
