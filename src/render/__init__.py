"""Render module for paycheck planning output display."""

from render.renderers import (
    BaseRenderer,
    PaycheckRenderer,
    WhatIfRenderer,
    WhatIfSweepRenderer,
    EmployerMatchRenderer,
    FireRenderer,
    WaterfallRenderer,
    YearlyProjectionRenderer,
    BracketsRenderer,
    CompareRenderer,
    RMDRenderer,
    RealEstateRenderer,
    PortfolioReturnsRenderer,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'PaycheckRenderer',
    'WhatIfRenderer',
    'WhatIfSweepRenderer',
    'EmployerMatchRenderer',
    'FireRenderer',
    'WaterfallRenderer',
    'YearlyProjectionRenderer',
    'BracketsRenderer',
    'CompareRenderer',
    'RMDRenderer',
    'RealEstateRenderer',
    'PortfolioReturnsRenderer',
    'RENDERER_REGISTRY',
]
