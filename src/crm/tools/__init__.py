"""Real-estate calculators (mortgage, amortization, cap rate, commission, tax, ROI...)."""
