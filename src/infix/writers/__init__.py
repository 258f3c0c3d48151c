"""Writers that turn a Calculation back into source text."""
