"""Core validation model: rules, outcomes, configuration and the validation engine."""
