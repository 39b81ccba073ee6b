"""Experiment harness: scenario overrides, replications, reports and plots."""
